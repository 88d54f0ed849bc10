"""
Solve Pipeline - Orchestrates one clue solve through every domain.

Recognition and extraction each run as their own task and are awaited
before the next phase starts; filtering, scoring and ranking follow inline.
The knowledge base merge is submitted last and not awaited.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from cluegraph.adapters.sparql import SparqlClient
from cluegraph.config import ClueGraphError, ErrorCode, InvalidClueError, Settings, get_settings
from cluegraph.domains.clues import Clue, KnowledgeGraphClient, Solution, SolutionFilter
from cluegraph.domains.extraction import CandidateExtractor, DomainOntology, Extractor
from cluegraph.domains.knowledge import KnowledgeBase, SolvedClueStore
from cluegraph.domains.recognition import EntityRecognizer, Recognizer
from cluegraph.domains.scoring import Scorer, SolutionScorer

from .contracts import NullProgressListener, ProgressListener
from .models import PipelineState, RankedSolution, SolveOutcome, SolveReport

logger = logging.getLogger(__name__)

__all__ = ["SolvePipeline", "rank_solutions"]

NO_SOLUTIONS_MESSAGE = "No solutions found"

T = TypeVar("T")


def rank_solutions(solutions: list[Solution]) -> list[Solution]:
    """Stable sort by score, highest first, keeping the first of each text."""
    ranked: list[Solution] = []
    seen: set[str] = set()
    for solution in sorted(solutions, key=lambda s: s.score, reverse=True):
        if solution.solution_text in seen:
            continue
        seen.add(solution.solution_text)
        ranked.append(solution)
    return ranked


class SolvePipeline:
    """
    Main clue solving pipeline.

    Coordinates:
    - Entity recognition
    - Candidate extraction
    - Structural filtering
    - Scoring and ranking
    - Learning confirmed solutions

    Example:
        >>> pipeline = SolvePipeline.from_settings()
        >>> outcome = await pipeline.solve("Capital of France [5]")
        >>> print(outcome.report.message)
    """

    def __init__(
        self,
        recognizer: Recognizer,
        extractor: Extractor,
        scorer: Scorer,
        knowledge_base: SolvedClueStore | None = None,
        solution_filter: SolutionFilter | None = None,
        listener: ProgressListener | None = None,
        phase_timeout: float | None = None,
        scoring_concurrency: int = 1,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            recognizer: Entity recognizer
            extractor: Candidate extractor
            scorer: Solution scorer
            knowledge_base: Store that learns scored solutions
            solution_filter: Structural filter
            listener: Receives progress, results and readiness
            phase_timeout: Seconds allowed for recognition and for extraction
            scoring_concurrency: Solutions scored at once
        """
        self._recognizer = recognizer
        self._extractor = extractor
        self._scorer = scorer
        self._knowledge_base = knowledge_base
        self._filter = solution_filter or SolutionFilter()
        self._listener = listener or NullProgressListener()
        self._phase_timeout = phase_timeout
        self._scoring_concurrency = max(1, scoring_concurrency)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        client: KnowledgeGraphClient | None = None,
        knowledge_base: SolvedClueStore | None = None,
        listener: ProgressListener | None = None,
    ) -> SolvePipeline:
        """
        Wire a pipeline from application settings.

        Raises:
            OntologyError: Domain ontology cannot be loaded
        """
        settings = settings or get_settings()
        client = client or SparqlClient.from_settings(settings)
        ontology = DomainOntology.from_settings(settings)
        return cls(
            recognizer=EntityRecognizer.from_settings(client, settings),
            extractor=CandidateExtractor.from_settings(client, ontology, settings),
            scorer=SolutionScorer.from_settings(client, ontology, settings),
            knowledge_base=knowledge_base or KnowledgeBase.from_settings(settings),
            solution_filter=SolutionFilter(settings.language),
            listener=listener,
            phase_timeout=settings.phase_timeout_seconds,
            scoring_concurrency=settings.scoring_concurrency,
        )

    @property
    def knowledge_base(self) -> SolvedClueStore | None:
        return self._knowledge_base

    async def solve(self, raw_text: str, fill_in_blank: bool | None = None) -> SolveOutcome:
        """
        Parse and solve a clue such as ``"Capital of France [5]"``.

        Malformed input yields an INVALID_CLUE report rather than an error.
        """
        try:
            clue = Clue.parse(raw_text, fill_in_blank=fill_in_blank)
        except InvalidClueError as e:
            logger.info("Rejected clue %r: %s", raw_text, e.message)
            report = SolveReport(
                clue_text=(raw_text or "").strip(),
                state=PipelineState.INVALID_CLUE,
                message=e.message,
                error=e.to_dict(),
            )
            self._deliver(report)
            return SolveOutcome(report=report)

        return await self.solve_clue(clue)

    async def solve_clue(self, clue: Clue) -> SolveOutcome:
        """Solve an already parsed clue. Every outcome is delivered to the listener."""
        start_time = time.monotonic()
        self._enter(PipelineState.IDLE)

        try:
            outcome = await self._execute(clue, start_time)
        except asyncio.TimeoutError:
            error = ClueGraphError(ErrorCode.QUERY_TIMEOUT, "phase timed out")
            outcome = self._failure(clue, error, start_time)
        except ClueGraphError as e:
            outcome = self._failure(clue, e, start_time)
        except Exception as e:
            logger.exception("Unexpected failure solving %r", clue.source_text)
            outcome = self._failure(clue, ClueGraphError(ErrorCode.INTERNAL_ERROR, str(e)), start_time)

        self._deliver(outcome.report)
        return outcome

    async def _execute(self, clue: Clue, start_time: float) -> SolveOutcome:
        # Recognition
        resources = await self._run_phase(
            PipelineState.RECOGNIZING_ENTITIES,
            self._recognizer.recognize(clue, progress=self._progress(PipelineState.RECOGNIZING_ENTITIES)),
        )
        if not resources:
            return self._soft_terminal(clue, PipelineState.NO_ENTITIES, NO_SOLUTIONS_MESSAGE, start_time)

        # Extraction
        candidates = await self._run_phase(
            PipelineState.EXTRACTING_CANDIDATES,
            self._extractor.extract(
                clue,
                resources,
                progress=self._progress(PipelineState.EXTRACTING_CANDIDATES),
            ),
        )
        if not candidates:
            return self._soft_terminal(
                clue, PipelineState.NO_CANDIDATES, self._no_solutions_message(clue), start_time
            )

        # Filtering
        self._enter(PipelineState.FILTERING)
        filtered = self._filter.filter(clue, candidates)
        if not filtered.has_solutions:
            return self._soft_terminal(
                clue,
                PipelineState.NO_SOLUTIONS,
                self._no_solutions_message(clue),
                start_time,
                best_effort=filtered.best_effort,
            )

        # Scoring
        self._enter(PipelineState.SCORING)
        solutions = filtered.solutions
        await self._score_all(clue, solutions)

        # Ranking
        self._enter(PipelineState.RANKING)
        ranked = rank_solutions(solutions)

        # Persisting, not awaited
        self._enter(PipelineState.PERSISTING_ASYNC)
        persisted = self._knowledge_base.merge(clue, solutions) if self._knowledge_base else None

        self._enter(PipelineState.DONE)
        elapsed = time.monotonic() - start_time
        report = SolveReport(
            clue_text=clue.source_text,
            structure_text=clue.structure_text,
            state=PipelineState.DONE,
            message=self._format_solutions(clue, ranked, elapsed),
            solutions=[
                RankedSolution(
                    text=s.solution_text,
                    score=s.score,
                    confidence=s.confidence,
                    solution_resource=s.solution_resource,
                )
                for s in ranked
            ],
            best_effort=filtered.best_effort,
            elapsed_seconds=elapsed,
        )
        logger.info(
            "Solved %r %s: %d solutions in %.2fs",
            clue.source_text,
            clue.structure_text,
            len(ranked),
            elapsed,
        )
        return SolveOutcome(report=report, persisted=persisted)

    async def _run_phase(self, state: PipelineState, work: Awaitable[T]) -> T:
        """Run a blocking phase as its own task, bounded by the phase timeout."""
        self._enter(state)
        task = asyncio.ensure_future(work)
        return await asyncio.wait_for(task, timeout=self._phase_timeout)

    async def _score_all(self, clue: Clue, solutions: list[Solution]) -> None:
        progress = self._progress(PipelineState.SCORING)
        total = len(solutions)

        if self._scoring_concurrency == 1:
            for index, solution in enumerate(solutions, start=1):
                await self._scorer.score(clue, solution)
                progress(index * 100 // total)
            return

        semaphore = asyncio.Semaphore(self._scoring_concurrency)
        completed = 0

        async def score_one(solution: Solution) -> None:
            nonlocal completed
            async with semaphore:
                await self._scorer.score(clue, solution)
            completed += 1
            progress(completed * 100 // total)

        await asyncio.gather(*(score_one(solution) for solution in solutions))

    def _enter(self, state: PipelineState) -> None:
        logger.debug("Pipeline state: %s", state.value)
        self._listener.on_progress(state, 0)

    def _progress(self, state: PipelineState):
        def report(percent: int) -> None:
            self._listener.on_progress(state, percent)

        return report

    def _deliver(self, report: SolveReport) -> None:
        self._listener.on_result(report)
        self._listener.on_ready()

    def _soft_terminal(
        self,
        clue: Clue,
        state: PipelineState,
        message: str,
        start_time: float,
        best_effort: str | None = None,
    ) -> SolveOutcome:
        self._enter(state)
        logger.info("No solutions for %r %s (%s)", clue.source_text, clue.structure_text, state.value)
        return SolveOutcome(
            report=SolveReport(
                clue_text=clue.source_text,
                structure_text=clue.structure_text,
                state=state,
                message=message,
                best_effort=best_effort,
                elapsed_seconds=time.monotonic() - start_time,
            )
        )

    def _failure(self, clue: Clue, error: ClueGraphError, start_time: float) -> SolveOutcome:
        self._enter(PipelineState.FAILED)
        logger.error("Failed to solve %r: %s", clue.source_text, error)
        return SolveOutcome(
            report=SolveReport(
                clue_text=clue.source_text,
                structure_text=clue.structure_text,
                state=PipelineState.FAILED,
                message=f'Failed to solve the clue "{clue.source_text}": {error.message}',
                elapsed_seconds=time.monotonic() - start_time,
                error=error.to_dict(),
            )
        )

    @staticmethod
    def _no_solutions_message(clue: Clue) -> str:
        return f'{NO_SOLUTIONS_MESSAGE}: "{clue.source_text}" {clue.structure_text}'

    @staticmethod
    def _format_solutions(clue: Clue, ranked: list[Solution], elapsed: float) -> str:
        lines = [f'Solutions to the clue "{clue.source_text} {clue.structure_text}":']
        for solution in ranked:
            lines.append(f"{solution.solution_text} (confidence level: {solution.confidence}%)")
        lines.append(f"Time taken to process this clue: {int(elapsed)}s")
        return "\n".join(lines)
