"""
Orchestration Models - Data types for the solve pipeline.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PipelineState(str, Enum):
    """States of a single clue solve."""

    IDLE = "idle"
    RECOGNIZING_ENTITIES = "recognizing_entities"
    NO_ENTITIES = "no_entities"
    EXTRACTING_CANDIDATES = "extracting_candidates"
    NO_CANDIDATES = "no_candidates"
    FILTERING = "filtering"
    NO_SOLUTIONS = "no_solutions"
    SCORING = "scoring"
    RANKING = "ranking"
    PERSISTING_ASYNC = "persisting_async"
    DONE = "done"
    # Terminals outside the main sequence
    INVALID_CLUE = "invalid_clue"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def found_solutions(self) -> bool:
        return self is PipelineState.DONE


TERMINAL_STATES = frozenset(
    {
        PipelineState.NO_ENTITIES,
        PipelineState.NO_CANDIDATES,
        PipelineState.NO_SOLUTIONS,
        PipelineState.DONE,
        PipelineState.INVALID_CLUE,
        PipelineState.FAILED,
    }
)


class RankedSolution(BaseModel):
    """A solution as reported to the caller."""

    text: str
    score: float
    confidence: int
    solution_resource: str | None = None


class SolveReport(BaseModel):
    """Outcome of one clue solve, with its user-facing text."""

    clue_text: str
    structure_text: str = ""
    state: PipelineState
    message: str
    solutions: list[RankedSolution] = Field(default_factory=list)
    best_effort: str | None = None
    elapsed_seconds: float = 0.0
    error: dict[str, Any] | None = None

    @property
    def success(self) -> bool:
        return self.state.found_solutions


class SolveOutcome(BaseModel):
    """Report plus the pending knowledge base merge."""

    report: SolveReport
    persisted: asyncio.Future | None = None  # resolves to the number of recorded solutions

    model_config = ConfigDict(arbitrary_types_allowed=True)
