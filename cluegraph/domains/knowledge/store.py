"""
Knowledge Base - Persisted record of solved clues.

A single worker task owns the RDF graph and the record list. ``merge``,
``persist`` and ``lookup`` enqueue a request and return a future the caller
may await or ignore; requests are served strictly in submission order.

The store loads lazily before serving its first request. A file that cannot
be read leaves the store disabled: merges record nothing, persists write
nothing and lookups find nothing.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from xml.sax import SAXException

from rdflib import RDF, Graph, Literal, Namespace, URIRef
from rdflib.exceptions import ParserError

from cluegraph.config import ErrorCode, Settings, StorageError
from cluegraph.domains.clues import Clue, Solution

from .models import KnowledgeBaseStats, SolvedClueRecord

logger = logging.getLogger(__name__)

__all__ = ["KnowledgeBase"]


@dataclass
class _Request:
    name: str
    handler: Callable[..., Any]
    args: tuple[Any, ...]
    future: asyncio.Future = field(repr=False)


class KnowledgeBase:
    """
    Single-writer knowledge base of solved clues.

    Example:
        >>> kb = KnowledgeBase("data/knowledge_base.rdf")
        >>> kb.merge(clue, scored_solutions)  # fire and forget
        >>> await kb.lookup(clue)
        ['Paris']
        >>> await kb.close(persist=True)
    """

    def __init__(
        self,
        path: str | Path,
        namespace: str = "http://cluegraph.org/kb#",
        create_if_missing: bool = True,
    ) -> None:
        """
        Initialize knowledge base. Nothing is read until the first request.

        Args:
            path: RDF/XML file holding the knowledge base
            namespace: Namespace for the vocabulary and generated node URIs
            create_if_missing: Start empty when the file does not exist
        """
        self.path = Path(path)
        self.namespace = namespace
        self.create_if_missing = create_if_missing
        self._kb = Namespace(namespace)

        self._graph: Graph | None = None
        self._records: list[SolvedClueRecord] = []
        self._loaded = False
        self.last_error: StorageError | None = None

        self._queue: asyncio.Queue[_Request] | None = None
        self._worker: asyncio.Task | None = None
        self._pending = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> KnowledgeBase:
        """Create a knowledge base from application settings."""
        return cls(
            settings.knowledge_base_path,
            namespace=settings.knowledge_base_namespace,
            create_if_missing=settings.create_knowledge_base_if_missing,
        )

    # Public requests

    def merge(self, clue: Clue, solutions: Iterable[Solution]) -> asyncio.Future:
        """
        Record every positively scored solution under the clue.

        Resolves to the number of solution texts newly recorded.
        """
        scored = [(s.solution_text, s.score) for s in solutions]
        return self._submit("merge", self._merge, clue.source_text, clue.structure_text, scored)

    def persist(self) -> asyncio.Future:
        """Write the graph to disk. Resolves to whether it was written."""
        return self._submit("persist", self._persist)

    def lookup(self, clue: Clue) -> asyncio.Future:
        """Resolves to the solution texts recorded for the clue."""
        return self._submit("lookup", self._lookup, clue.source_text, clue.structure_text)

    def stats(self) -> asyncio.Future:
        """Resolves to a KnowledgeBaseStats snapshot."""
        return self._submit("stats", self._stats)

    @property
    def enabled(self) -> bool:
        """Whether the store loaded successfully (False until loaded)."""
        return self._graph is not None

    @property
    def finished(self) -> bool:
        """No request is queued or running."""
        return self._pending == 0

    async def join(self) -> None:
        """Wait until every submitted request has been served."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self, persist: bool = False) -> bool | None:
        """
        Drain outstanding requests and stop the worker.

        Args:
            persist: Write the graph to disk before stopping

        Returns:
            Persist outcome when persisting, otherwise None
        """
        outcome = None
        if persist:
            outcome = await self.persist()
        await self.join()

        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None
            self._queue = None
        return outcome

    # Worker

    def _submit(self, name: str, handler: Callable[..., Any], *args: Any) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        if self._queue is None:
            self._queue = asyncio.Queue()
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._run(), name="knowledge-base-writer")

        future = loop.create_future()
        self._pending += 1
        self._queue.put_nowait(_Request(name, handler, args, future))
        return future

    async def _run(self) -> None:
        queue = self._queue
        while True:
            request = await queue.get()
            try:
                if not self._loaded:
                    await asyncio.to_thread(self._load)
                result = request.handler(*request.args)
                if asyncio.iscoroutine(result):
                    result = await result
                if not request.future.done():
                    request.future.set_result(result)
            except Exception as e:
                logger.error("Knowledge base %s failed: %s", request.name, e)
                if not request.future.done():
                    request.future.set_exception(e)
            finally:
                self._pending -= 1
                queue.task_done()

    # Handlers, run only by the worker

    def _load(self) -> None:
        self._loaded = True
        if not self.path.exists():
            if self.create_if_missing:
                logger.info("No knowledge base at %s, starting empty", self.path)
                self._graph = self._new_graph()
            else:
                self.last_error = StorageError(
                    "Knowledge base not found", details={"path": str(self.path)}
                )
                logger.warning("Knowledge base %s not found, store disabled", self.path)
            return

        graph = self._new_graph()
        try:
            graph.parse(self.path, format="xml")
        except (OSError, ValueError, SAXException, ParserError) as e:
            self.last_error = StorageError(
                "Cannot load knowledge base", details={"path": str(self.path), "error": str(e)}
            )
            logger.warning("Cannot load knowledge base %s, store disabled: %s", self.path, e)
            return

        self._graph = graph
        self._records = self._scan_records(graph)
        logger.info(
            "Loaded knowledge base %s: %d clues, %d triples",
            self.path,
            len(self._records),
            len(graph),
        )

    def _new_graph(self) -> Graph:
        graph = Graph()
        graph.bind("kb", self._kb)
        return graph

    def _scan_records(self, graph: Graph) -> list[SolvedClueRecord]:
        records = []
        for clue_node in graph.subjects(RDF.type, self._kb.Clue):
            clue_text = graph.value(clue_node, self._kb.hasClueText)
            structure_text = graph.value(clue_node, self._kb.hasSolutionStructure)
            if clue_text is None or structure_text is None:
                logger.debug("Skipping incomplete clue node %s", clue_node)
                continue

            record = SolvedClueRecord(
                clue_text=str(clue_text),
                structure_text=str(structure_text),
                clue_uri=str(clue_node),
            )
            for solution_node in graph.objects(clue_node, self._kb.solvedBy):
                text = graph.value(solution_node, self._kb.hasSolutionText)
                if text is not None:
                    record.add_solution(str(text))
            records.append(record)
        return records

    def _find(self, probe: SolvedClueRecord) -> SolvedClueRecord | None:
        for record in self._records:
            if record.same_clue(probe):
                return record
        return None

    def _merge(self, clue_text: str, structure_text: str, scored: list[tuple[str, float]]) -> int:
        if self._graph is None:
            return 0

        probe = SolvedClueRecord(clue_text=clue_text, structure_text=structure_text)
        added = 0
        for text, score in scored:
            if score <= 0:
                continue

            record = self._find(probe)
            if record is None:
                record = self._add_clue(probe)

            if record.add_solution(text):
                self._add_solution(record, text)
                added += 1

        if added:
            logger.info("Recorded %d new solutions for %r %s", added, clue_text, structure_text)
        return added

    def _add_clue(self, probe: SolvedClueRecord) -> SolvedClueRecord:
        node = self._kb[f"clue-{uuid.uuid4()}"]
        self._graph.add((node, RDF.type, self._kb.Clue))
        self._graph.add((node, self._kb.hasClueText, Literal(probe.clue_text)))
        self._graph.add((node, self._kb.hasSolutionStructure, Literal(probe.structure_text)))

        record = SolvedClueRecord(
            clue_text=probe.clue_text,
            structure_text=probe.structure_text,
            clue_uri=str(node),
        )
        self._records.append(record)
        return record

    def _add_solution(self, record: SolvedClueRecord, text: str) -> None:
        node = self._kb[f"solution-{uuid.uuid4()}"]
        self._graph.add((node, RDF.type, self._kb.Solution))
        self._graph.add((node, self._kb.hasSolutionText, Literal(text)))
        self._graph.add((URIRef(record.clue_uri), self._kb.solvedBy, node))

    async def _persist(self) -> bool:
        if self._graph is None:
            logger.debug("Knowledge base disabled, nothing persisted")
            return False
        return await asyncio.to_thread(self._write, self._graph)

    def _write(self, graph: Graph) -> bool:
        temporary = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            graph.serialize(destination=str(temporary), format="pretty-xml")
            os.replace(temporary, self.path)
        except OSError as e:
            self.last_error = StorageError(
                "Cannot persist knowledge base",
                ErrorCode.STORAGE_WRITE_FAILED,
                {"path": str(self.path), "error": str(e)},
            )
            logger.error("Cannot persist knowledge base to %s: %s", self.path, e)
            with contextlib.suppress(OSError):
                temporary.unlink()
            return False

        logger.info("Persisted knowledge base to %s (%d triples)", self.path, len(graph))
        return True

    def _lookup(self, clue_text: str, structure_text: str) -> list[str]:
        record = self._find(SolvedClueRecord(clue_text=clue_text, structure_text=structure_text))
        return list(record.solution_texts) if record else []

    def _stats(self) -> KnowledgeBaseStats:
        if self._graph is None:
            return KnowledgeBaseStats(enabled=False)
        return KnowledgeBaseStats(
            enabled=True,
            clue_count=len(self._records),
            solution_count=sum(len(r.solution_texts) for r in self._records),
            triple_count=len(self._graph),
        )

