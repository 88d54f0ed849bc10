"""
Entity Recognizer - Finds knowledge graph nodes named by clue fragments.

Each fragment is looked up independently; a failed lookup only loses that
fragment's resources.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from rdflib import URIRef

from cluegraph.adapters.sparql import SparqlQueryBuilder
from cluegraph.config.errors import KnowledgeGraphQueryError
from cluegraph.domains.clues import (
    Clue,
    KnowledgeGraphClient,
    ProgressCallback,
    RecognizedResource,
)

from .stopwords import STOP_WORDS

if TYPE_CHECKING:
    from cluegraph.config import Settings

logger = logging.getLogger(__name__)

__all__ = ["EntityRecognizer"]


class EntityRecognizer:
    """
    Entity recognizer over a remote knowledge graph.

    Example:
        >>> recognizer = EntityRecognizer(client)
        >>> resources = await recognizer.recognize(Clue.parse("Capital of France [5]"))
        >>> [r.uri for r in resources]
        ['http://dbpedia.org/resource/France', ...]
    """

    def __init__(
        self,
        client: KnowledgeGraphClient,
        queries: SparqlQueryBuilder | None = None,
        resource_namespace: str = "http://dbpedia.org/resource/",
        stop_words: Iterable[str] | None = None,
        exact_limit: int = 200,
        substring_limit: int = 100,
        max_fragment_words: int = 4,
        max_concurrent: int = 4,
    ) -> None:
        """
        Initialize recognizer.

        Args:
            client: Knowledge graph client
            queries: Query builder (language taken from it)
            resource_namespace: Only URIs under this namespace are kept
            stop_words: Fragments never looked up; defaults to STOP_WORDS
            exact_limit: Result cap for exact label matching
            substring_limit: Result cap for fill-in-the-blank matching
            max_fragment_words: Longest token span looked up
            max_concurrent: Fragment lookups in flight at once
        """
        self._client = client
        self._queries = queries or SparqlQueryBuilder()
        self._namespace = resource_namespace
        self._stop_words = frozenset(
            word.lower() for word in (STOP_WORDS if stop_words is None else stop_words)
        )
        self._exact_limit = exact_limit
        self._substring_limit = substring_limit
        self._max_fragment_words = max_fragment_words
        self._max_concurrent = max(1, max_concurrent)

    @classmethod
    def from_settings(
        cls,
        client: KnowledgeGraphClient,
        settings: Settings,
    ) -> EntityRecognizer:
        """Create a recognizer from application settings."""
        return cls(
            client,
            queries=SparqlQueryBuilder(settings.language),
            resource_namespace=settings.resource_namespace,
            stop_words=STOP_WORDS | {word.lower() for word in settings.extra_stop_words},
            exact_limit=settings.exact_result_limit,
            substring_limit=settings.substring_result_limit,
            max_fragment_words=settings.max_fragment_words,
        )

    def is_stop_word(self, fragment: str) -> bool:
        """Whether recognition is skipped for this fragment."""
        return fragment.lower() in self._stop_words

    async def recognize(
        self,
        clue: Clue,
        progress: ProgressCallback | None = None,
    ) -> list[RecognizedResource]:
        """
        Recognise resources for every distinct fragment of the clue.

        Args:
            clue: The clue to analyse
            progress: Optional percentage callback, called once per fragment

        Returns:
            Unique resources in first-recognised order
        """
        fragments = clue.search_fragments(self._max_fragment_words)
        if not fragments:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrent)
        completed = 0

        async def recognize_one(fragment: str) -> list[str]:
            nonlocal completed
            async with semaphore:
                uris = await self._recognize_fragment(fragment, clue.fill_in_blank)
            completed += 1
            if progress:
                progress(completed * 100 // len(fragments))
            return uris

        results = await asyncio.gather(*(recognize_one(fragment) for fragment in fragments))

        recognized: dict[str, RecognizedResource] = {}
        for fragment, uris in zip(fragments, results):
            for uri in uris:
                if uri not in recognized:
                    recognized[uri] = RecognizedResource(uri=uri, fragment=fragment)
                    logger.debug("Recognised resource: %s (from %r)", uri, fragment)

        logger.info(
            "Recognised %d resources from %d fragments of %r",
            len(recognized),
            len(fragments),
            clue.source_text,
        )
        return list(recognized.values())

    async def _recognize_fragment(self, fragment: str, fill_in_blank: bool) -> list[str]:
        """URIs matching one fragment; empty on stop words and remote failure."""
        if self.is_stop_word(fragment):
            return []

        query = self._queries.recognition_query(
            fragment,
            fill_in_blank=fill_in_blank,
            limit=self._substring_limit if fill_in_blank else self._exact_limit,
        )
        try:
            rows = await self._client.select(query)
        except KnowledgeGraphQueryError as e:
            logger.warning("Entity recognition for fragment %r failed: %s", fragment, e)
            return []

        uris: list[str] = []
        for row in rows:
            resource = row.get("resource")
            if not isinstance(resource, URIRef):
                continue
            uri = str(resource)
            # Only resources of the target graph's namespace are usable
            if not uri.startswith(self._namespace):
                continue
            if uri not in uris:
                uris.append(uri)
        return uris
