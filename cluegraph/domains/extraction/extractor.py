"""
Candidate Extractor - Pulls answer strings out of resource neighbourhoods.

For every recognised resource the subject-side and object-side subgraphs are
fetched, bound to the domain ontology, and scanned for relational triples
whose predicate label names a fragment of the clue.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rdflib import RDFS, Graph, Literal, URIRef

from cluegraph.adapters.sparql import SparqlQueryBuilder
from cluegraph.domains.clues import (
    Clue,
    KnowledgeGraphClient,
    ProgressCallback,
    RawCandidate,
    RecognizedResource,
    with_language_tag,
)

from .ontology import DomainOntology, SubsumptionReasoner

if TYPE_CHECKING:
    from cluegraph.config import Settings

logger = logging.getLogger(__name__)

__all__ = ["CandidateExtractor"]


class CandidateExtractor:
    """
    Candidate extractor over recognised resources.

    Example:
        >>> extractor = CandidateExtractor(client, ontology)
        >>> candidates = await extractor.extract(clue, resources)
        >>> [c.text for c in candidates]
        ['Paris@en']
    """

    def __init__(
        self,
        client: KnowledgeGraphClient,
        ontology: DomainOntology,
        queries: SparqlQueryBuilder | None = None,
    ) -> None:
        """
        Initialize extractor.

        Args:
            client: Knowledge graph client
            ontology: Loaded domain ontology
            queries: Query builder
        """
        self._client = client
        self._ontology = ontology
        self._reasoner = SubsumptionReasoner(ontology)
        self._queries = queries or SparqlQueryBuilder()

    @classmethod
    def from_settings(
        cls,
        client: KnowledgeGraphClient,
        ontology: DomainOntology,
        settings: Settings,
    ) -> CandidateExtractor:
        """Create an extractor from application settings."""
        return cls(client, ontology, queries=SparqlQueryBuilder(settings.language))

    async def extract(
        self,
        clue: Clue,
        resources: list[RecognizedResource],
        progress: ProgressCallback | None = None,
    ) -> list[RawCandidate]:
        """
        Extract raw candidates from every recognised resource.

        Args:
            clue: The clue being solved
            resources: Recognised resources, in recognition order
            progress: Optional percentage callback, called once per resource

        Returns:
            Candidates in discovery order, unique per (text, clue resource,
            solution resource)

        Raises:
            KnowledgeGraphQueryError: A neighbourhood could not be fetched
        """
        visited: set[str] = set()
        seen: set[tuple[str, str, str | None]] = set()
        candidates: list[RawCandidate] = []

        for index, resource in enumerate(resources, start=1):
            for query in (
                self._queries.subject_neighbourhood_query(resource.uri),
                self._queries.object_neighbourhood_query(resource.uri),
            ):
                fetched = await self._client.construct(query)
                if not len(fetched):
                    continue
                bound = await self._reasoner.bind(fetched)
                for candidate in self._scan(clue, bound, visited):
                    key = (candidate.text, candidate.clue_resource, candidate.solution_resource)
                    if key in seen:
                        continue
                    seen.add(key)
                    candidates.append(candidate)

            if progress:
                progress(index * 100 // len(resources))

        logger.info(
            "Extracted %d candidates from %d resources",
            len(candidates),
            len(resources),
        )
        return candidates

    def matching_predicates(self, clue: Clue, graph: Graph) -> list[URIRef]:
        """Relational predicates of the graph carrying a label that names a clue fragment."""
        matching = []
        for predicate in sorted(self._ontology.relational_predicates):
            if any(clue.matches_fragment(str(label)) for label in graph.objects(predicate, RDFS.label)):
                matching.append(predicate)
        return matching

    def _scan(self, clue: Clue, graph: Graph, visited: set[str]) -> list[RawCandidate]:
        candidates: list[RawCandidate] = []
        for predicate in self.matching_predicates(clue, graph):
            for subject, obj in graph.subject_objects(predicate):
                if not isinstance(subject, URIRef):
                    continue

                if isinstance(obj, Literal):
                    candidates.append(
                        RawCandidate(
                            text=with_language_tag(str(obj), obj.language),
                            clue_resource=str(subject),
                            graph=graph,
                        )
                    )
                    continue

                if not isinstance(obj, URIRef) or str(obj) in visited:
                    continue
                visited.add(str(obj))
                for label in graph.objects(obj, RDFS.label):
                    candidates.append(
                        RawCandidate(
                            text=str(label),
                            clue_resource=str(subject),
                            solution_resource=str(obj),
                            graph=graph,
                        )
                    )
                logger.debug("Expanded %s via %s", obj, predicate)
        return candidates
