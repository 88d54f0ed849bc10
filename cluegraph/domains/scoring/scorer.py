"""
Solution Scorer - Graph proximity between a solution and its clue resource.

score = distance1 * distance2, where
- distance1 = 1 / (1 + triples linking solution and clue in either direction)
- distance2 = 1 / (1 + matches of the recognised types and properties),
  or 1.0 when nothing is recognised

Remote failures count as no links, the weakest value.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rdflib import RDF, RDFS, Graph, URIRef

from cluegraph.adapters.sparql import SparqlQueryBuilder
from cluegraph.config.errors import KnowledgeGraphQueryError
from cluegraph.domains.clues import Clue, KnowledgeGraphClient, Solution
from cluegraph.domains.extraction import DomainOntology

if TYPE_CHECKING:
    from cluegraph.config import Settings

logger = logging.getLogger(__name__)

__all__ = ["SolutionScorer"]

LITERAL_SCORE = 1.0


def _distance(count: int) -> float:
    return 1.0 / (1 + max(0, count))


class SolutionScorer:
    """
    Scores validated solutions against the remote graph.

    Example:
        >>> scorer = SolutionScorer(client, ontology)
        >>> await scorer.score(clue, solution)
        0.25
    """

    def __init__(
        self,
        client: KnowledgeGraphClient,
        ontology: DomainOntology,
        queries: SparqlQueryBuilder | None = None,
    ) -> None:
        self._client = client
        self._ontology = ontology
        self._queries = queries or SparqlQueryBuilder()

    @classmethod
    def from_settings(
        cls,
        client: KnowledgeGraphClient,
        ontology: DomainOntology,
        settings: Settings,
    ) -> SolutionScorer:
        """Create a scorer from application settings."""
        return cls(client, ontology, queries=SparqlQueryBuilder(settings.language))

    async def score(self, clue: Clue, solution: Solution) -> float:
        """
        Score a solution, setting ``solution.score``.

        The solution's inference graph is released once scored.

        Returns:
            The score, in (0, 1]
        """
        try:
            if not solution.solution_resource or not solution.clue_resource:
                score = LITERAL_SCORE
            else:
                distance1 = await self.direct_distance(solution)
                distance2 = await self.indirect_distance(clue, solution)
                score = distance1 * distance2
        finally:
            solution.release_snapshot()

        solution.score = score
        logger.debug("Scored %r: %.4f", solution.solution_text, score)
        return score

    async def direct_distance(self, solution: Solution) -> float:
        """1 / (1 + triples linking solution and clue resource either way)."""
        query = self._queries.count_links_query(solution.solution_resource, solution.clue_resource)
        return _distance(await self._safe_count(query))

    async def indirect_distance(self, clue: Clue, solution: Solution) -> float:
        """1 / (1 + matches of the recognised types and properties); 1.0 when none."""
        graph = solution.snapshot_graph
        if graph is None:
            return 1.0

        types = self._externalise(clue, graph, self.recognised_types(clue, solution, graph))
        properties = self._externalise(
            clue, graph, self.recognised_properties(clue, solution, graph)
        )
        if not types and not properties:
            return 1.0

        query = self._queries.count_typed_links_query(
            solution.solution_resource,
            solution.clue_resource,
            [str(t) for t in types],
            [str(p) for p in properties],
        )
        return _distance(await self._safe_count(query))

    def recognised_types(self, clue: Clue, solution: Solution, graph: Graph) -> list[URIRef]:
        """``rdf:type`` objects of the solution whose label names a clue fragment."""
        subject = URIRef(solution.solution_resource)
        return self._labelled(clue, graph, graph.objects(subject, RDF.type))

    def recognised_properties(self, clue: Clue, solution: Solution, graph: Graph) -> list[URIRef]:
        """Predicates from solution to clue resource whose label names a clue fragment."""
        subject = URIRef(solution.solution_resource)
        target = URIRef(solution.clue_resource)
        return self._labelled(clue, graph, graph.predicates(subject, target))

    @staticmethod
    def _labelled(clue: Clue, graph: Graph, terms) -> list[URIRef]:
        recognised: list[URIRef] = []
        for term in terms:
            if not isinstance(term, URIRef) or term in recognised:
                continue
            if any(clue.matches_fragment(str(label)) for label in graph.objects(term, RDFS.label)):
                recognised.append(term)
        return recognised

    def _externalise(self, clue: Clue, graph: Graph, terms: list[URIRef]) -> list[URIRef]:
        """
        Swap domain terms for their external equivalents, dropping those without one.

        An equivalent labelled in the graph is kept only when one of its labels
        also names a clue fragment; an unlabelled equivalent carries the domain
        term's matched label.
        """
        external: list[URIRef] = []
        for term in terms:
            if not self._ontology.is_domain_term(term):
                replacements = [term]
            else:
                replacements = [
                    equivalent
                    for equivalent in self._ontology.equivalents(term)
                    if self._keeps_label(clue, graph, equivalent)
                ]
            for replacement in replacements:
                if replacement not in external:
                    external.append(replacement)
        return external

    @staticmethod
    def _keeps_label(clue: Clue, graph: Graph, equivalent: URIRef) -> bool:
        labels = [str(label) for label in graph.objects(equivalent, RDFS.label)]
        return not labels or any(clue.matches_fragment(label) for label in labels)

    async def _safe_count(self, query: str) -> int:
        try:
            return await self._client.count(query)
        except KnowledgeGraphQueryError as e:
            logger.warning("Scoring query failed, counting no links: %s", e)
            return 0
