"""
Domain Ontology - Local schema that decides which relations yield answers.

The ontology is a Turtle document declaring:
- relational properties (``rdfs:subPropertyOf dom:relationalProperty``)
- labels for those properties, matched against clue fragments
- ``owl:equivalentClass`` / ``owl:equivalentProperty`` links to the
  vocabulary of the remote graph

Fetched subgraphs are bound to the schema and expanded with the OWL-RL
rules from owlrl.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from owlrl import DeductiveClosure, OWLRL_Semantics
from rdflib import OWL, RDFS, Graph, Namespace, URIRef

from cluegraph.config.errors import OntologyError

if TYPE_CHECKING:
    from cluegraph.config import Settings

logger = logging.getLogger(__name__)

__all__ = ["DomainOntology", "SubsumptionReasoner"]

RELATIONAL_PROPERTY = "relationalProperty"


def _expand(graph: Graph) -> None:
    DeductiveClosure(
        OWLRL_Semantics,
        rdfs_closure=False,
        axiomatic_triples=False,
        datatype_axioms=False,
    ).expand(graph)


class DomainOntology:
    """
    Loaded domain ontology with its precomputed closure.

    Example:
        >>> ontology = DomainOntology.load("cluegraph/data/domain_ontology.ttl")
        >>> URIRef("http://dbpedia.org/ontology/capital") in ontology.relational_predicates
        True
    """

    def __init__(self, schema: Graph, namespace: str) -> None:
        """
        Initialize from an already parsed schema graph.

        Args:
            schema: Ontology triples
            namespace: Namespace of the synthetic domain terms
        """
        self.namespace = namespace
        self._ns = Namespace(namespace)

        closure = Graph()
        for triple in schema:
            closure.add(triple)
        _expand(closure)
        self._closure = closure

        relational = self._ns[RELATIONAL_PROPERTY]
        self._relational = frozenset(
            subject
            for subject in closure.subjects(RDFS.subPropertyOf, relational)
            if isinstance(subject, URIRef) and subject != relational
        )
        logger.info(
            "Domain ontology ready: %d schema triples, %d relational predicates",
            len(closure),
            len(self._relational),
        )

    @classmethod
    def load(
        cls,
        path: str | Path,
        namespace: str = "http://cluegraph.org/ontology/domain#",
    ) -> DomainOntology:
        """
        Parse a Turtle ontology file.

        Raises:
            OntologyError: File missing or not parseable
        """
        path = Path(path)
        schema = Graph()
        try:
            schema.parse(path, format="turtle")
        except (OSError, ValueError, SyntaxError) as e:
            raise OntologyError(
                f"Cannot load domain ontology: {e}",
                details={"path": str(path)},
            ) from e
        logger.debug("Loaded %d triples from %s", len(schema), path)
        return cls(schema, namespace)

    @classmethod
    def from_settings(cls, settings: Settings) -> DomainOntology:
        """Load the ontology configured in application settings."""
        return cls.load(settings.ontology_path, settings.domain_namespace)

    @property
    def closure(self) -> Graph:
        """Schema triples with everything OWL-RL infers from them alone."""
        return self._closure

    @property
    def relational_predicates(self) -> frozenset[URIRef]:
        """Predicates whose objects are candidate answers."""
        return self._relational

    @property
    def version(self) -> str | None:
        """``owl:versionInfo`` of the ontology, if declared."""
        for value in self._closure.objects(None, OWL.versionInfo):
            return str(value)
        return None

    def is_domain_term(self, uri: str | URIRef) -> bool:
        """Whether a class or property is one of the synthetic domain terms."""
        return str(uri).startswith(self.namespace)

    def equivalents(self, uri: str | URIRef) -> list[URIRef]:
        """
        External equivalents of a domain class or property.

        Follows ``owl:equivalentClass`` and ``owl:equivalentProperty`` in both
        directions; equivalents inside the domain namespace are discarded.
        """
        term = URIRef(str(uri))
        found: set[URIRef] = set()
        for relation in (OWL.equivalentClass, OWL.equivalentProperty):
            for other in self._closure.objects(term, relation):
                found.add(other)
            for other in self._closure.subjects(relation, term):
                found.add(other)

        return sorted(
            other
            for other in found
            if isinstance(other, URIRef) and other != term and not self.is_domain_term(other)
        )


class SubsumptionReasoner:
    """Binds fetched data graphs to the ontology closure."""

    def __init__(self, ontology: DomainOntology) -> None:
        self.ontology = ontology

    def bind_sync(self, data: Graph) -> Graph:
        """Union of schema closure and data, expanded with OWL-RL."""
        bound = Graph()
        for triple in self.ontology.closure:
            bound.add(triple)
        for triple in data:
            bound.add(triple)
        _expand(bound)
        logger.debug("Bound %d data triples into %d inferred triples", len(data), len(bound))
        return bound

    async def bind(self, data: Graph) -> Graph:
        """Bind off the event loop; owlrl expansion is CPU-bound."""
        return await asyncio.to_thread(self.bind_sync, data)
