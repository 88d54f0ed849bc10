"""Shared fixtures: an in-memory knowledge graph client and a small ontology."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from rdflib import RDFS, Graph, Literal, Namespace, URIRef
from rdflib.term import Node

from cluegraph.adapters.sparql import iri
from cluegraph.config.errors import KnowledgeGraphQueryError
from cluegraph.domains.extraction import DomainOntology

DBR = Namespace("http://dbpedia.org/resource/")
DBO = Namespace("http://dbpedia.org/ontology/")
DOM = Namespace("http://cluegraph.org/ontology/domain#")

TEST_ONTOLOGY = """
@prefix dom:  <http://cluegraph.org/ontology/domain#> .
@prefix dbo:  <http://dbpedia.org/ontology/> .
@prefix owl:  <http://www.w3.org/2002/07/owl#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .

<http://cluegraph.org/ontology/domain> a owl:Ontology ;
    owl:versionInfo "test-1" .

dom:relationalProperty a owl:ObjectProperty .

dom:hasCapital a owl:ObjectProperty ;
    rdfs:subPropertyOf dom:relationalProperty ;
    rdfs:label "Capital Of"@en ;
    owl:equivalentProperty dbo:capital .

dom:hasAuthor a owl:ObjectProperty ;
    rdfs:subPropertyOf dom:relationalProperty ;
    rdfs:label "author of"@en .

dom:City a owl:Class ;
    rdfs:label "city"@en ;
    owl:equivalentClass dbo:City .

dom:Landmark a owl:Class ;
    rdfs:label "landmark"@en .
"""


class StubGraphClient:
    """
    In-memory KnowledgeGraphClient.

    Recognition queries are answered from ``labels`` (fragment -> URIs),
    CONSTRUCT queries from ``subject_graphs`` / ``object_graphs`` (URI ->
    graph) and counts from ``count_for``.
    """

    def __init__(self, language: str = "en") -> None:
        self.language = language
        self.labels: dict[str, list[str]] = {}
        self.subject_graphs: dict[str, Graph] = {}
        self.object_graphs: dict[str, Graph] = {}
        self.count_for: Callable[[str], int] = lambda query: 0
        self.failing_fragments: set[str] = set()
        self.fail_construct = False
        self.fail_count = False
        self.queries: list[str] = []

    async def select(self, query: str) -> list[dict[str, Node]]:
        self.queries.append(query)
        for fragment in self.failing_fragments:
            if Literal(fragment, lang=self.language).n3() in query:
                raise KnowledgeGraphQueryError(f"endpoint down for {fragment}")

        rows = []
        for fragment, uris in self.labels.items():
            if Literal(fragment, lang=self.language).n3() in query:
                rows.extend({"resource": URIRef(uri)} for uri in uris)
        return rows

    async def construct(self, query: str) -> Graph:
        self.queries.append(query)
        if self.fail_construct:
            raise KnowledgeGraphQueryError("construct failed")

        for uri, graph in self.subject_graphs.items():
            if f"{iri(uri)} ?predicate ?object" in query:
                return graph
        for uri, graph in self.object_graphs.items():
            if f"?subject ?predicate {iri(uri)}" in query:
                return graph
        return Graph()

    async def count(self, query: str, variable: str = "count") -> int:
        self.queries.append(query)
        if self.fail_count:
            raise KnowledgeGraphQueryError("count failed")
        return self.count_for(query)


@pytest.fixture
def stub_client() -> StubGraphClient:
    """Empty in-memory knowledge graph client."""
    return StubGraphClient()


@pytest.fixture
def ontology_path(tmp_path: Path) -> Path:
    """Small domain ontology written to disk."""
    path = tmp_path / "ontology.ttl"
    path.write_text(TEST_ONTOLOGY, encoding="utf-8")
    return path


@pytest.fixture
def ontology(ontology_path: Path) -> DomainOntology:
    """Loaded test ontology."""
    return DomainOntology.load(ontology_path)


@pytest.fixture
def france_graph() -> Graph:
    """Subject neighbourhood of France with a literal capital."""
    graph = Graph()
    graph.add((DBR.France, RDFS.label, Literal("France", lang="en")))
    graph.add((DBR.France, DOM.hasCapital, Literal("Paris", lang="en")))
    return graph
