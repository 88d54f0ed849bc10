"""Tests for SPARQL query builder and client."""

from unittest.mock import MagicMock, patch
from urllib.error import URLError

import pytest
from rdflib import BNode, Graph, Literal, URIRef
from SPARQLWrapper.SPARQLExceptions import QueryBadFormed

from cluegraph.config.errors import KnowledgeGraphQueryError, TransientQueryError

from .client import SparqlClient
from .queries import SparqlQueryBuilder, iri, literal

FRANCE = "http://dbpedia.org/resource/France"
PARIS = "http://dbpedia.org/resource/Paris"


# =============================================================================
# Query Builder Tests
# =============================================================================


def test_literal_escaping():
    """Test quotes and backslashes cannot break out of a literal."""
    assert literal("France", "en") == '"France"@en'
    assert literal('Say "hi"', "en") == '"Say \\"hi\\""@en'
    assert literal("back\\slash") == '"back\\\\slash"'


def test_iri_escaping():
    """Test characters illegal in IRIs are percent-encoded."""
    assert iri(FRANCE) == f"<{FRANCE}>"
    assert iri("http://dbpedia.org/resource/A>B") == "<http://dbpedia.org/resource/A%3EB>"
    assert iri("http://dbpedia.org/resource/A B") == "<http://dbpedia.org/resource/A%20B>"


def test_recognition_query_exact():
    """Test exact recognition unions every label relation, direct and redirected."""
    query = SparqlQueryBuilder("en").recognition_query("France", limit=200)

    assert query.count('"France"@en') == 8
    assert query.count("dbpedia-owl:wikiPageRedirects") == 4
    for relation in ("rdfs:label", "dbpprop:name", "foaf:givenName", "foaf:surname"):
        assert relation in query
    assert "LIMIT 200" in query
    assert "bif:contains" not in query


def test_recognition_query_substring():
    """Test fill-in-the-blank recognition uses free-text search."""
    query = SparqlQueryBuilder("en").recognition_query("Lord of the", fill_in_blank=True, limit=100)

    assert "bif:contains" in query
    assert "'\"Lord of the\"'" in query
    assert 'langMatches(lang(?label), "en")' in query
    assert "LIMIT 100" in query


def test_recognition_query_injection():
    """Test fragments cannot inject query syntax."""
    query = SparqlQueryBuilder().recognition_query('x" . } DROP ALL { "')

    assert '"x\\" . } DROP ALL { \\""@en' in query


def test_neighbourhood_queries():
    """Test both neighbourhood queries centre on the resource."""
    builder = SparqlQueryBuilder()

    subject_query = builder.subject_neighbourhood_query(FRANCE)
    object_query = builder.object_neighbourhood_query(FRANCE)

    assert subject_query.startswith("PREFIX")
    assert f"<{FRANCE}> ?predicate ?object" in subject_query
    assert f"?subject ?predicate <{FRANCE}>" in object_query
    assert "CONSTRUCT" in subject_query and "CONSTRUCT" in object_query


def test_count_typed_links_query():
    """Test one pattern per type and two per property."""
    query = SparqlQueryBuilder().count_typed_links_query(
        PARIS,
        FRANCE,
        types=["http://dbpedia.org/ontology/City"],
        properties=["http://dbpedia.org/ontology/capital"],
    )

    assert query.count("UNION") == 2
    assert f"<{PARIS}> rdf:type <http://dbpedia.org/ontology/City>" in query
    assert f"<{PARIS}> <http://dbpedia.org/ontology/capital> <{FRANCE}>" in query
    assert f"<{FRANCE}> <http://dbpedia.org/ontology/capital> <{PARIS}>" in query


# =============================================================================
# Client Tests
# =============================================================================


@pytest.fixture
def client() -> SparqlClient:
    return SparqlClient("http://example.org/sparql", max_attempts=3, retry_wait_min=0, retry_wait_max=0)


def _wrapper_returning(*results):
    """Patch SPARQLWrapper so successive queries return/raise ``results``."""
    wrapper = MagicMock()
    wrapper.return_value.query.return_value.convert.side_effect = list(results)
    return patch("cluegraph.adapters.sparql.client.SPARQLWrapper", wrapper)


async def test_select_converts_bindings(client: SparqlClient):
    """Test JSON bindings become rdflib terms."""
    response = {
        "results": {
            "bindings": [
                {
                    "resource": {"type": "uri", "value": FRANCE},
                    "label": {"type": "literal", "value": "France", "xml:lang": "en"},
                    "node": {"type": "bnode", "value": "b0"},
                }
            ]
        }
    }
    with _wrapper_returning(response):
        rows = await client.select("SELECT ...")

    assert rows[0]["resource"] == URIRef(FRANCE)
    assert rows[0]["label"] == Literal("France", lang="en")
    assert isinstance(rows[0]["node"], BNode)


async def test_select_retries_transient_errors(client: SparqlClient):
    """Test transient failures are retried."""
    with _wrapper_returning(URLError("reset"), {"results": {"bindings": []}}) as wrapper:
        rows = await client.select("SELECT ...")

    assert rows == []
    assert wrapper.return_value.query.call_count == 2


async def test_select_gives_up_after_attempts(client: SparqlClient):
    """Test persistent transient failures surface after the last attempt."""
    with _wrapper_returning(*[URLError("down")] * 3):
        with pytest.raises(TransientQueryError):
            await client.select("SELECT ...")


async def test_select_bad_query_not_retried(client: SparqlClient):
    """Test rejected queries fail immediately."""
    with _wrapper_returning(QueryBadFormed("bad")) as wrapper:
        with pytest.raises(KnowledgeGraphQueryError):
            await client.select("SELECT ...")

    assert wrapper.return_value.query.call_count == 1


async def test_construct_not_retried(client: SparqlClient):
    """Test CONSTRUCT failures propagate without retry."""
    with _wrapper_returning(URLError("down"), Graph()) as wrapper:
        with pytest.raises(TransientQueryError):
            await client.construct("CONSTRUCT ...")

    assert wrapper.return_value.query.call_count == 1


async def test_construct_returns_graph(client: SparqlClient):
    """Test CONSTRUCT results are rdflib graphs."""
    graph = Graph()
    graph.add((URIRef(FRANCE), URIRef("http://dbpedia.org/ontology/capital"), URIRef(PARIS)))
    with _wrapper_returning(graph):
        result = await client.construct("CONSTRUCT ...")

    assert len(result) == 1


async def test_count(client: SparqlClient):
    """Test counts are read from the first row."""
    response = {
        "results": {
            "bindings": [
                {
                    "count": {
                        "type": "typed-literal",
                        "value": "7",
                        "datatype": "http://www.w3.org/2001/XMLSchema#integer",
                    }
                }
            ]
        }
    }
    with _wrapper_returning(response, {"results": {"bindings": []}}):
        assert await client.count("SELECT (COUNT(*) AS ?count) ...") == 7
        assert await client.count("SELECT (COUNT(*) AS ?count) ...") == 0
