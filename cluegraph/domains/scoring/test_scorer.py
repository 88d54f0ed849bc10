"""Tests for Solution Scorer."""

import pytest
from rdflib import RDF, RDFS, Graph, Literal

from cluegraph.conftest import DBO, DBR, DOM, StubGraphClient
from cluegraph.domains.clues import Clue, Solution

from .scorer import SolutionScorer

CLUE = Clue.parse("Capital city of France [5]")


def make_solution(graph: Graph | None = None) -> Solution:
    return Solution.from_text(
        "Paris",
        clue_resource=str(DBR.France),
        solution_resource=str(DBR.Paris),
        snapshot_graph=graph,
    )


@pytest.fixture
def scorer(stub_client: StubGraphClient, ontology) -> SolutionScorer:
    return SolutionScorer(stub_client, ontology)


@pytest.fixture
def typed_graph() -> Graph:
    """Paris typed with a domain class whose label is in the clue."""
    graph = Graph()
    graph.add((DBR.Paris, RDF.type, DOM.City))
    graph.add((DOM.City, RDFS.label, Literal("city", lang="en")))
    graph.add((DBR.Paris, RDF.type, DOM.Landmark))
    graph.add((DOM.Landmark, RDFS.label, Literal("landmark", lang="en")))
    return graph


async def test_literal_solution_scores_one(stub_client, scorer):
    """Test solutions without a resource skip remote scoring."""
    solution = Solution.from_text("Paris@en", clue_resource=str(DBR.France))

    score = await scorer.score(CLUE, solution)

    assert score == 1.0
    assert solution.score == 1.0
    assert solution.confidence == 100
    assert stub_client.queries == []


async def test_direct_distance_only(stub_client, scorer):
    """Test distance2 is 1.0 when nothing is recognised."""
    stub_client.count_for = lambda query: 3
    solution = make_solution(Graph())

    score = await scorer.score(CLUE, solution)

    assert score == pytest.approx(0.25)
    assert len(stub_client.queries) == 1


async def test_both_distances(stub_client, scorer, typed_graph):
    """Test recognised types add a second distance factor."""
    stub_client.count_for = lambda query: 1 if "rdf:type" in query else 3
    solution = make_solution(typed_graph)

    score = await scorer.score(CLUE, solution)

    assert score == pytest.approx(0.25 * 0.5)
    assert solution.score == score
    typed_query = stub_client.queries[-1]
    assert f"<{DBO.City}>" in typed_query
    assert "cluegraph.org" not in typed_query


async def test_recognised_property(stub_client, scorer):
    """Test properties from solution to clue resource are recognised."""
    graph = Graph()
    graph.add((DBR.Paris, DOM.hasCapital, DBR.France))
    graph.add((DOM.hasCapital, RDFS.label, Literal("Capital Of", lang="en")))
    solution = make_solution(graph)

    assert scorer.recognised_properties(CLUE, solution, graph) == [DOM.hasCapital]

    await scorer.score(CLUE, solution)

    typed_query = stub_client.queries[-1]
    assert f"<{DBR.Paris}> <{DBO.capital}> <{DBR.France}>" in typed_query
    assert f"<{DBR.France}> <{DBO.capital}> <{DBR.Paris}>" in typed_query


async def test_domain_term_without_equivalent_dropped(stub_client, scorer):
    """Test domain terms with no external equivalent are not queried."""
    graph = Graph()
    graph.add((DBR.Paris, RDF.type, DOM.Landmark))
    graph.add((DOM.Landmark, RDFS.label, Literal("landmark", lang="en")))
    solution = make_solution(graph)

    score = await scorer.score(Clue.parse("Landmark of France [5]"), solution)

    assert score == 1.0
    assert len(stub_client.queries) == 1


async def test_equivalent_with_other_label_dropped(stub_client, scorer, typed_graph):
    """Test an equivalent labelled with words outside the clue is not queried."""
    typed_graph.add((DBO.City, RDFS.label, Literal("municipality", lang="en")))
    solution = make_solution(typed_graph)

    assert scorer._externalise(CLUE, typed_graph, [DOM.City]) == []

    score = await scorer.score(CLUE, solution)

    assert score == 1.0
    assert len(stub_client.queries) == 1


async def test_equivalent_with_matching_label_kept(scorer, typed_graph):
    """Test an equivalent sharing the matched label replaces the domain term."""
    typed_graph.add((DBO.City, RDFS.label, Literal("City", lang="en")))

    assert scorer._externalise(CLUE, typed_graph, [DOM.City]) == [DBO.City]


async def test_failures_degrade_to_weakest_link(stub_client, scorer, typed_graph):
    """Test remote failures count as no links."""
    stub_client.fail_count = True
    solution = make_solution(typed_graph)

    score = await scorer.score(CLUE, solution)

    assert score == 1.0


async def test_snapshot_released(stub_client, scorer, typed_graph):
    """Test the inference graph is dropped after scoring."""
    solution = make_solution(typed_graph)

    await scorer.score(CLUE, solution)

    assert solution.snapshot_graph is None


async def test_score_in_unit_interval(stub_client, scorer, typed_graph):
    """Test scores stay within (0, 1]."""
    for links in (0, 1, 10, 1000):
        stub_client.count_for = lambda query, links=links: links
        score = await scorer.score(CLUE, make_solution(typed_graph))
        assert 0 < score <= 1
