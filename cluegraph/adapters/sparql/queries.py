"""
SPARQL Query Builder - All query text the solver sends to the endpoint.

Every clue fragment and resource identifier embedded in a query passes
through ``literal`` / ``iri`` here, so escaping lives in one place.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from urllib.parse import quote

from rdflib import Literal

__all__ = ["SparqlQueryBuilder", "iri", "literal"]

PREFIXES = """PREFIX rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#>
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
PREFIX foaf: <http://xmlns.com/foaf/0.1/>
PREFIX dbpprop: <http://dbpedia.org/property/>
PREFIX dbpedia-owl: <http://dbpedia.org/ontology/>
"""

# Relations carrying human-readable names, in union order
LABEL_RELATIONS = ("rdfs:label", "dbpprop:name", "foaf:givenName", "foaf:surname")
REDIRECT_RELATION = "dbpedia-owl:wikiPageRedirects"

_IRI_UNSAFE = re.compile(r'[\x00-\x20<>"{}|\\^`]')


def iri(uri: str) -> str:
    """Render ``uri`` as a SPARQL IRI reference, percent-encoding unsafe characters."""
    if _IRI_UNSAFE.search(uri):
        uri = _IRI_UNSAFE.sub(lambda match: quote(match.group(0), safe=""), uri)
    return f"<{uri}>"


def literal(text: str, language: str | None = None) -> str:
    """Render ``text`` as an escaped SPARQL string literal."""
    return Literal(text, lang=language or None).n3()


def free_text(text: str) -> str:
    """Render ``text`` as a quoted phrase for Virtuoso ``bif:contains``."""
    phrase = " ".join(text.replace('"', " ").replace("'", " ").split())
    return "'\"" + phrase.replace("\\", "\\\\") + "\"'"


class SparqlQueryBuilder:
    """
    Builds the recognition, neighbourhood and distance queries.

    Example:
        >>> builder = SparqlQueryBuilder(language="en")
        >>> query = builder.recognition_query("France", limit=200)
    """

    def __init__(self, language: str = "en") -> None:
        self.language = language

    def recognition_query(
        self,
        fragment: str,
        fill_in_blank: bool = False,
        limit: int = 200,
    ) -> str:
        """
        Resources whose name-like relations match a clue fragment.

        Exact mode matches the language-tagged literal; fill-in-the-blank mode
        matches labels containing the fragment.
        """
        patterns = []
        for relation in LABEL_RELATIONS:
            patterns.append(self._label_pattern("?resource", relation, fragment, fill_in_blank))
        for relation in LABEL_RELATIONS:
            patterns.append(
                self._label_pattern("?redirect", relation, fragment, fill_in_blank)
                + f" ?redirect {REDIRECT_RELATION} ?resource ."
            )

        union = "\n  UNION ".join("{ " + pattern + " }" for pattern in patterns)
        return (
            f"{PREFIXES}"
            "SELECT DISTINCT ?resource WHERE {\n"
            f"  {union}\n"
            f"}} LIMIT {int(limit)}"
        )

    def _label_pattern(
        self,
        subject: str,
        relation: str,
        fragment: str,
        fill_in_blank: bool,
    ) -> str:
        if not fill_in_blank:
            return f"{subject} {relation} {literal(fragment, self.language)} ."
        return (
            f"{subject} {relation} ?label . ?label bif:contains {free_text(fragment)} ."
            f" FILTER(langMatches(lang(?label), {literal(self.language)}))"
        )

    def subject_neighbourhood_query(self, uri: str) -> str:
        """Triples with ``uri`` as subject, plus labels of objects and predicates."""
        resource = iri(uri)
        return (
            f"{PREFIXES}"
            "CONSTRUCT {\n"
            f"  {resource} ?predicate ?object .\n"
            "  ?object rdfs:label ?label .\n"
            "  ?predicate rdfs:label ?predicateLabel .\n"
            "} WHERE {\n"
            f"  {resource} ?predicate ?object .\n"
            "  OPTIONAL { ?object rdfs:label ?label . }\n"
            "  OPTIONAL { ?predicate rdfs:label ?predicateLabel . }\n"
            "}"
        )

    def object_neighbourhood_query(self, uri: str) -> str:
        """Triples with ``uri`` as object, plus labels of subjects and predicates."""
        resource = iri(uri)
        return (
            f"{PREFIXES}"
            "CONSTRUCT {\n"
            f"  ?subject ?predicate {resource} .\n"
            "  ?subject rdfs:label ?label .\n"
            "  ?predicate rdfs:label ?predicateLabel .\n"
            "} WHERE {\n"
            f"  ?subject ?predicate {resource} .\n"
            "  ?subject rdfs:label ?label .\n"
            "  OPTIONAL { ?predicate rdfs:label ?predicateLabel . }\n"
            "}"
        )

    def count_links_query(self, first_uri: str, second_uri: str) -> str:
        """Number of triples linking two resources in either direction."""
        first, second = iri(first_uri), iri(second_uri)
        return (
            "SELECT (COUNT(*) AS ?count) WHERE {\n"
            f"  {{ {first} ?predicate {second} . }}\n"
            f"  UNION {{ {second} ?predicate {first} . }}\n"
            "}"
        )

    def count_typed_links_query(
        self,
        solution_uri: str,
        clue_uri: str,
        types: Sequence[str],
        properties: Sequence[str],
    ) -> str:
        """
        Number of matches of the recognised types and properties.

        One type-assertion pattern per type, and both directed links between
        solution and clue per property.
        """
        solution, clue = iri(solution_uri), iri(clue_uri)
        patterns = [f"{{ {solution} rdf:type {iri(type_uri)} . }}" for type_uri in types]
        for property_uri in properties:
            predicate = iri(property_uri)
            patterns.append(f"{{ {solution} {predicate} {clue} . }}")
            patterns.append(f"{{ {clue} {predicate} {solution} . }}")

        union = "\n  UNION ".join(patterns)
        return (
            f"{PREFIXES}"
            "SELECT (COUNT(*) AS ?count) WHERE {\n"
            f"  {union}\n"
            "}"
        )
