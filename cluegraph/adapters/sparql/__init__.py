"""
SPARQL adapter - Remote knowledge graph queries.
"""

from .client import SparqlClient
from .queries import SparqlQueryBuilder, iri, literal

__all__ = ["SparqlClient", "SparqlQueryBuilder", "iri", "literal"]
