"""
Adapters - External service integrations.

All remote endpoint calls are wrapped here to isolate domains from third-party changes.
"""

from .sparql import SparqlClient, SparqlQueryBuilder

__all__ = [
    "SparqlClient",
    "SparqlQueryBuilder",
]
