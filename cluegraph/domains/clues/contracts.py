"""
Clue Contracts - Interfaces shared by the solving phases.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from rdflib import Graph
from rdflib.term import Node

# Receives percentage complete (0-100) of the running phase
ProgressCallback = Callable[[int], None]


@runtime_checkable
class KnowledgeGraphClient(Protocol):
    """
    Contract for the remote knowledge graph endpoint.

    Implementations raise ``KnowledgeGraphQueryError`` when the endpoint
    cannot answer; callers decide whether that is fatal.
    """

    async def select(self, query: str) -> list[dict[str, Node]]:
        """
        Execute a SELECT query.

        Args:
            query: SPARQL query text

        Returns:
            One dict per result row, variable name -> RDF term
        """
        ...

    async def construct(self, query: str) -> Graph:
        """
        Execute a CONSTRUCT query.

        Args:
            query: SPARQL query text

        Returns:
            The constructed subgraph
        """
        ...

    async def count(self, query: str, variable: str = "count") -> int:
        """
        Execute a SELECT query returning a single count binding.

        Args:
            query: SPARQL query text
            variable: Name of the count variable

        Returns:
            The count, 0 when the endpoint returns no rows
        """
        ...
