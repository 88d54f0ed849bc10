"""
SPARQL Client - Remote knowledge graph endpoint access.

Features:
- Async operations (SPARQLWrapper runs in a worker thread)
- Per-call timeout
- Retries with exponential backoff for transient failures on SELECT
- JSON bindings converted to rdflib terms
"""

from __future__ import annotations

import asyncio
import logging
import socket
from http.client import HTTPException
from typing import TYPE_CHECKING, Any
from urllib.error import URLError

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.term import Node
from SPARQLWrapper import JSON, POST, XML, SPARQLWrapper
from SPARQLWrapper.SPARQLExceptions import EndPointInternalError, SPARQLWrapperException
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cluegraph.config.errors import (
    ErrorCode,
    KnowledgeGraphQueryError,
    TransientQueryError,
)

if TYPE_CHECKING:
    from cluegraph.config import Settings

logger = logging.getLogger(__name__)

__all__ = ["SparqlClient"]

_TRANSIENT_ERRORS = (EndPointInternalError, URLError, HTTPException, ConnectionError, socket.timeout)


class SparqlClient:
    """
    SPARQL endpoint client implementing the KnowledgeGraphClient contract.

    Example:
        >>> client = SparqlClient("https://dbpedia.org/sparql")
        >>> rows = await client.select("SELECT ?s WHERE { ?s ?p ?o } LIMIT 1")
        >>> graph = await client.construct(query)
    """

    def __init__(
        self,
        endpoint_url: str = "https://dbpedia.org/sparql",
        timeout_seconds: int = 30,
        max_attempts: int = 3,
        user_agent: str | None = None,
        retry_wait_min: float = 1.0,
        retry_wait_max: float = 10.0,
    ) -> None:
        """
        Initialize client.

        Args:
            endpoint_url: SPARQL endpoint URL
            timeout_seconds: Per-call timeout passed to the HTTP layer
            max_attempts: Attempts for SELECT queries on transient failures
            user_agent: HTTP User-Agent header
            retry_wait_min: Lower bound of the backoff between attempts
            retry_wait_max: Upper bound of the backoff between attempts
        """
        self.endpoint_url = endpoint_url
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max(1, max_attempts)
        self.user_agent = user_agent
        self.retry_wait_min = retry_wait_min
        self.retry_wait_max = retry_wait_max

    @classmethod
    def from_settings(cls, settings: Settings) -> SparqlClient:
        """Create a client from application settings."""
        return cls(
            endpoint_url=settings.endpoint_url,
            timeout_seconds=settings.query_timeout_seconds,
            max_attempts=settings.query_attempts,
            user_agent=settings.user_agent,
        )

    def _wrapper(self, query: str, return_format: str) -> SPARQLWrapper:
        """Fresh wrapper per call; SPARQLWrapper instances are stateful."""
        sparql = SPARQLWrapper(self.endpoint_url)
        if self.user_agent:
            sparql.agent = self.user_agent
        sparql.setMethod(POST)
        sparql.setTimeout(self.timeout_seconds)
        sparql.setReturnFormat(return_format)
        sparql.setQuery(query)
        return sparql

    def _run(self, query: str, return_format: str) -> Any:
        """Execute synchronously, mapping failures to the error taxonomy."""
        try:
            return self._wrapper(query, return_format).query().convert()
        except _TRANSIENT_ERRORS as e:
            raise TransientQueryError(
                f"Endpoint failed to answer: {e}",
                details={"endpoint": self.endpoint_url},
            ) from e
        except (SPARQLWrapperException, ValueError) as e:
            raise KnowledgeGraphQueryError(
                f"Query rejected: {e}",
                details={"endpoint": self.endpoint_url},
            ) from e

    async def _execute_with_retry(self, query: str, return_format: str) -> Any:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(TransientQueryError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=self.retry_wait_min, max=self.retry_wait_max),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.debug(
                        "Retrying SPARQL query (attempt %d)",
                        attempt.retry_state.attempt_number,
                    )
                return await asyncio.to_thread(self._run, query, return_format)
        raise KnowledgeGraphQueryError("Query was not attempted")

    async def select(self, query: str) -> list[dict[str, Node]]:
        """
        Execute a SELECT query.

        Args:
            query: SPARQL query text

        Returns:
            Result rows, variable name -> rdflib term

        Raises:
            KnowledgeGraphQueryError: Endpoint failed after retries
        """
        results = await self._execute_with_retry(query, JSON)
        if not isinstance(results, dict):
            raise KnowledgeGraphQueryError(
                "Unexpected SELECT response format",
                details={"type": type(results).__name__},
            )

        rows = [
            {name: self._to_term(value) for name, value in binding.items()}
            for binding in results.get("results", {}).get("bindings", [])
        ]
        logger.debug("SELECT returned %d rows", len(rows))
        return rows

    async def construct(self, query: str) -> Graph:
        """
        Execute a CONSTRUCT query. Not retried.

        Args:
            query: SPARQL query text

        Returns:
            Constructed graph

        Raises:
            KnowledgeGraphQueryError: Endpoint failed or returned no graph
        """
        graph = await asyncio.to_thread(self._run, query, XML)
        if not isinstance(graph, Graph):
            raise KnowledgeGraphQueryError(
                "Unexpected CONSTRUCT response format",
                details={"type": type(graph).__name__},
            )
        logger.debug("CONSTRUCT returned %d triples", len(graph))
        return graph

    async def count(self, query: str, variable: str = "count") -> int:
        """
        Execute a counting SELECT query.

        Args:
            query: SPARQL query text
            variable: Name of the count variable

        Returns:
            The count (0 when no row is returned)
        """
        rows = await self.select(query)
        if not rows or variable not in rows[0]:
            return 0
        value = rows[0][variable]
        try:
            return int(value.toPython()) if isinstance(value, Literal) else int(str(value))
        except (TypeError, ValueError) as e:
            raise KnowledgeGraphQueryError(
                f"Non-numeric count returned: {value!r}",
                code=ErrorCode.QUERY_FAILED,
            ) from e

    @staticmethod
    def _to_term(value: dict[str, str]) -> Node:
        """Convert a SPARQL JSON binding to an rdflib term."""
        kind = value.get("type")
        if kind == "uri":
            return URIRef(value["value"])
        if kind == "bnode":
            return BNode(value["value"])
        datatype = value.get("datatype")
        return Literal(
            value["value"],
            lang=value.get("xml:lang"),
            datatype=URIRef(datatype) if datatype else None,
        )
