"""
Error Taxonomy - Consistent error codes across the solver.

Usage:
    from cluegraph.config.errors import ErrorCode, ClueGraphError

    raise ClueGraphError(ErrorCode.QUERY_FAILED, "Endpoint unreachable")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error reports."""

    # Clue errors
    CLUE_EMPTY = "CLUE_EMPTY"
    CLUE_INVALID_STRUCTURE = "CLUE_INVALID_STRUCTURE"

    # Remote knowledge graph errors
    QUERY_FAILED = "QUERY_FAILED"
    QUERY_TRANSIENT = "QUERY_TRANSIENT"
    QUERY_TIMEOUT = "QUERY_TIMEOUT"

    # Ontology errors
    ONTOLOGY_UNAVAILABLE = "ONTOLOGY_UNAVAILABLE"

    # Storage errors
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ClueGraphError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a report-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidClueError(ClueGraphError):
    """Malformed clue input."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CLUE_INVALID_STRUCTURE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message, details)


class KnowledgeGraphQueryError(ClueGraphError):
    """A query against the remote knowledge graph failed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.QUERY_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message, details)


class TransientQueryError(KnowledgeGraphQueryError):
    """Remote failure worth retrying (timeouts, 5xx, dropped connections)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, ErrorCode.QUERY_TRANSIENT, details)


class OntologyError(ClueGraphError):
    """Domain ontology could not be loaded."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.ONTOLOGY_UNAVAILABLE, message, details)


class StorageError(ClueGraphError):
    """Knowledge base read/write errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.STORAGE_READ_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message, details)
