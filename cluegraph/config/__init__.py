"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    ClueGraphError,
    ErrorCode,
    InvalidClueError,
    KnowledgeGraphQueryError,
    OntologyError,
    StorageError,
    TransientQueryError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "ClueGraphError",
    "InvalidClueError",
    "KnowledgeGraphQueryError",
    "TransientQueryError",
    "OntologyError",
    "StorageError",
]
