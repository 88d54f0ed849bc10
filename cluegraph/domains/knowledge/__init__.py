"""
Knowledge Domain - Solved clues learned across solves.

This domain handles:
- The single-writer RDF knowledge base
- Merging confirmed solutions and persisting them to disk
"""

from .contracts import SolvedClueStore
from .models import KnowledgeBaseStats, SolvedClueRecord
from .store import KnowledgeBase

__all__ = [
    # Contracts
    "SolvedClueStore",
    # Models
    "SolvedClueRecord",
    "KnowledgeBaseStats",
    # Implementations
    "KnowledgeBase",
]
