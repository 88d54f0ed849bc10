"""
Clues Domain - Clue parsing, candidate validation and shared normalisation.

This domain handles:
- Clue and solution data types
- Label normalisation (language tags, proper case)
- Structural filtering of candidate answers
"""

from .contracts import KnowledgeGraphClient, ProgressCallback
from .filter import FilterResult, SolutionFilter
from .models import Clue, RawCandidate, RecognizedResource, Solution
from .text import (
    language_tag,
    letter_structure,
    strip_language_tag,
    to_proper_case,
    with_language_tag,
)

__all__ = [
    # Contracts
    "KnowledgeGraphClient",
    "ProgressCallback",
    # Models
    "Clue",
    "RecognizedResource",
    "RawCandidate",
    "Solution",
    "FilterResult",
    # Implementations
    "SolutionFilter",
    # Text
    "language_tag",
    "letter_structure",
    "strip_language_tag",
    "to_proper_case",
    "with_language_tag",
]
