"""
Solution Filter - Structural validation of raw candidates.

Turns raw candidate strings into Solution records that fit the clue.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

from .models import Clue, RawCandidate, Solution
from .text import language_tag, strip_language_tag

logger = logging.getLogger(__name__)

__all__ = ["FilterResult", "SolutionFilter"]


class FilterResult(BaseModel):
    """Solutions that fit the clue, plus the first candidate seen."""

    solutions: list[Solution] = Field(default_factory=list)
    best_effort: str | None = None

    @property
    def has_solutions(self) -> bool:
        return bool(self.solutions)


class SolutionFilter:
    """
    Validates candidates against a clue's word/letter structure.

    Example:
        >>> result = SolutionFilter("en").filter(clue, candidates)
        >>> [s.solution_text for s in result.solutions]
        ['Paris']
    """

    def __init__(self, language: str = "en") -> None:
        self._language = language

    def filter_by_language(self, candidates: Iterable[RawCandidate]) -> list[RawCandidate]:
        """Drop candidates tagged with a language other than the configured one."""
        kept = []
        for candidate in candidates:
            tag = language_tag(candidate.text)
            if tag is not None and tag != self._language:
                continue
            kept.append(candidate)
        return kept

    def is_well_formed(self, solution: Solution) -> bool:
        """Hook for lexical checks on solution text. Accepts everything."""
        return True

    def filter(self, clue: Clue, candidates: Iterable[RawCandidate]) -> FilterResult:
        """
        Build the validated solution list for a clue.

        Args:
            clue: The clue being solved
            candidates: Raw candidates in extraction order

        Returns:
            FilterResult; an empty solution list means no solutions
        """
        candidates = list(candidates)
        best_effort = strip_language_tag(candidates[0].text) if candidates else None
        candidates = self.filter_by_language(candidates)
        solutions: list[Solution] = []
        seen: set[str] = set()

        for candidate in candidates:
            solution = Solution.from_candidate(candidate)
            if solution.solution_text in seen:
                continue
            if not self.is_well_formed(solution):
                continue
            if not clue.matches_structure(solution):
                continue
            seen.add(solution.solution_text)
            solutions.append(solution)

        logger.debug(
            "Filtered %d candidates to %d solutions for %r",
            len(candidates),
            len(solutions),
            clue.source_text,
        )
        return FilterResult(solutions=solutions, best_effort=best_effort)
