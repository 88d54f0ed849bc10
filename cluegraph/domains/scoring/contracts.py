"""
Scoring Contracts - Interfaces for solution scoring.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cluegraph.domains.clues import Clue, Solution


@runtime_checkable
class Scorer(Protocol):
    """Contract for scoring a validated solution."""

    async def score(self, clue: Clue, solution: Solution) -> float:
        """Compute the score, set it on the solution and return it."""
        ...
