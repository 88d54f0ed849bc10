"""
Knowledge Contracts - Interfaces for the solved-clue store.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from cluegraph.domains.clues import Clue, Solution


@runtime_checkable
class SolvedClueStore(Protocol):
    """Contract for recording and recalling confirmed solutions."""

    def merge(self, clue: Clue, solutions: Iterable[Solution]) -> asyncio.Future:
        """Queue positively scored solutions; resolves to the number recorded."""
        ...

    def persist(self) -> asyncio.Future:
        """Queue a write to disk; resolves to whether it succeeded."""
        ...

    def lookup(self, clue: Clue) -> asyncio.Future:
        """Queue a lookup; resolves to the recorded solution texts."""
        ...

    @property
    def finished(self) -> bool:
        """No request is queued or running."""
        ...

    async def join(self) -> None:
        """Wait for every submitted request."""
        ...
