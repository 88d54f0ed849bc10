"""
Extraction Contracts - Interfaces for candidate extraction.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cluegraph.domains.clues import (
    Clue,
    ProgressCallback,
    RawCandidate,
    RecognizedResource,
)


@runtime_checkable
class Extractor(Protocol):
    """Contract for expanding recognised resources into raw candidates."""

    async def extract(
        self,
        clue: Clue,
        resources: list[RecognizedResource],
        progress: ProgressCallback | None = None,
    ) -> list[RawCandidate]:
        """Extract candidate answer strings; remote failures propagate."""
        ...
