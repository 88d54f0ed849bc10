"""
Recognition Contracts - Interfaces for entity recognition.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cluegraph.domains.clues import Clue, ProgressCallback, RecognizedResource


@runtime_checkable
class Recognizer(Protocol):
    """Contract for turning clue fragments into knowledge graph nodes."""

    async def recognize(
        self,
        clue: Clue,
        progress: ProgressCallback | None = None,
    ) -> list[RecognizedResource]:
        """
        Recognise entities named in a clue.

        Args:
            clue: The clue to analyse
            progress: Optional percentage callback

        Returns:
            Unique resources in first-recognised order
        """
        ...
