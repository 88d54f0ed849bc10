"""
Knowledge Models - Data types for the solved-clue knowledge base.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SolvedClueRecord(BaseModel):
    """A clue with every confirmed solution text recorded for it."""

    clue_text: str
    structure_text: str
    clue_uri: str | None = None  # None for transient comparison records
    solution_texts: list[str] = Field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        """Identity used when merging."""
        return (self.clue_text, self.structure_text)

    def same_clue(self, other: SolvedClueRecord) -> bool:
        """Whether both records describe the same clue."""
        return self.key == other.key

    def add_solution(self, text: str) -> bool:
        """Append a solution text; False if it was already recorded."""
        if text in self.solution_texts:
            return False
        self.solution_texts.append(text)
        return True


class KnowledgeBaseStats(BaseModel):
    """Knowledge base statistics."""

    enabled: bool
    clue_count: int = 0
    solution_count: int = 0
    triple_count: int = 0
