"""
Clue Models - Data types shared by the solving phases.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from rdflib import Graph

from cluegraph.config.errors import ErrorCode, InvalidClueError

from .text import letter_structure, strip_language_tag, to_proper_case

__all__ = ["Clue", "RecognizedResource", "RawCandidate", "Solution"]


def _is_blank(token: str) -> bool:
    return bool(token) and set(token) == {"_"}


class Clue(BaseModel):
    """
    A parsed crossword clue.

    Example:
        >>> clue = Clue.parse("Capital of France [5]")
        >>> clue.fragments
        ('Capital', 'of', 'France')
        >>> clue.solution_structure
        (5,)
    """

    source_text: str
    fragments: tuple[str, ...]
    solution_structure: tuple[int, ...] = Field(min_length=1)
    fill_in_blank: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, raw: str, fill_in_blank: bool | None = None) -> Clue:
        """
        Parse ``"<clue text> [<n1>, <n2>, ...]"``.

        Args:
            raw: Clue text followed by its bracketed solution structure
            fill_in_blank: Force the fill-in-the-blank mode. Detected from
                underscore-only tokens when omitted.

        Raises:
            InvalidClueError: Empty clue or malformed solution structure
        """
        if raw is None or not raw.strip():
            raise InvalidClueError("Empty clue", ErrorCode.CLUE_EMPTY)

        raw = raw.strip()
        if "[" not in raw or not raw.endswith("]"):
            raise InvalidClueError(
                "Invalid specification of solution structure",
                details={"clue": raw},
            )

        text, _, structure = raw.rpartition("[")
        text = text.strip()
        if not text:
            raise InvalidClueError("Empty clue", ErrorCode.CLUE_EMPTY, {"clue": raw})

        solution_structure: list[int] = []
        for entry in structure[:-1].split(","):
            entry = entry.strip()
            if not (entry.isascii() and entry.isdigit()) or int(entry) <= 0:
                raise InvalidClueError(
                    "Invalid specification of solution structure",
                    details={"clue": raw, "entry": entry},
                )
            solution_structure.append(int(entry))

        fragments = tuple(text.split())
        if fill_in_blank is None:
            fill_in_blank = any(_is_blank(token) for token in fragments)

        return cls(
            source_text=text,
            fragments=fragments,
            solution_structure=tuple(solution_structure),
            fill_in_blank=fill_in_blank,
        )

    @property
    def number_of_words(self) -> int:
        """Number of words in the answer."""
        return len(self.solution_structure)

    @property
    def structure_text(self) -> str:
        """Structure as written after the clue, e.g. ``[3, 5]``."""
        return "[" + ", ".join(str(n) for n in self.solution_structure) + "]"

    def _spans(self, max_words: int | None = None) -> list[str]:
        tokens = self.fragments
        spans: list[str] = []
        for start in range(len(tokens)):
            for end in range(start + 1, len(tokens) + 1):
                if max_words is not None and end - start > max_words:
                    break
                window = tokens[start:end]
                if any(_is_blank(token) for token in window):
                    break
                spans.append(" ".join(window))
        return spans

    def search_fragments(self, max_words: int = 4) -> list[str]:
        """Distinct contiguous token spans to look up in the knowledge graph."""
        return list(dict.fromkeys(self._spans(max_words)))

    @property
    def label_fragments(self) -> frozenset[str]:
        """Proper-cased form of every contiguous span of the clue."""
        return frozenset(to_proper_case(span) for span in self._spans())

    def matches_fragment(self, label: str) -> bool:
        """Whether a graph label, once normalised, names a fragment of this clue."""
        label = strip_language_tag(label)
        if not label:
            return False
        return to_proper_case(label) in self.label_fragments

    def matches_structure(self, solution: Solution) -> bool:
        """Exact, order-sensitive comparison of word/letter structure."""
        return tuple(solution.solution_structure) == self.solution_structure


class RecognizedResource(BaseModel):
    """Knowledge graph node recognised from a clue fragment."""

    uri: str
    fragment: str

    model_config = ConfigDict(frozen=True)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RecognizedResource):
            return self.uri == other.uri
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.uri)


class RawCandidate(BaseModel):
    """Unvalidated answer string pulled out of a resource neighbourhood."""

    text: str
    clue_resource: str
    solution_resource: str | None = None
    graph: Graph | None = Field(default=None, exclude=True, repr=False)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class Solution(BaseModel):
    """Structurally validated candidate, eligible for scoring."""

    solution_text: str
    solution_structure: tuple[int, ...]
    clue_resource: str | None = None
    solution_resource: str | None = None
    score: float = 0.0
    snapshot_graph: Graph | None = Field(default=None, exclude=True, repr=False)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> Solution:
        """Build a solution from candidate text, deriving its structure."""
        solution_text = strip_language_tag(text)
        return cls(
            solution_text=solution_text,
            solution_structure=letter_structure(solution_text),
            **kwargs,
        )

    @classmethod
    def from_candidate(cls, candidate: RawCandidate) -> Solution:
        """Build a solution carrying the candidate's provenance."""
        return cls.from_text(
            candidate.text,
            clue_resource=candidate.clue_resource,
            solution_resource=candidate.solution_resource,
            snapshot_graph=candidate.graph,
        )

    @property
    def confidence(self) -> int:
        """Score as a whole-number percentage."""
        return round(self.score * 100)

    def release_snapshot(self) -> None:
        """Drop the inference graph once scoring no longer needs it."""
        self.snapshot_graph = None
