"""
Text normalisation shared by every solving phase.

Recognition, extraction and scoring all compare graph labels with clue
fragments, so they must normalise labels identically.
"""

from __future__ import annotations

__all__ = [
    "LANGUAGE_TAG_LENGTH",
    "language_tag",
    "strip_language_tag",
    "to_proper_case",
    "letter_structure",
    "with_language_tag",
]

# "@xx" suffix as rendered on language-tagged literals
LANGUAGE_TAG_LENGTH = 3
LANGUAGE_TAG_MARKER = "@"


def language_tag(text: str) -> str | None:
    """Return the two-letter language tag suffix of ``text``, if any."""
    if len(text) > LANGUAGE_TAG_LENGTH and text[-LANGUAGE_TAG_LENGTH] == LANGUAGE_TAG_MARKER:
        return text[-LANGUAGE_TAG_LENGTH + 1:]
    return None


def strip_language_tag(text: str) -> str:
    """
    Remove a trailing ``@xx`` language tag.

    Example:
        >>> strip_language_tag("Paris@en")
        'Paris'
        >>> strip_language_tag("Paris")
        'Paris'
    """
    if language_tag(text) is not None:
        return text[:-LANGUAGE_TAG_LENGTH]
    return text


def with_language_tag(text: str, language: str | None) -> str:
    """Render a literal the way candidate strings carry it: ``text@lang``."""
    if language:
        return f"{text}{LANGUAGE_TAG_MARKER}{language}"
    return text


def to_proper_case(text: str) -> str:
    """
    Uppercase the first character and every character following a space.

    The rest of the string is left untouched.

    Example:
        >>> to_proper_case("president of france")
        'President Of France'
    """
    if not text:
        return text

    chars = [text[0].upper()]
    for index in range(1, len(text)):
        char = text[index]
        if text[index - 1] == " ":
            char = char.upper()
        chars.append(char)
    return "".join(chars)


def letter_structure(text: str) -> tuple[int, ...]:
    """Letters per whitespace-separated word of ``text``."""
    return tuple(sum(1 for char in word if char.isalpha()) for word in text.split())
