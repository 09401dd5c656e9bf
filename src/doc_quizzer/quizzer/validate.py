"""Minimum-content check applied to extracted text before generation."""

from __future__ import annotations

from .errors import TooShortError

MIN_TEXT_LENGTH = 100
SNIPPET_LENGTH = 100


def validate_content(text: str, *, min_length: int = MIN_TEXT_LENGTH) -> str:
    """Return ``text`` trimmed, or raise :class:`TooShortError`."""
    trimmed = (text or "").strip()
    if len(trimmed) < min_length:
        raise TooShortError(len(trimmed), trimmed[:SNIPPET_LENGTH])
    return trimmed
