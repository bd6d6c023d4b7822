"""Produce the user-visible text once the block has been consumed."""

from __future__ import annotations

from spatialtrack.extraction.scanner import TagMatch


def strip_match(text: str, match: TagMatch | None) -> str:
    """Remove *match* from *text* and trim surrounding whitespace.

    Without a match the text is returned untouched (not even trimmed).
    """
    if match is None:
        return text
    return (text[: match.start] + text[match.end :]).strip()
