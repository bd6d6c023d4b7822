"""Locate delimited blocks in generated text."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TagMatch:
    """One delimited block.

    ``start``/``end`` span the whole block including both markers;
    ``body_start``/``body_end`` span the payload between them.
    """

    start: int
    end: int
    body_start: int
    body_end: int

    def body(self, text: str) -> str:
        return text[self.body_start : self.body_end]


def iter_tag_matches(text: str, open_tag: str, close_tag: str) -> Iterator[TagMatch]:
    """Yield every non-overlapping ``open_tag ... close_tag`` block in order.

    The close marker is searched for after the end of the open marker, so
    a close marker that is a prefix of the open marker (as with code
    fences) cannot match the open marker itself. An open marker with no
    close marker after it ends the scan.
    """
    if not open_tag or not close_tag:
        return
    pos = 0
    while True:
        start = text.find(open_tag, pos)
        if start == -1:
            return
        body_start = start + len(open_tag)
        body_end = text.find(close_tag, body_start)
        if body_end == -1:
            return
        end = body_end + len(close_tag)
        yield TagMatch(start=start, end=end, body_start=body_start, body_end=body_end)
        pos = end


def find_canonical_match(text: str, open_tag: str, close_tag: str) -> TagMatch | None:
    """Return the last block in *text*, or ``None`` when there is none.

    When a generator echoes or repeats the block, its most recent
    statement wins.
    """
    canonical: TagMatch | None = None
    for match in iter_tag_matches(text, open_tag, close_tag):
        canonical = match
    return canonical
