"""Helpers for bounded diagnostic logging.

Generated text can be arbitrarily long. These helpers keep log records
readable by clipping payload fragments before they are emitted.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from spatialtrack._constants import PREVIEW_CHARS


def preview_text(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Return the first *limit* characters of *text*, marked when cut."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def clip_for_log(value: Any, *, max_string: int = 200, max_items: int = 50, _depth: int = 0) -> Any:
    """Return a clipped copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        clipped: dict[str, Any] = {}
        for index, (k, v) in enumerate(value.items()):
            if index >= max_items:
                clipped["…"] = f"<{len(value) - max_items} more>"
                break
            clipped[str(k)] = clip_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
        return clipped

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        items = [
            clip_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
            for v in list(value)[:max_items]
        ]
        if len(value) > max_items:
            items.append(f"<{len(value) - max_items} more>")
        return items

    # Fallback: represent unknown objects without dumping internals.
    return repr(value)
