"""Lenient JSON decoding for generator output.

Generators frequently emit almost-JSON: single quotes, trailing commas,
stray prose around the object. :func:`decode_payload` tries a strict
decode first and only falls back to :func:`repair_json` when that fails,
so well-formed payloads pay nothing for the repair pass.
"""

from __future__ import annotations

import json
import re
from typing import Any

from spatialtrack._constants import PREVIEW_CHARS
from spatialtrack._logsafe import preview_text
from spatialtrack.exceptions import SpatialDecodeError

_NEWLINES = re.compile(r"\r?\n")
_TRAILING_SEPARATOR = re.compile(r",\s*([}\]])")


def repair_json(text: str) -> str:
    """Apply the common-mistake fixes to near-JSON *text*.

    1. Collapse line breaks to spaces
    2. Single quotes → double quotes
    3. Drop trailing commas before ``}`` or ``]``
    4. Trim to the outermost ``{...}`` span when surrounded by junk
    """
    repaired = text.strip()
    repaired = _NEWLINES.sub(" ", repaired)
    repaired = repaired.replace("'", '"')
    repaired = _TRAILING_SEPARATOR.sub(r"\1", repaired)
    first = repaired.find("{")
    last = repaired.rfind("}")
    if first != -1 and last > first:
        repaired = repaired[first : last + 1]
    return repaired


def _strict_decode(text: str) -> Any:
    # RecursionError covers pathologically nested input.
    try:
        return json.loads(text)
    except RecursionError as exc:
        raise ValueError("payload nesting too deep") from exc


def decode_payload(candidate: str, *, preview_chars: int = PREVIEW_CHARS) -> Any:
    """Decode *candidate* strictly, then once more after :func:`repair_json`.

    Raises :class:`SpatialDecodeError` when both attempts fail.
    """
    text = candidate.strip()
    try:
        return _strict_decode(text)
    except ValueError as strict_error:
        try:
            return _strict_decode(repair_json(text))
        except ValueError as lenient_error:
            raise SpatialDecodeError(
                "payload is not valid JSON after lenient repair",
                strict_error=strict_error,
                lenient_error=lenient_error,
                preview=preview_text(text, preview_chars),
            ) from lenient_error
