"""Field validation for decoded character entries.

Coordinates are load-bearing: an entry whose ``x`` or ``y`` cannot be
read as a finite number is dropped entirely. Values that are merely out
of range are saturated to the limit instead, since "very far away" is
still meaningful.
"""

from __future__ import annotations

import json
import math
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from spatialtrack._constants import COORDINATE_LIMIT, DEFAULT_STATUS, PREVIEW_CHARS
from spatialtrack._logsafe import preview_text
from spatialtrack.exceptions import SpatialPacketError
from spatialtrack.models.character import CharacterPosition


@dataclass(frozen=True, slots=True)
class ValidationWarning:
    """Why an entry was dropped."""

    index: int
    name: str | None
    reason: str

    def __str__(self) -> str:
        label = repr(self.name) if self.name is not None else f"#{self.index}"
        return f"character {label} discarded: {self.reason}"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    characters: tuple[CharacterPosition, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()


def safe_float(value: Any) -> float | None:
    """Read *value* as a finite float, or ``None`` when that is impossible.

    Numbers are taken as-is, strings are parsed after stripping. Booleans,
    containers, NaN and infinities are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            # Finite but beyond float range; saturate so clamping still applies.
            return sys.float_info.max if value > 0 else -sys.float_info.max
    if isinstance(value, float):
        result = value
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(result):
        return None
    return result


def clamp(value: float, limit: float) -> float:
    return max(-limit, min(limit, value))


def _describe(value: Any, limit: int = 40) -> str:
    try:
        text = json.dumps(value, allow_nan=True)
    except (TypeError, ValueError, RecursionError):
        text = repr(value)
    return preview_text(text, limit)


def extract_characters(value: Any, *, preview_chars: int = PREVIEW_CHARS) -> list[Any]:
    """Return the ``characters`` list of a decoded payload.

    Raises :class:`SpatialPacketError` when *value* is not an object with a
    ``characters`` array. An empty array is a valid packet.
    """
    if not isinstance(value, dict):
        raise SpatialPacketError(
            f"payload must be a JSON object, got {type(value).__name__}",
            preview=_describe(value, preview_chars),
        )
    characters = value.get("characters")
    if not isinstance(characters, list):
        raise SpatialPacketError(
            "payload has no 'characters' array",
            preview=preview_text(", ".join(map(str, value.keys())), preview_chars),
        )
    return characters


def _validate_one(
    index: int,
    entry: Any,
    *,
    limit: float,
    default_status: str,
) -> CharacterPosition | ValidationWarning:
    if not isinstance(entry, dict):
        return ValidationWarning(index=index, name=None, reason=f"entry is not an object: {_describe(entry)}")

    name = entry.get("name")
    if not isinstance(name, str) or not name:
        return ValidationWarning(index=index, name=None, reason=f"missing or empty name: {_describe(name)}")

    coordinates: dict[str, float] = {}
    for axis in ("x", "y"):
        raw = entry.get(axis)
        if raw is None:
            # An omitted coordinate places the character on the user's axis.
            coordinates[axis] = 0.0
            continue
        parsed = safe_float(raw)
        if parsed is None:
            return ValidationWarning(
                index=index,
                name=name,
                reason=f"{axis} is not a finite number: {_describe(raw)}",
            )
        coordinates[axis] = clamp(parsed, limit)

    status = entry.get("status")
    if not isinstance(status, str) or not status:
        status = default_status

    return CharacterPosition(name=name, x=coordinates["x"], y=coordinates["y"], status=status)


def validate_characters(
    items: Sequence[Any],
    *,
    limit: float = COORDINATE_LIMIT,
    default_status: str = DEFAULT_STATUS,
) -> ValidationResult:
    """Validate, coerce and clamp every entry of a decoded packet.

    Entries are handled independently; a bad entry only costs itself.
    Order of the surviving records follows *items*.
    """
    characters: list[CharacterPosition] = []
    warnings: list[ValidationWarning] = []
    for index, entry in enumerate(items):
        outcome = _validate_one(index, entry, limit=limit, default_status=default_status)
        if isinstance(outcome, ValidationWarning):
            warnings.append(outcome)
        else:
            characters.append(outcome)
    return ValidationResult(characters=tuple(characters), warnings=tuple(warnings))
