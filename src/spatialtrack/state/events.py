"""Normalized update events.

The engine turns a decoded, validated and deduplicated packet into a
:class:`SpatialUpdate`. Only the state/store layer is allowed to merge it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spatialtrack.models.character import CharacterPosition


class UpdateSource(StrEnum):
    RESPONSE = "response"
    REPLAY = "replay"


class SpatialUpdate(BaseModel):
    """A validated packet ready to replace the persisted state."""

    model_config = ConfigDict(frozen=True)

    characters: tuple[CharacterPosition, ...] = ()
    source: UpdateSource = UpdateSource.RESPONSE
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    raw: dict[str, Any] = Field(default_factory=dict, description="Decoded payload (clipped for diagnostics)")

    @field_validator("characters")
    @classmethod
    def _require_deduplicated(cls, value: tuple[CharacterPosition, ...]) -> tuple[CharacterPosition, ...]:
        names = [character.name for character in value]
        if len(names) != len(set(names)):
            raise ValueError("update characters must be deduplicated")
        return value

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
