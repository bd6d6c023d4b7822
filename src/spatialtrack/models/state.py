"""Persisted spatial state models."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from pydantic import Field, ValidationError, field_validator, model_validator

from spatialtrack.exceptions import SpatialStateError
from spatialtrack.models._base import SpatialBaseModel, epoch_ms_to_datetime
from spatialtrack.models.character import CharacterPosition


class SpatialPacket(SpatialBaseModel):
    """The characters visible in one turn, one record per name."""

    characters: tuple[CharacterPosition, ...] = ()

    @model_validator(mode="after")
    def _unique_names(self) -> SpatialPacket:
        seen: set[str] = set()
        for character in self.characters:
            if character.name in seen:
                raise ValueError(f"duplicate character name: {character.name!r}")
            seen.add(character.name)
        return self

    def names(self) -> tuple[str, ...]:
        return tuple(character.name for character in self.characters)

    def by_name(self) -> dict[str, CharacterPosition]:
        """Name → record mapping of the packet."""
        return {character.name: character for character in self.characters}

    def get(self, name: str) -> CharacterPosition | None:
        for character in self.characters:
            if character.name == name:
                return character
        return None


class SpatialState(SpatialBaseModel):
    """Snapshot persisted with every message.

    Parameters
    ----------
    spatial_data : SpatialPacket
        The characters known after the most recent successful update.
    last_update : int
        Epoch milliseconds of the most recent successful update (or of
        construction, for a fresh state).
    """

    spatial_data: SpatialPacket = Field(default_factory=SpatialPacket)
    last_update: int

    @field_validator("last_update", mode="before")
    @classmethod
    def _coerce_epoch_ms(cls, value: Any) -> Any:
        # Host timestamps come from JavaScript and may arrive as floats.
        if isinstance(value, float) and not math.isfinite(value):
            # Left for int validation to reject.
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, float):
            return round(value)
        return value

    @classmethod
    def empty(cls, now_ms: int) -> SpatialState:
        return cls(spatial_data=SpatialPacket(), last_update=now_ms)

    @classmethod
    def from_host(cls, data: Any) -> SpatialState:
        """Adopt a host snapshot, raising :class:`SpatialStateError` when malformed."""
        if isinstance(data, SpatialState):
            return data
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise SpatialStateError(f"invalid spatial state snapshot: {exc}") from exc

    @property
    def characters(self) -> tuple[CharacterPosition, ...]:
        return self.spatial_data.characters

    @property
    def updated_at(self) -> datetime:
        """``last_update`` as an aware UTC datetime."""
        return epoch_ms_to_datetime(self.last_update)
