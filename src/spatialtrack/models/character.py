"""Per-character spatial record."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from spatialtrack._constants import DEFAULT_STATUS
from spatialtrack.models._base import SpatialBaseModel


class CharacterPosition(SpatialBaseModel):
    """One tracked character's position relative to the user.

    The user stands at the origin ``(0, 0)``.

    Parameters
    ----------
    name : str
        Case-sensitive identity of the character.
    x : float
        Horizontal offset (negative = left, positive = right).
    y : float
        Forward offset (negative = behind, positive = in front).
    status : str
        Short free-text description of what the character is doing.
    """

    name: str = Field(min_length=1)
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    status: str = DEFAULT_STATUS

    @field_validator("status", mode="before")
    @classmethod
    def _default_blank_status(cls, value: Any) -> Any:
        if value is None or value == "":
            return DEFAULT_STATUS
        return value
