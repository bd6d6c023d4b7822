"""Data models for spatial state."""

from spatialtrack.models._base import SpatialBaseModel, epoch_ms_to_datetime
from spatialtrack.models.character import CharacterPosition
from spatialtrack.models.state import SpatialPacket, SpatialState

__all__ = [
    "CharacterPosition",
    "SpatialBaseModel",
    "SpatialPacket",
    "SpatialState",
    "epoch_ms_to_datetime",
]
