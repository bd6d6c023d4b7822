"""Deterministic state merge policy.

Merging is whole-packet replacement: the newest update describes
everyone visible this turn, so a character missing from it is gone.
No payload parsing happens here.
"""

from __future__ import annotations

from collections.abc import Iterable

from spatialtrack.models.character import CharacterPosition
from spatialtrack.models.state import SpatialPacket, SpatialState


def merge_update(
    prior: SpatialState,
    characters: Iterable[CharacterPosition],
    *,
    timestamp_ms: int,
) -> SpatialState:
    """Build the state that follows *prior* after an update.

    The returned snapshot is a new object; *prior* is left untouched so
    earlier snapshots stay valid for history replay. ``last_update`` never
    moves backwards, even if the clock does.
    """
    return SpatialState(
        spatial_data=SpatialPacket(characters=tuple(characters)),
        last_update=max(timestamp_ms, prior.last_update),
    )


def dropped_names(prior: SpatialState, current: SpatialState) -> tuple[str, ...]:
    """Names present in *prior* that *current* no longer tracks."""
    remaining = set(current.spatial_data.names())
    return tuple(name for name in prior.spatial_data.names() if name not in remaining)
