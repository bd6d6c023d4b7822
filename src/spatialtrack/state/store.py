"""In-memory owner of the current spatial snapshot.

This is the only component allowed to replace persisted state.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from spatialtrack.models.state import SpatialState
from spatialtrack.state.events import SpatialUpdate, UpdateSource
from spatialtrack.state.merge import merge_update


def now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class SpatialStateStore:
    """Holds one conversation's current :class:`SpatialState`.

    Given the same initial snapshot, clock readings and sequence of
    updates, the store produces the same snapshots.
    """

    def __init__(
        self,
        initial: SpatialState | None = None,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._clock = clock
        self._state = initial if initial is not None else SpatialState.empty(clock())
        self._last_source: UpdateSource | None = None

    @property
    def state(self) -> SpatialState:
        return self._state

    @property
    def last_source(self) -> UpdateSource | None:
        """Where the current snapshot came from, ``None`` for the initial one."""
        return self._last_source

    def apply(self, update: SpatialUpdate) -> SpatialState:
        """Replace the current snapshot with the characters of *update*."""
        self._state = merge_update(self._state, update.characters, timestamp_ms=self._clock())
        self._last_source = update.source
        return self._state

    def replay(self, snapshot: SpatialState) -> SpatialState:
        """Adopt a previously recorded snapshot verbatim."""
        self._state = snapshot
        self._last_source = UpdateSource.REPLAY
        return self._state
