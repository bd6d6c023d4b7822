"""Base model shared by every spatialtrack model.

Models are frozen so a snapshot handed to the host can never change
behind its back, and use ``alias_generator=to_camel`` so the host's
camelCase keys (``spatialData``, ``lastUpdate``) map onto snake_case
fields.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def epoch_ms_to_datetime(value: int | float) -> datetime:
    """Convert an epoch timestamp in milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000.0, tz=UTC)


class SpatialBaseModel(BaseModel):
    """Base for spatialtrack models.

    * camelCase aliases for host payloads, snake_case for Python callers
    * frozen instances, safe to share between successive snapshots
    * unknown keys are ignored so newer host payloads still load
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_host(self) -> dict[str, Any]:
        """Dump the model in the host's camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True)
