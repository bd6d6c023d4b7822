"""Engine configuration for spatialtrack."""

from __future__ import annotations

import dataclasses
import math
import os
from collections.abc import Mapping
from typing import Any

from spatialtrack._constants import COORDINATE_LIMIT, DEFAULT_STATUS, PREVIEW_CHARS, TAG_CLOSE, TAG_OPEN
from spatialtrack.exceptions import SpatialConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


_BOOL_FIELDS = ("is_active", "suppress_logs")

# Host config keys (camelCase) mapped to dataclass fields.
_HOST_KEY_MAP: dict[str, str] = {
    "isActive": "is_active",
    "suppressLogs": "suppress_logs",
    "openTag": "open_tag",
    "closeTag": "close_tag",
    "coordinateLimit": "coordinate_limit",
    "defaultStatus": "default_status",
    "previewChars": "preview_chars",
}


@dataclasses.dataclass(frozen=True)
class EngineConfig:
    """Engine configuration.

    Parameters
    ----------
    is_active : bool
        When ``False`` every hook is a no-op: no instruction is injected,
        nothing is parsed and state is never touched.
    suppress_logs : bool
        Silence debug/warning/error log records emitted by the engine.
        Behavior is unchanged; validation warnings are still returned.
    open_tag : str
        Marker opening the embedded block.
    close_tag : str
        Marker closing the embedded block.
    coordinate_limit : float
        Coordinates are clamped into ``[-coordinate_limit, +coordinate_limit]``.
    default_status : str
        Placeholder used when a character has no usable status.
    preview_chars : int
        Length of the payload preview attached to decode failures.
    """

    is_active: bool = True
    suppress_logs: bool = False
    open_tag: str = TAG_OPEN
    close_tag: str = TAG_CLOSE
    coordinate_limit: float = COORDINATE_LIMIT
    default_status: str = DEFAULT_STATUS
    preview_chars: int = PREVIEW_CHARS

    def __post_init__(self) -> None:
        for name in _BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                raise SpatialConfigError(f"{name} must be a boolean, got {getattr(self, name)!r}")
        if not self.open_tag or not self.close_tag:
            raise SpatialConfigError("open_tag and close_tag must be non-empty")
        limit = self.coordinate_limit
        if isinstance(limit, bool) or not isinstance(limit, (int, float)) or not math.isfinite(limit) or limit <= 0:
            raise SpatialConfigError(f"coordinate_limit must be a positive finite number, got {limit!r}")
        if not isinstance(self.default_status, str) or not self.default_status.strip():
            raise SpatialConfigError("default_status must be a non-empty string")
        if self.preview_chars <= 0:
            raise SpatialConfigError(f"preview_chars must be positive, got {self.preview_chars!r}")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> EngineConfig:
        """Create configuration from a host-supplied config dict.

        The host may pass ``None`` or a partial dict; missing keys keep
        their defaults. Both camelCase host keys (``isActive``) and field
        names (``is_active``) are accepted. Unknown keys are ignored.
        """
        if not values:
            return cls()
        field_names = {f.name for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = _HOST_KEY_MAP.get(key, key)
            if name not in field_names or value is None:
                continue
            if name in _BOOL_FIELDS and isinstance(value, str):
                # Hosts may serialize toggles as text; unrecognized text fails validation.
                value = _env_bool(value, value)  # type: ignore[arg-type]
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def from_env(cls, **overrides: Any) -> EngineConfig:
        """Create configuration from environment variables.

        Reads ``SPATIAL_IS_ACTIVE``, ``SPATIAL_SUPPRESS_LOGS``,
        ``SPATIAL_COORDINATE_LIMIT`` and ``SPATIAL_DEFAULT_STATUS``.
        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        if "is_active" not in overrides:
            config_kwargs["is_active"] = _env_bool(env.get("SPATIAL_IS_ACTIVE"), True)
        if "suppress_logs" not in overrides:
            config_kwargs["suppress_logs"] = _env_bool(env.get("SPATIAL_SUPPRESS_LOGS"), False)

        limit_env = env.get("SPATIAL_COORDINATE_LIMIT")
        if limit_env is not None and "coordinate_limit" not in overrides:
            try:
                config_kwargs["coordinate_limit"] = float(limit_env)
            except ValueError as exc:
                raise SpatialConfigError(f"SPATIAL_COORDINATE_LIMIT is not a number: {limit_env!r}") from exc

        status_env = env.get("SPATIAL_DEFAULT_STATUS")
        if status_env is not None and "default_status" not in overrides:
            config_kwargs["default_status"] = status_env

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
