"""Custom exception hierarchy for spatialtrack."""

from __future__ import annotations


class SpatialError(Exception):
    """Base exception for all spatialtrack errors."""


class SpatialConfigError(SpatialError):
    """Invalid engine configuration."""


class SpatialDecodeError(SpatialError):
    """Payload could not be decoded, even after the repair pass.

    Carries both underlying decoder errors and a bounded preview of the
    offending text so the failure can be logged without dumping the
    whole message.
    """

    def __init__(
        self,
        message: str,
        *,
        strict_error: Exception | None = None,
        lenient_error: Exception | None = None,
        preview: str = "",
    ) -> None:
        self.strict_error = strict_error
        self.lenient_error = lenient_error
        self.preview = preview
        super().__init__(message)


class SpatialPacketError(SpatialError):
    """Payload decoded but is not a ``{"characters": [...]}`` object."""

    def __init__(self, message: str, *, preview: str = "") -> None:
        self.preview = preview
        super().__init__(message)


class SpatialStateError(SpatialError):
    """A state snapshot handed over by the host could not be adopted."""
