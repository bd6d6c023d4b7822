"""spatialtrack - extract and track character positions from generated chat text."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("spatialtrack")
except PackageNotFoundError:
    __version__ = "0+local"
from spatialtrack.config import EngineConfig
from spatialtrack.engine import PromptInjection, SpatialEngine, TurnOutcome, TurnResult, prepare_prompt, process_response
from spatialtrack.exceptions import (
    SpatialConfigError,
    SpatialDecodeError,
    SpatialError,
    SpatialPacketError,
    SpatialStateError,
)
from spatialtrack.extraction import ValidationWarning
from spatialtrack.instructions import build_system_instruction
from spatialtrack.models import CharacterPosition, SpatialPacket, SpatialState
from spatialtrack.stage import LoadResponse, Message, SpatialStage, StageResponse

__all__ = [
    "__version__",
    "CharacterPosition",
    "EngineConfig",
    "LoadResponse",
    "Message",
    "PromptInjection",
    "SpatialConfigError",
    "SpatialDecodeError",
    "SpatialEngine",
    "SpatialError",
    "SpatialPacket",
    "SpatialPacketError",
    "SpatialStage",
    "SpatialState",
    "SpatialStateError",
    "StageResponse",
    "TurnOutcome",
    "TurnResult",
    "ValidationWarning",
    "build_system_instruction",
    "prepare_prompt",
    "process_response",
]
