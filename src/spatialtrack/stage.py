"""Host adapter.

Chat hosts drive extensions through a small set of lifecycle hooks and
exchange camelCase JSON. :class:`SpatialStage` maps those hooks onto a
:class:`~spatialtrack.engine.SpatialEngine`:

* ``load`` - initialization handshake
* ``set_state`` - history navigation (swipes, edits, rewinds)
* ``before_prompt`` - inject the tracking instruction
* ``after_response`` - consume the block and clean the message
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from spatialtrack._logsafe import preview_text
from spatialtrack.config import EngineConfig
from spatialtrack.engine import SpatialEngine, TurnOutcome, TurnResult
from spatialtrack.exceptions import SpatialStateError
from spatialtrack.models._base import SpatialBaseModel
from spatialtrack.models.state import SpatialState
from spatialtrack.state.store import now_ms

_logger = logging.getLogger(__name__)


class Message(SpatialBaseModel):
    """A chat message as delivered by the host. Only ``content`` is used."""

    content: str = ""
    is_bot: bool = False


class StageResponse(SpatialBaseModel):
    """Partial response to a hook; unset fields mean "no change"."""

    system_message: str | None = None
    message_state: SpatialState | None = None
    modified_message: str | None = None
    error: str | None = None

    def to_host(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LoadResponse(SpatialBaseModel):
    success: bool = True
    error: str | None = None
    init_state: Any = None
    chat_state: Any = None


def _as_message(message: Message | Mapping[str, Any] | str) -> Message:
    if isinstance(message, Message):
        return message
    if isinstance(message, str):
        return Message(content=message)
    try:
        return Message.model_validate(message)
    except ValidationError:
        # Hooks must not fail on a malformed host message; keep whatever text is usable.
        content = message.get("content") if isinstance(message, Mapping) else None
        return Message(content=content if isinstance(content, str) else "")


class SpatialStage:
    """Spatial tracking extension for one conversation.

    Parameters
    ----------
    config : EngineConfig or mapping or None
        Engine configuration, or the host's raw config dict
        (``{"isActive": ..., "suppressLogs": ...}``).
    message_state : SpatialState or mapping or None
        State recorded with the message the conversation resumes from.
        A malformed snapshot is logged and replaced by an empty state.
    clock : callable
        Epoch-milliseconds clock used to stamp updates.
    """

    def __init__(
        self,
        config: EngineConfig | Mapping[str, Any] | None = None,
        message_state: SpatialState | Mapping[str, Any] | None = None,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if not isinstance(config, EngineConfig):
            config = EngineConfig.from_mapping(config)
        initial: SpatialState | None = None
        if message_state is not None:
            try:
                initial = SpatialState.from_host(message_state)
            except SpatialStateError:
                if not config.suppress_logs:
                    _logger.warning("Ignoring malformed initial message state", exc_info=True)
        self._engine = SpatialEngine(config, initial, clock=clock)

    @property
    def engine(self) -> SpatialEngine:
        return self._engine

    @property
    def state(self) -> SpatialState:
        return self._engine.state

    def load(self) -> LoadResponse:
        return LoadResponse(success=True)

    def set_state(self, state: SpatialState | Mapping[str, Any] | None) -> None:
        """Adopt the state recorded with the message the host navigated to."""
        try:
            self._engine.set_state(state)
        except SpatialStateError:
            if not self._engine.config.suppress_logs:
                _logger.warning("Ignoring malformed replayed message state", exc_info=True)

    def before_prompt(self, user_message: Message | Mapping[str, Any] | str) -> StageResponse:
        message = _as_message(user_message)
        if not self._engine.config.suppress_logs:
            _logger.debug("Spatial stage processing user message content=%r", preview_text(message.content))

        injection = self._engine.before_prompt()
        if injection is None:
            return StageResponse()
        return StageResponse(system_message=injection.system_message, message_state=injection.state)

    def after_response(self, bot_message: Message | Mapping[str, Any] | str) -> StageResponse:
        result = self.process(bot_message)
        if result.outcome is TurnOutcome.DISABLED:
            return StageResponse()
        return StageResponse(message_state=result.state, modified_message=result.text)

    def process(self, bot_message: Message | Mapping[str, Any] | str) -> TurnResult:
        """Run the inbound pipeline and return the full :class:`TurnResult`."""
        return self._engine.after_response(_as_message(bot_message).content)
