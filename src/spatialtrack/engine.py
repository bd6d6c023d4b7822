"""Turn pipeline: extract, decode, validate, dedupe, merge, sanitize.

:func:`process_response` is the pure form of the pipeline,
``(prior state, text, config) -> TurnResult``. :class:`SpatialEngine`
wraps it around a :class:`~spatialtrack.state.store.SpatialStateStore`
for hosts that want the engine to own the state.

Nothing in here raises for any input text. Every failure degrades to
"leave state and text as they were" plus a diagnostic.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from spatialtrack._logsafe import clip_for_log
from spatialtrack.config import EngineConfig
from spatialtrack.exceptions import SpatialDecodeError, SpatialError, SpatialPacketError
from spatialtrack.extraction.decoder import decode_payload
from spatialtrack.extraction.dedupe import dedupe_last_wins
from spatialtrack.extraction.sanitize import strip_match
from spatialtrack.extraction.scanner import TagMatch, find_canonical_match
from spatialtrack.extraction.validate import ValidationWarning, extract_characters, validate_characters
from spatialtrack.instructions import build_system_instruction
from spatialtrack.models.state import SpatialState
from spatialtrack.state.events import SpatialUpdate, UpdateSource
from spatialtrack.state.merge import dropped_names, merge_update
from spatialtrack.state.store import SpatialStateStore, now_ms

_logger = logging.getLogger(__name__)


class TurnOutcome(StrEnum):
    DISABLED = "disabled"
    NO_BLOCK = "no_block"
    DECODE_FAILED = "decode_failed"
    APPLIED = "applied"


@dataclass(frozen=True, slots=True)
class TurnResult:
    """Outcome of processing one generated message.

    ``state`` and ``text`` are always safe to hand back to the host: on
    anything but :attr:`TurnOutcome.APPLIED` they are the inputs unchanged.
    """

    outcome: TurnOutcome
    state: SpatialState
    text: str
    match: TagMatch | None = None
    warnings: tuple[ValidationWarning, ...] = ()
    update: SpatialUpdate | None = None
    error: SpatialError | None = None

    @property
    def applied(self) -> bool:
        return self.outcome is TurnOutcome.APPLIED


@dataclass(frozen=True, slots=True)
class PromptInjection:
    """What the host adds to the next generation request."""

    system_message: str
    state: SpatialState


def _log(config: EngineConfig, level: int, msg: str, *args: Any) -> None:
    if not config.suppress_logs:
        _logger.log(level, msg, *args)


def prepare_prompt(state: SpatialState, config: EngineConfig) -> PromptInjection | None:
    """Outbound half of a turn; ``None`` when the engine is disabled."""
    if not config.is_active:
        return None
    return PromptInjection(system_message=build_system_instruction(config), state=state)


def _run_pipeline(
    state: SpatialState,
    text: str,
    config: EngineConfig,
    commit: Callable[[SpatialUpdate], SpatialState],
) -> TurnResult:
    if not config.is_active:
        return TurnResult(outcome=TurnOutcome.DISABLED, state=state, text=text)

    match = find_canonical_match(text, config.open_tag, config.close_tag)
    if match is None:
        return TurnResult(outcome=TurnOutcome.NO_BLOCK, state=state, text=text)

    _log(config, logging.DEBUG, "Spatial block found span=(%d, %d)", match.start, match.end)
    try:
        payload = decode_payload(match.body(text), preview_chars=config.preview_chars)
        items = extract_characters(payload, preview_chars=config.preview_chars)
    except SpatialDecodeError as exc:
        _log(
            config,
            logging.ERROR,
            "Spatial payload could not be parsed strict_error=%s lenient_error=%s input=%r",
            exc.strict_error,
            exc.lenient_error,
            exc.preview,
        )
        return TurnResult(outcome=TurnOutcome.DECODE_FAILED, state=state, text=text, match=match, error=exc)
    except SpatialPacketError as exc:
        _log(config, logging.ERROR, "Spatial payload rejected: %s input=%r", exc, exc.preview)
        return TurnResult(outcome=TurnOutcome.DECODE_FAILED, state=state, text=text, match=match, error=exc)

    validation = validate_characters(
        items,
        limit=config.coordinate_limit,
        default_status=config.default_status,
    )
    for warning in validation.warnings:
        _log(config, logging.WARNING, "Spatial %s", warning)

    update = SpatialUpdate(
        characters=dedupe_last_wins(validation.characters),
        source=UpdateSource.RESPONSE,
        raw=clip_for_log(payload),
    )
    new_state = commit(update)
    if not config.suppress_logs and _logger.isEnabledFor(logging.DEBUG):
        _logger.debug(
            "Spatial state updated characters=%d discarded=%d dropped=%s",
            len(update.characters),
            len(validation.warnings),
            list(dropped_names(state, new_state)),
        )
    return TurnResult(
        outcome=TurnOutcome.APPLIED,
        state=new_state,
        text=strip_match(text, match),
        match=match,
        warnings=validation.warnings,
        update=update,
    )


def process_response(
    state: SpatialState,
    text: str,
    config: EngineConfig,
    *,
    clock: Callable[[], int] = now_ms,
) -> TurnResult:
    """Inbound half of a turn, as a pure function of its inputs.

    *state* is never mutated; a successful update yields a new snapshot
    stamped with ``clock()`` (epoch milliseconds).
    """

    def commit(update: SpatialUpdate) -> SpatialState:
        return merge_update(state, update.characters, timestamp_ms=clock())

    return _run_pipeline(state, text, config, commit)


class SpatialEngine:
    """Stateful engine for one conversation.

    Usage::

        engine = SpatialEngine(EngineConfig())
        injection = engine.before_prompt()
        result = engine.after_response(generated_text)
        show(result.text)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        state: SpatialState | None = None,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._config = config or EngineConfig()
        self._store = SpatialStateStore(state, clock=clock)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def state(self) -> SpatialState:
        return self._store.state

    @property
    def store(self) -> SpatialStateStore:
        return self._store

    def before_prompt(self) -> PromptInjection | None:
        return prepare_prompt(self._store.state, self._config)

    def after_response(self, text: str) -> TurnResult:
        return _run_pipeline(self._store.state, text, self._config, self._store.apply)

    def set_state(self, snapshot: SpatialState | Mapping[str, Any] | None) -> SpatialState:
        """Adopt a snapshot recorded earlier in the conversation.

        ``None`` is ignored. A malformed mapping raises
        :class:`~spatialtrack.exceptions.SpatialStateError` and leaves the
        current state in place.
        """
        if snapshot is None:
            return self._store.state
        adopted = SpatialState.from_host(snapshot)
        _log(self._config, logging.DEBUG, "Spatial state replayed characters=%d", len(adopted.characters))
        return self._store.replay(adopted)
