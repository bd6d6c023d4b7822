"""End-to-end behavior of the turn pipeline."""

from __future__ import annotations

import logging

import pytest

from spatialtrack.config import EngineConfig
from spatialtrack.engine import SpatialEngine, TurnOutcome, prepare_prompt, process_response
from spatialtrack.exceptions import SpatialDecodeError, SpatialPacketError, SpatialStateError
from spatialtrack.models import CharacterPosition, SpatialPacket, SpatialState

CONFIG = EngineConfig()
PRIOR = SpatialState(
    spatial_data=SpatialPacket(
        characters=(
            CharacterPosition(name="A", x=1, y=1, status="Sitting"),
            CharacterPosition(name="B", x=-4, y=2, status="Pacing"),
        )
    ),
    last_update=1_000,
)


def _clock() -> int:
    return 5_000


def _block(payload: str) -> str:
    return f"```spatial_json\n{payload}\n```"


def _run(text: str, state: SpatialState = PRIOR, config: EngineConfig = CONFIG):
    return process_response(state, text, config, clock=_clock)


# ------------------------------------------------------------------
# Short-circuits
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "text",
    [
        "",
        "  She nods slowly.  ",
        "Code: ```python\nx = 1\n```",
        'Unclosed ```spatial_json {"characters": []}',
    ],
)
def test_text_without_block_is_untouched(text: str) -> None:
    result = _run(text)

    assert result.outcome is TurnOutcome.NO_BLOCK
    assert result.text == text
    assert result.state is PRIOR
    assert not result.applied


def test_disabled_engine_is_a_no_op() -> None:
    config = EngineConfig(is_active=False)
    text = "Hi.\n" + _block('{"characters": [{"name": "Z", "x": 1, "y": 1}]}')

    result = _run(text, config=config)

    assert result.outcome is TurnOutcome.DISABLED
    assert result.text == text
    assert result.state is PRIOR
    assert prepare_prompt(PRIOR, config) is None


# ------------------------------------------------------------------
# Successful updates
# ------------------------------------------------------------------


def test_well_formed_payload_round_trips() -> None:
    payload = (
        '{"characters": ['
        '{"name": "Ava", "x": 3, "y": -2, "status": "Leaning on the bar"},'
        '{"name": "Ben", "x": "12.5", "y": 40}'
        "]}"
    )
    result = _run("The tavern is loud.\n\n" + _block(payload))

    assert result.outcome is TurnOutcome.APPLIED
    assert result.text == "The tavern is loud."
    assert result.state.characters == (
        CharacterPosition(name="Ava", x=3, y=-2, status="Leaning on the bar"),
        CharacterPosition(name="Ben", x=12.5, y=40, status="unknown"),
    )
    assert result.state.last_update == 5_000
    assert result.warnings == ()


def test_prior_state_is_not_mutated() -> None:
    snapshot = PRIOR.to_host()
    _run(_block('{"characters": []}'))
    assert PRIOR.to_host() == snapshot


def test_repaired_payload_matches_well_formed() -> None:
    good = _run(_block('{"characters": [{"name": "Ava", "x": 3, "y": -2}]}'))
    sloppy = _run(_block("{'characters': [{'name': 'Ava', 'x': 3, 'y': -2,},]}"))

    assert sloppy.outcome is TurnOutcome.APPLIED
    assert sloppy.state == good.state


def test_last_block_wins() -> None:
    text = (
        "First pass:\n"
        + _block('{"characters": [{"name": "Old", "x": 1, "y": 1}]}')
        + "\nCorrection:\n"
        + _block('{"characters": [{"name": "New", "x": 2, "y": 2}]}')
    )

    result = _run(text)

    assert result.state.spatial_data.names() == ("New",)
    # Only the canonical block is removed from the visible text.
    assert result.text.startswith("First pass:\n```spatial_json")
    assert result.text.endswith("Correction:")


def test_duplicate_names_last_wins() -> None:
    result = _run(_block('{"characters": [{"name": "A", "x": 1, "y": 1}, {"name": "A", "x": 9, "y": 9}]}'))

    assert result.state.characters == (CharacterPosition(name="A", x=9, y=9),)


def test_clamp_versus_discard() -> None:
    result = _run(
        _block('{"characters": [{"name": "Far", "x": 50000, "y": 0}, {"name": "Lost", "x": "abc", "y": 0}]}')
    )

    assert result.outcome is TurnOutcome.APPLIED
    assert result.state.characters == (CharacterPosition(name="Far", x=1000, y=0),)
    assert len(result.warnings) == 1
    assert result.warnings[0].name == "Lost"


def test_replacement_drops_absent_characters() -> None:
    result = _run(_block('{"characters": [{"name": "A", "x": 5, "y": 5, "status": "Standing"}]}'))

    assert result.state.spatial_data.names() == ("A",)
    assert result.state.spatial_data.get("B") is None


def test_empty_character_list_is_accepted() -> None:
    result = _run("Nobody is around.\n" + _block('{"characters": []}'))

    assert result.outcome is TurnOutcome.APPLIED
    assert result.state.characters == ()
    assert result.text == "Nobody is around."


def test_update_carries_clipped_raw_payload() -> None:
    result = _run(_block('{"characters": [], "note": "' + "n" * 500 + '"}'))

    assert result.update is not None
    assert result.update.raw["characters"] == []
    assert result.update.raw["note"].endswith("<truncated>")


# ------------------------------------------------------------------
# Failures
# ------------------------------------------------------------------


def test_decode_failure_leaves_text_and_state(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="spatialtrack")
    text = "Hello.\n" + _block("characters: Ava at 3,4")

    result = _run(text)

    assert result.outcome is TurnOutcome.DECODE_FAILED
    assert result.text == text
    assert result.state is PRIOR
    assert isinstance(result.error, SpatialDecodeError)
    assert result.match is not None
    assert any("could not be parsed" in record.getMessage() for record in caplog.records)


@pytest.mark.parametrize("payload", ['[{"name": "A", "x": 1, "y": 1}]', '{"chars": []}', '"characters"'])
def test_wrong_shape_is_treated_as_decode_failure(payload: str) -> None:
    text = _block(payload)
    result = _run(text)

    assert result.outcome is TurnOutcome.DECODE_FAILED
    assert isinstance(result.error, SpatialPacketError)
    assert result.text == text
    assert result.state is PRIOR


@pytest.mark.parametrize(
    "text",
    [
        _block(""),
        _block("{" * 5000),
        _block("[" * 100_000),
        _block('{"characters": [null, 1, "x", [], {"name": {}}]}'),
        _block('{"characters": [{"name": "A", "x": NaN, "y": Infinity}]}'),
        "```spatial_json```spatial_json```",
    ],
)
def test_adversarial_input_never_raises(text: str) -> None:
    result = _run(text)
    assert result.outcome in (TurnOutcome.APPLIED, TurnOutcome.DECODE_FAILED, TurnOutcome.NO_BLOCK)


def test_suppress_logs_silences_engine(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="spatialtrack")
    config = EngineConfig(suppress_logs=True)

    _run(_block("not json"), config=config)
    result = _run(_block('{"characters": [{"name": "A", "x": "abc", "y": 0}]}'), config=config)

    assert len(result.warnings) == 1
    assert [r for r in caplog.records if r.name.startswith("spatialtrack")] == []


def test_warnings_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="spatialtrack")

    _run(_block('{"characters": [{"name": "A", "x": "abc", "y": 0}]}'))

    assert any("'A' discarded" in record.getMessage() for record in caplog.records)


def _counting_dropped_names(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    import spatialtrack.engine as engine_module

    calls: list[int] = []
    original = engine_module.dropped_names

    def counting(previous: SpatialState, current: SpatialState):
        calls.append(1)
        return original(previous, current)

    monkeypatch.setattr(engine_module, "dropped_names", counting)
    return calls


def test_update_summary_skipped_when_logs_suppressed(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger="spatialtrack")
    calls = _counting_dropped_names(monkeypatch)

    result = _run(_block('{"characters": [{"name": "C", "x": 0, "y": 1}]}'), config=EngineConfig(suppress_logs=True))

    assert result.outcome is TurnOutcome.APPLIED
    assert calls == []


def test_update_summary_skipped_when_debug_disabled(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="spatialtrack")
    calls = _counting_dropped_names(monkeypatch)

    _run(_block('{"characters": [{"name": "C", "x": 0, "y": 1}]}'))

    assert calls == []


def test_update_summary_lists_dropped_names(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger="spatialtrack")
    calls = _counting_dropped_names(monkeypatch)

    _run(_block('{"characters": [{"name": "A", "x": 0, "y": 1}]}'))

    assert calls == [1]
    assert any("dropped=['B']" in record.getMessage() for record in caplog.records)


# ------------------------------------------------------------------
# Prompt injection
# ------------------------------------------------------------------


def test_prepare_prompt_carries_instruction_and_state() -> None:
    injection = prepare_prompt(PRIOR, CONFIG)

    assert injection is not None
    assert injection.state is PRIOR
    assert "```spatial_json" in injection.system_message
    assert "{{user}} is at coordinates (0,0)" in injection.system_message
    assert '"name": "{{char}}"' in injection.system_message


# ------------------------------------------------------------------
# SpatialEngine
# ------------------------------------------------------------------


class TestSpatialEngine:
    def test_state_continuity_across_turns(self) -> None:
        ticks = iter(range(10_000, 20_000, 1_000))
        engine = SpatialEngine(clock=lambda: next(ticks))
        initial = engine.state

        engine.after_response(_block('{"characters": [{"name": "A", "x": 1, "y": 1}, {"name": "B", "x": 2, "y": 2}]}'))
        second = engine.after_response(_block('{"characters": [{"name": "B", "x": 3, "y": 3}]}'))
        third = engine.after_response("No block this time.")
        fourth = engine.after_response(_block("garbage"))

        assert initial.characters == ()
        assert second.state.characters == (CharacterPosition(name="B", x=3, y=3),)
        assert third.state is second.state
        assert fourth.state is second.state
        assert engine.state is second.state
        assert engine.state.last_update == 12_000

    def test_set_state_adopts_snapshot(self) -> None:
        engine = SpatialEngine(clock=_clock)
        engine.after_response(_block('{"characters": [{"name": "Z", "x": 1, "y": 1}]}'))

        engine.set_state(PRIOR.to_host())

        assert engine.state == PRIOR
        result = engine.after_response(_block('{"characters": [{"name": "A", "x": 0, "y": 0}]}'))
        assert result.state.spatial_data.names() == ("A",)

    def test_set_state_none_is_ignored(self) -> None:
        engine = SpatialEngine(state=PRIOR, clock=_clock)
        engine.set_state(None)
        assert engine.state is PRIOR

    def test_set_state_rejects_malformed_snapshot(self) -> None:
        engine = SpatialEngine(state=PRIOR, clock=_clock)
        with pytest.raises(SpatialStateError):
            engine.set_state({"spatialData": "nope"})
        assert engine.state is PRIOR

    def test_before_prompt_disabled(self) -> None:
        engine = SpatialEngine(EngineConfig(is_active=False), PRIOR, clock=_clock)
        assert engine.before_prompt() is None
        assert engine.after_response(_block('{"characters": []}')).state is PRIOR
