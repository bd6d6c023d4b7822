#!/usr/bin/env python3
"""Replay a recorded transcript through the spatial tracker.

Feeds every generated message of a transcript through
:class:`spatialtrack.SpatialStage` in order, printing what each turn did
(applied, no block, decode failure), the discarded entries, the cleaned
text and the state the conversation ends with. Handy for checking how a
model's raw output would be handled without running a chat host.

Usage
-----
A transcript is either a JSON array (of strings, or of objects with a
``content`` key) or a plain text file with messages separated by lines
containing only ``---``::

    python scripts/replay_transcript.py transcript.json
    python scripts/replay_transcript.py transcript.txt --json

Options::

    --initial-state FILE  Start from a saved state snapshot (host JSON shape)
    --limit N             Coordinate clamp bound (default: 1000)
    --inactive            Replay with the tracker disabled
    --json                Output as machine-readable JSON
    --output FILE         Write output to FILE instead of stdout
    --verbose             Enable debug logging
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from spatialtrack import EngineConfig, SpatialStage, SpatialState  # noqa: E402

_SEPARATOR = "---"

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def load_transcript(path: Path) -> list[str]:
    """Read generated messages from a JSON array or a ``---`` separated text file."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
        if not isinstance(data, list):
            raise SystemExit(f"{path}: expected a JSON array of messages")
        messages: list[str] = []
        for item in data:
            if isinstance(item, dict):
                messages.append(str(item.get("content", "")))
            else:
                messages.append(str(item))
        return messages

    messages = []
    current: list[str] = []
    for line in text.splitlines():
        if line.strip() == _SEPARATOR:
            messages.append("\n".join(current))
            current = []
        else:
            current.append(line)
    if current:
        messages.append("\n".join(current))
    return [message for message in messages if message.strip()]


def _format_characters(state: SpatialState) -> list[str]:
    if not state.characters:
        return ["  (no characters tracked)"]
    return [
        f"  - {character.name:<20} x={character.x:>8g} y={character.y:>8g}  {character.status}"
        for character in state.characters
    ]


def replay(stage: SpatialStage, messages: list[str], *, json_mode: bool) -> dict[str, Any]:
    """Run every message through *stage* and collect per-turn results."""
    out: list[str] = []
    turns: list[dict[str, Any]] = []

    for index, message in enumerate(messages, start=1):
        result = stage.process(message)
        turn: dict[str, Any] = {
            "turn": index,
            "outcome": result.outcome.value,
            "warnings": [str(warning) for warning in result.warnings],
            "text": result.text,
        }
        if result.error is not None:
            turn["error"] = str(result.error)
        turns.append(turn)

        out.append(_section(f"TURN {index}  outcome={result.outcome.value}"))
        if result.error is not None:
            out.append(f"  !! {result.error}")
        for warning in result.warnings:
            out.append(f"  !  {warning}")
        out.extend(_format_characters(result.state))
        out.append("\n  ── text ──")
        out.append(result.text)

    if not json_mode:
        print("\n".join(out))

    return {"turns": turns, "state": stage.state.to_host()}


# ── main ─────────────────────────────────────────────────────


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Replay a transcript of generated messages through the spatial tracker.",
    )
    parser.add_argument("transcript", help="JSON array or '---' separated text file")
    parser.add_argument("--initial-state", help="Start from this saved state snapshot (JSON)")
    parser.add_argument("--limit", type=float, help="Coordinate clamp bound")
    parser.add_argument("--inactive", action="store_true", help="Replay with the tracker disabled")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.limit is not None:
        overrides["coordinate_limit"] = args.limit
    if args.inactive:
        overrides["is_active"] = False
    config = EngineConfig.from_env(**overrides)

    initial_state: dict[str, Any] | None = None
    if args.initial_state:
        initial_state = json.loads(Path(args.initial_state).read_text(encoding="utf-8"))

    stage = SpatialStage(config, initial_state)
    messages = load_transcript(Path(args.transcript))
    result = replay(stage, messages, json_mode=args.json_mode)

    if not args.json_mode:
        print(_section("FINAL STATE"))
        print("\n".join(_format_characters(stage.state)))

    # ── Output ──
    payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    if args.json_mode:
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"JSON written to {args.output}", file=sys.stderr)
        else:
            print(payload)
    elif args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"JSON written to {args.output}")


if __name__ == "__main__":
    main()
