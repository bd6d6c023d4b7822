"""Collapse repeated characters within a single update."""

from __future__ import annotations

from collections.abc import Iterable

from spatialtrack.models.character import CharacterPosition


def dedupe_last_wins(characters: Iterable[CharacterPosition]) -> tuple[CharacterPosition, ...]:
    """Keep exactly one record per name: the last one in generation order.

    Survivors keep the relative order of their own positions in the
    input, so the output is deterministic.
    """
    items = list(characters)
    last_index = {character.name: index for index, character in enumerate(items)}
    return tuple(character for index, character in enumerate(items) if last_index[character.name] == index)
