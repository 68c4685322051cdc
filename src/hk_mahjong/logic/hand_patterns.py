"""
Whole-hand shape predicates shared by scoring and the discard advisor.

Predicates over tiles ignore flowers and seasons; predicates over melds
ignore the pair.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.enums import SUITS, MeldType, Suit
from hk_mahjong.logic.tiles import Tile, is_honor, is_suited, is_terminal, playable_tiles

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from hk_mahjong.logic.melds import Meld

STANDARD_SETS = 4
DOMINANT_SUIT_MIN_TILES = 6


class HandShape(BaseModel):
    """Summary counts describing a hand's composition."""

    model_config = ConfigDict(frozen=True)

    suit_distribution: dict[Suit, int]
    honor_count: int
    terminal_count: int
    pung_count: int
    chow_count: int
    pair_count: int


def _suits_present(tiles: Sequence[Tile]) -> set[Suit | None]:
    return {t.suit for t in tiles if is_suited(t)}


def is_mixed_flush(tiles: Iterable[Tile]) -> bool:
    """One suit plus honors."""
    hand = playable_tiles(tiles)
    return len(_suits_present(hand)) == 1 and any(is_honor(t) for t in hand)


def is_pure_flush(tiles: Iterable[Tile]) -> bool:
    """One suit, no honors."""
    hand = playable_tiles(tiles)
    return len(_suits_present(hand)) == 1 and not any(is_honor(t) for t in hand)


def is_all_honors(tiles: Iterable[Tile]) -> bool:
    hand = playable_tiles(tiles)
    return bool(hand) and all(is_honor(t) for t in hand)


def is_all_terminals(tiles: Iterable[Tile]) -> bool:
    """Only 1s and 9s."""
    hand = playable_tiles(tiles)
    return bool(hand) and all(is_terminal(t) for t in hand)


def is_mixed_terminals(tiles: Iterable[Tile]) -> bool:
    """Terminals and honors only, with at least one of each."""
    hand = playable_tiles(tiles)
    return (
        all(is_terminal(t) or is_honor(t) for t in hand)
        and any(is_terminal(t) for t in hand)
        and any(is_honor(t) for t in hand)
    )


def _sets(melds: Iterable[Meld]) -> list[Meld]:
    return [m for m in melds if m.type != MeldType.PAIR]


def is_all_pungs(melds: Iterable[Meld]) -> bool:
    sets = _sets(melds)
    return len(sets) == STANDARD_SETS and all(m.is_triplet_or_quad for m in sets)


def is_all_chows(melds: Iterable[Meld]) -> bool:
    sets = _sets(melds)
    return len(sets) == STANDARD_SETS and all(m.type == MeldType.CHOW for m in sets)


def suit_distribution(tiles: Iterable[Tile]) -> dict[Suit, int]:
    distribution = dict.fromkeys(SUITS, 0)
    for tile in tiles:
        if tile.suit is not None:
            distribution[tile.suit] += 1
    return distribution


def get_dominant_suit(tiles: Iterable[Tile]) -> Suit | None:
    """The most common suit when it holds at least six tiles (first suit wins ties)."""
    distribution = suit_distribution(tiles)
    best = max(distribution.values())
    if best < DOMINANT_SUIT_MIN_TILES:
        return None
    return next(suit for suit in SUITS if distribution[suit] == best)


def analyze_hand_shape(tiles: Sequence[Tile], melds: Sequence[Meld]) -> HandShape:
    return HandShape(
        suit_distribution=suit_distribution(tiles),
        honor_count=sum(1 for t in tiles if is_honor(t)),
        terminal_count=sum(1 for t in tiles if is_terminal(t)),
        pung_count=sum(1 for m in melds if m.is_triplet_or_quad),
        chow_count=sum(1 for m in melds if m.type == MeldType.CHOW),
        pair_count=sum(1 for m in melds if m.type == MeldType.PAIR),
    )
