"""
Claim legality predicates.

Pure functions over a seat's concealed hand (and declared melds). Seat
restrictions (chow only from the previous seat, no claiming one's own
discard) are enforced by call resolution, not here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hk_mahjong.logic.enums import MeldType
from hk_mahjong.logic.hand_analysis import group_tiles
from hk_mahjong.logic.shanten import AGARI_STATE, calculate_shanten
from hk_mahjong.logic.tiles import Tile, is_bonus, is_suited, tiles_same_type

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hk_mahjong.logic.melds import Meld

TILES_FOR_PONG = 2
TILES_FOR_DISCARD_KONG = 3
TILES_FOR_CONCEALED_KONG = 4


def _matching(hand: Sequence[Tile], tile: Tile) -> list[Tile]:
    return [t for t in hand if tiles_same_type(t, tile)]


def can_pong(hand: Sequence[Tile], tile: Tile) -> bool:
    """Needs 2 matching tiles in hand."""
    return len(_matching(hand, tile)) >= TILES_FOR_PONG


def can_kong(hand: Sequence[Tile], tile: Tile) -> bool:
    """Kong from a discard: needs 3 matching tiles in hand."""
    return len(_matching(hand, tile)) >= TILES_FOR_DISCARD_KONG


def _find_value(hand: Sequence[Tile], tile: Tile, value: int) -> Tile | None:
    return next((t for t in hand if t.suit == tile.suit and t.value == value), None)


def can_chow(hand: Sequence[Tile], tile: Tile) -> list[tuple[Tile, Tile]]:
    """
    Every pair of hand tiles that forms a chow with `tile`.

    Checks the (v-2, v-1), (v-1, v+1) and (v+1, v+2) neighbours in that
    order and returns all that are present. Honors never chow.
    """
    if not is_suited(tile) or tile.value is None:
        return []

    options: list[tuple[Tile, Tile]] = []
    v = tile.value
    for low, high in ((v - 2, v - 1), (v - 1, v + 1), (v + 1, v + 2)):
        if low < 1 or high > 9:  # noqa: PLR2004
            continue
        first = _find_value(hand, tile, low)
        second = _find_value(hand, tile, high)
        if first is not None and second is not None:
            options.append((first, second))
    return options


def is_complete_hand(hand: Sequence[Tile], melds: Sequence[Meld]) -> bool:
    """Self-draw check: the concealed tiles plus declared melds form a winning hand."""
    return calculate_shanten(hand, melds) == AGARI_STATE


def can_win(hand: Sequence[Tile], melds: Sequence[Meld], tile: Tile) -> bool:
    """Whether adding `tile` completes the hand."""
    if is_bonus(tile):
        return False
    return is_complete_hand([*hand, tile], melds)


def find_concealed_kongs(hand: Sequence[Tile]) -> list[tuple[Tile, ...]]:
    """Four-of-a-kind groups held in hand."""
    return [tuple(same) for same in group_tiles(hand).values() if len(same) == TILES_FOR_CONCEALED_KONG]


def find_added_kongs(hand: Sequence[Tile], melds: Sequence[Meld]) -> list[tuple[Meld, Tile]]:
    """Exposed pungs whose fourth tile is in hand."""
    options: list[tuple[Meld, Tile]] = []
    for meld in melds:
        if meld.type != MeldType.PUNG or meld.is_concealed:
            continue
        fourth = next((t for t in hand if t.id == meld.base_tile.id), None)
        if fourth is not None:
            options.append((meld, fourth))
    return options
