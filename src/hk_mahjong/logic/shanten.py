"""
Shanten calculation on 34-format count vectors.

Shanten is the number of tile exchanges a hand needs to become tenpai:
-1 means complete (agari), 0 means tenpai.

The standard shape (sets + pair) is an exhaustive search over every way
of grouping tiles into complete sets and partial sets (pairs, adjacent and
gap waits). Suits are independent, so each suit (and each honor type) is
searched on its own and the per-block results are combined. Every block
search returns the Pareto frontier of reachable (sets, partials) pairs;
since shanten only improves with more of either, nothing off the frontier
can win and nothing on it is discarded.
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import TYPE_CHECKING

from hk_mahjong.logic.melds import count_declared_sets
from hk_mahjong.logic.tiles import (
    HONOR_34_START,
    NUM_TILE_TYPES,
    TERMINALS_AND_HONORS_34,
    hand_to_34_array,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hk_mahjong.logic.melds import Meld
    from hk_mahjong.logic.tiles import Tile

AGARI_STATE: int = -1
TENPAI_STATE: int = 0
MAX_SHANTEN: int = 8

STANDARD_SETS = 4
SEVEN_PAIRS_NEEDED = 6  # pairs short of tenpai when holding none
THIRTEEN_ORPHANS_NEEDED = 13
_SPECIAL_HAND_SIZES = (13, 14)
_SUIT_SIZE = 9

_Frontier = frozenset[tuple[int, int]]


def _pareto(points: set[tuple[int, int]]) -> _Frontier:
    """Drop (sets, partials) points dominated by another point."""
    return frozenset(
        (m, p)
        for m, p in points
        if not any(om >= m and op >= p and (om, op) != (m, p) for om, op in points)
    )


@lru_cache(maxsize=None)
def _block_frontier(counts: tuple[int, ...], *, sequences: bool) -> _Frontier:
    """
    Frontier of (sets, partials) for one suit (sequences=True) or one honor type.

    At the lowest held tile the search tries: pung, pair partial, chow,
    adjacent partial, gap partial, or leaving one copy isolated.
    """
    first = next((i for i, c in enumerate(counts) if c), None)
    if first is None:
        return frozenset({(0, 0)})

    size = len(counts)
    candidates: set[tuple[int, int]] = set()

    def explore(removed: tuple[int, ...], sets: int, partials: int) -> None:
        work = list(counts)
        for index in removed:
            work[index] -= 1
        for m, p in _block_frontier(tuple(work), sequences=sequences):
            candidates.add((m + sets, p + partials))

    if counts[first] >= 3:  # noqa: PLR2004
        explore((first, first, first), 1, 0)
    if counts[first] >= 2:  # noqa: PLR2004
        explore((first, first), 0, 1)
    if sequences:
        has_next = first + 1 < size and counts[first + 1] > 0
        has_gap = first + 2 < size and counts[first + 2] > 0
        if has_next and has_gap:
            explore((first, first + 1, first + 2), 1, 0)
        if has_next:
            explore((first, first + 1), 0, 1)
        if has_gap:
            explore((first, first + 2), 0, 1)
    explore((first,), 0, 0)

    return _pareto(candidates)


def _combine(left: _Frontier, right: _Frontier) -> _Frontier:
    return _pareto({(lm + rm, lp + rp) for lm, lp in left for rm, rp in right})


@lru_cache(maxsize=65536)
def _hand_frontier(tiles_34: tuple[int, ...]) -> _Frontier:
    frontier: _Frontier = frozenset({(0, 0)})
    for start in range(0, HONOR_34_START, _SUIT_SIZE):
        suit = tiles_34[start : start + _SUIT_SIZE]
        if any(suit):
            frontier = _combine(frontier, _block_frontier(suit, sequences=True))
    for index in range(HONOR_34_START, NUM_TILE_TYPES):
        if tiles_34[index]:
            frontier = _combine(frontier, _block_frontier((tiles_34[index],), sequences=False))
    return frontier


def _shanten_from_frontier(frontier: _Frontier, melds_needed: int, *, has_pair: bool) -> int:
    best = MAX_SHANTEN
    for sets, partials in frontier:
        sets = min(sets, melds_needed)
        missing = melds_needed - sets
        value = missing * 2 - min(partials, missing) - (1 if has_pair else 0)
        best = min(best, value)
    return best


def calculate_standard_shanten(tiles_34: Sequence[int], melds_needed: int = STANDARD_SETS) -> int:
    """
    Shanten for `melds_needed` sets plus a pair.

    Tries every duplicated type as the pair, and no pair at all.
    """
    melds_needed = max(melds_needed, 0)
    counts = tuple(tiles_34)
    best = _shanten_from_frontier(_hand_frontier(counts), melds_needed, has_pair=False)
    for index, count in enumerate(counts):
        if count >= 2:  # noqa: PLR2004
            work = list(counts)
            work[index] -= 2
            best = min(best, _shanten_from_frontier(_hand_frontier(tuple(work)), melds_needed, has_pair=True))
    return best


def calculate_seven_pairs_shanten(tiles_34: Sequence[int]) -> int:
    """
    Seven pairs: 6 - pairs + ceil(singles / 2).

    A type counts as at most one pair; singles are types held once. Only
    13 or 14 tile hands qualify.
    """
    if sum(tiles_34) not in _SPECIAL_HAND_SIZES:
        return MAX_SHANTEN
    pairs = sum(1 for c in tiles_34 if c >= 2)  # noqa: PLR2004
    singles = sum(1 for c in tiles_34 if c == 1)
    return SEVEN_PAIRS_NEEDED - pairs + math.ceil(singles / 2)


def calculate_thirteen_orphans_shanten(tiles_34: Sequence[int]) -> int:
    """13 - distinct terminal/honor types held - 1 if any of them is paired."""
    if sum(tiles_34) not in _SPECIAL_HAND_SIZES:
        return MAX_SHANTEN
    held = [tiles_34[i] for i in TERMINALS_AND_HONORS_34 if tiles_34[i]]
    has_pair = any(c >= 2 for c in held)  # noqa: PLR2004
    return THIRTEEN_ORPHANS_NEEDED - len(held) - (1 if has_pair else 0)


def shanten_from_counts(tiles_34: Sequence[int], declared_sets: int = 0) -> int:
    """
    Minimum shanten across standard, seven pairs and thirteen orphans.

    Each declared set needs no tiles from the hand; any declared set rules
    out the two concealed-only shapes.
    """
    shanten = calculate_standard_shanten(tiles_34, STANDARD_SETS - declared_sets)
    if declared_sets == 0:
        shanten = min(
            shanten,
            calculate_seven_pairs_shanten(tiles_34),
            calculate_thirteen_orphans_shanten(tiles_34),
        )
    return shanten


def calculate_shanten(hand: Sequence[Tile], melds: Sequence[Meld] = ()) -> int:
    """Shanten of concealed tiles given the player's declared melds. Bonus tiles are ignored."""
    return shanten_from_counts(hand_to_34_array(hand), count_declared_sets(melds))
