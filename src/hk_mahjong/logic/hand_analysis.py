"""
Meld and pattern analysis over concealed tiles.

Searches run on 34-format count vectors (see tiles.py) and are memoized
on the vector, so repeated queries for the same multiset are free. Results
are mapped back onto the caller's physical tiles only at the boundary.
"""

from __future__ import annotations

from collections import Counter
from functools import lru_cache
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.enums import SUITS, MeldType, WinningShape
from hk_mahjong.logic.melds import Meld, count_declared_sets, make_meld
from hk_mahjong.logic.tiles import (
    HONOR_34_START,
    TERMINALS_AND_HONORS_34,
    Tile,
    hand_to_34_array,
    playable_tiles,
    sort_tiles,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

STANDARD_SETS = 4
SEVEN_PAIRS_COUNT = 7
FULL_HAND_TILES = 14

# search caches are keyed on 34-tuples; sized to hold a full game of queries
_SEARCH_CACHE_SIZE = 65536

# a group is (kind, 34-index); kind is a MeldType
_Group = tuple[MeldType, int]


class HandDecomposition(BaseModel):
    """One way of reading a complete hand: its concealed melds (pair included)."""

    model_config = ConfigDict(frozen=True)

    shape: WinningShape
    melds: tuple[Meld, ...] = ()

    @property
    def pair(self) -> Meld | None:
        pairs = [m for m in self.melds if m.type == MeldType.PAIR]
        return pairs[0] if len(pairs) == 1 else None


def count_tile_types(tiles: Iterable[Tile]) -> Counter[str]:
    """Count tiles by logical id."""
    return Counter(t.id for t in tiles)


def group_tiles(tiles: Iterable[Tile]) -> dict[str, list[Tile]]:
    """Group physical tiles by logical id, in sort order."""
    groups: dict[str, list[Tile]] = {}
    for tile in sort_tiles(tiles):
        groups.setdefault(tile.id, []).append(tile)
    return groups


def find_possible_melds(tiles: Sequence[Tile]) -> list[Meld]:
    """
    Enumerate every pair, pung, kong and chow the tiles could form.

    Used to present exposing choices, not to decompose a final hand: the
    returned melds overlap freely.
    """
    melds: list[Meld] = []
    groups = group_tiles(playable_tiles(tiles))

    for same in groups.values():
        for meld_type, size in ((MeldType.PAIR, 2), (MeldType.PUNG, 3), (MeldType.KONG, 4)):
            if len(same) >= size:
                melds.append(make_meld(meld_type, same[:size], is_concealed=True))

    for suit in SUITS:
        for start in range(1, 8):
            run_ids = [f"{suit.value}-{v}" for v in (start, start + 1, start + 2)]
            if all(type_id in groups for type_id in run_ids):
                melds.append(make_meld(MeldType.CHOW, [groups[type_id][0] for type_id in run_ids], is_concealed=True))

    return melds


def _can_chow_from(index: int) -> bool:
    return index < HONOR_34_START and index % 9 <= 6  # noqa: PLR2004


@lru_cache(maxsize=_SEARCH_CACHE_SIZE)
def _can_complete(counts: tuple[int, ...], melds_needed: int, *, pair_taken: bool) -> bool:
    first = next((i for i, c in enumerate(counts) if c), None)
    if first is None:
        return melds_needed == 0 and pair_taken
    if melds_needed < 0:
        return False

    work = list(counts)
    if not pair_taken and work[first] >= 2:  # noqa: PLR2004
        work[first] -= 2
        if _can_complete(tuple(work), melds_needed, pair_taken=True):
            return True
        work[first] += 2

    if melds_needed == 0:
        return False

    if work[first] >= 3:  # noqa: PLR2004
        work[first] -= 3
        if _can_complete(tuple(work), melds_needed - 1, pair_taken=pair_taken):
            return True
        work[first] += 3

    if _can_chow_from(first) and work[first + 1] and work[first + 2]:
        work[first] -= 1
        work[first + 1] -= 1
        work[first + 2] -= 1
        if _can_complete(tuple(work), melds_needed - 1, pair_taken=pair_taken):
            return True

    return False


def can_form_complete_hand(tiles: Iterable[Tile], melds_needed: int) -> bool:
    """
    Check whether the tiles split exactly into `melds_needed` sets plus one pair.

    Exact cover from the smallest remaining tile: take it as the pair, as a
    pung, or as the start of a chow, then recurse.
    """
    tiles_34 = hand_to_34_array(tiles)
    if sum(tiles_34) != melds_needed * 3 + 2:
        return False
    return _can_complete(tuple(tiles_34), melds_needed, pair_taken=False)


def is_standard_winning_hand(tiles: Sequence[Tile], melds: Iterable[Meld]) -> bool:
    """Four sets and a pair across the concealed tiles and the declared melds."""
    return can_form_complete_hand(tiles, STANDARD_SETS - count_declared_sets(melds))


@lru_cache(maxsize=_SEARCH_CACHE_SIZE)
def _standard_groupings(
    counts: tuple[int, ...], melds_needed: int, *, pair_taken: bool
) -> frozenset[tuple[_Group, ...]]:
    first = next((i for i, c in enumerate(counts) if c), None)
    if first is None:
        return frozenset({()}) if melds_needed == 0 and pair_taken else frozenset()

    # (group, indices to remove one copy each, sets used, pair taken after)
    options: list[tuple[_Group, tuple[int, ...], int, bool]] = []
    if not pair_taken and counts[first] >= 2:  # noqa: PLR2004
        options.append(((MeldType.PAIR, first), (first, first), 0, True))
    if melds_needed > 0 and counts[first] >= 3:  # noqa: PLR2004
        options.append(((MeldType.PUNG, first), (first, first, first), 1, pair_taken))
    if melds_needed > 0 and _can_chow_from(first) and counts[first + 1] and counts[first + 2]:
        options.append(((MeldType.CHOW, first), (first, first + 1, first + 2), 1, pair_taken))

    results: set[tuple[_Group, ...]] = set()
    for group, removed, used, now_paired in options:
        work = list(counts)
        for index in removed:
            work[index] -= 1
        for rest in _standard_groupings(tuple(work), melds_needed - used, pair_taken=now_paired):
            results.add(tuple(sorted((group, *rest))))
    return frozenset(results)


def _groups_to_melds(groups: Sequence[_Group], tiles: Sequence[Tile]) -> tuple[Meld, ...]:
    pool = group_tiles(tiles)
    by_index = {t.type_index: t.id for t in tiles}
    melds: list[Meld] = []
    for kind, index in groups:
        if kind == MeldType.CHOW:
            members = [pool[by_index[index + offset]].pop(0) for offset in range(3)]
        else:
            size = 2 if kind == MeldType.PAIR else 3
            members = [pool[by_index[index]].pop(0) for _ in range(size)]
        melds.append(make_meld(kind, members, is_concealed=True))
    return tuple(melds)


def is_seven_pairs(tiles: Sequence[Tile]) -> bool:
    """Seven distinct pairs, no declared melds (14 concealed tiles)."""
    counts = count_tile_types(playable_tiles(tiles))
    return sum(counts.values()) == FULL_HAND_TILES and len(counts) == SEVEN_PAIRS_COUNT and all(
        c == 2 for c in counts.values()  # noqa: PLR2004
    )


def is_thirteen_orphans(tiles: Sequence[Tile]) -> bool:
    """One of each terminal and honor plus a duplicate of one of them."""
    tiles_34 = hand_to_34_array(tiles)
    if sum(tiles_34) != FULL_HAND_TILES:
        return False
    if any(tiles_34[i] for i in range(len(tiles_34)) if i not in TERMINALS_AND_HONORS_34):
        return False
    return all(tiles_34[i] >= 1 for i in TERMINALS_AND_HONORS_34)


def decompose_hand(tiles: Sequence[Tile], melds_needed: int) -> list[HandDecomposition]:
    """
    Every distinct way to read the concealed tiles as a complete hand.

    Standard readings split the tiles into `melds_needed` sets plus a pair.
    With no declared melds, seven pairs and thirteen orphans are also
    reported. Empty when the tiles are not complete.
    """
    hand = playable_tiles(tiles)
    tiles_34 = hand_to_34_array(hand)
    decompositions: list[HandDecomposition] = []

    if sum(tiles_34) == melds_needed * 3 + 2:
        groupings = _standard_groupings(tuple(tiles_34), melds_needed, pair_taken=False)
        decompositions.extend(
            HandDecomposition(shape=WinningShape.STANDARD, melds=_groups_to_melds(groups, hand))
            for groups in sorted(groupings)
        )

    if melds_needed == STANDARD_SETS:
        if is_seven_pairs(hand):
            pairs = tuple(make_meld(MeldType.PAIR, same, is_concealed=True) for same in group_tiles(hand).values())
            decompositions.append(HandDecomposition(shape=WinningShape.SEVEN_PAIRS, melds=pairs))
        if is_thirteen_orphans(hand):
            decompositions.append(HandDecomposition(shape=WinningShape.THIRTEEN_ORPHANS))

    return decompositions

