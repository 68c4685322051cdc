"""
Tile representation utilities for Hong Kong Old Style Mahjong.

Every physical tile is an immutable Tile model. Logical identity (the tile
type) lives in `id`; physical identity lives in `instance_id`, unique across
one tile set.

Tile types are also addressed by a 34-format index used for count-vector
analysis (shanten, decomposition, ukeire):

  bamboo 1-9:    0-8
  character 1-9: 9-17
  dot 1-9:       18-26
  winds E,S,W,N: 27-30
  dragons R,G,W: 31-33

Flowers and seasons have no 34-format index and never take part in melds.
"""

from __future__ import annotations

import itertools
import random
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.enums import DRAGONS, SUITS, WINDS, Dragon, Suit, TileCategory, Wind

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

NUM_TILE_TYPES = 34
COPIES_PER_TYPE = 4
NUM_BONUS_TILES = 4  # flowers 1-4, seasons 1-4

BAMBOO_34_START = 0
CHARACTER_34_START = 9
DOT_34_START = 18
HONOR_34_START = 27
WIND_34_START = 27
DRAGON_34_START = 31

SUIT_34_START: dict[Suit, int] = {
    Suit.BAMBOO: BAMBOO_34_START,
    Suit.CHARACTER: CHARACTER_34_START,
    Suit.DOT: DOT_34_START,
}

# terminal tiles in 34-format (1 and 9 of each suit)
TERMINALS_34: tuple[int, ...] = (0, 8, 9, 17, 18, 26)
HONORS_34: tuple[int, ...] = tuple(range(HONOR_34_START, NUM_TILE_TYPES))
TERMINALS_AND_HONORS_34: tuple[int, ...] = TERMINALS_34 + HONORS_34

_SUITED_CATEGORIES = frozenset({TileCategory.BAMBOO, TileCategory.CHARACTER, TileCategory.DOT})
_HONOR_CATEGORIES = frozenset({TileCategory.WIND, TileCategory.DRAGON})
_BONUS_CATEGORIES = frozenset({TileCategory.FLOWER, TileCategory.SEASON})

_CATEGORY_ORDER: dict[TileCategory, int] = {category: rank for rank, category in enumerate(TileCategory)}

# loose tiles created outside a tile set get their own instance namespace
_loose_counter = itertools.count()


class Tile(BaseModel):
    """A single physical tile. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    instance_id: str
    category: TileCategory
    suit: Suit | None = None
    value: int | None = None
    wind: Wind | None = None
    dragon: Dragon | None = None
    flower_number: int | None = None

    @property
    def type_index(self) -> int | None:
        """34-format index of this tile's type, None for flowers and seasons."""
        return _TYPE_INDEX_BY_ID.get(self.id)

    def __repr__(self) -> str:
        return f"Tile({self.instance_id})"


def tile_type_id(
    category: TileCategory,
    *,
    value: int | None = None,
    wind: Wind | None = None,
    dragon: Dragon | None = None,
    flower_number: int | None = None,
) -> str:
    """Build the logical id shared by all copies of a tile type."""
    if category in _BONUS_CATEGORIES:
        return f"{category.value}-{flower_number}"
    if category == TileCategory.WIND:
        return f"wind-{wind.value}"  # type: ignore[union-attr]
    if category == TileCategory.DRAGON:
        return f"dragon-{dragon.value}"  # type: ignore[union-attr]
    return f"{category.value}-{value}"


def _type_ids_34() -> list[str]:
    ids = [tile_type_id(TileCategory(suit.value), value=v) for suit in SUITS for v in range(1, 10)]
    ids.extend(tile_type_id(TileCategory.WIND, wind=w) for w in WINDS)
    ids.extend(tile_type_id(TileCategory.DRAGON, dragon=d) for d in DRAGONS)
    return ids


TYPE_IDS_34: tuple[str, ...] = tuple(_type_ids_34())
_TYPE_INDEX_BY_ID: dict[str, int] = {type_id: index for index, type_id in enumerate(TYPE_IDS_34)}


def _make_tile(
    instance_id: str,
    category: TileCategory,
    *,
    value: int | None = None,
    wind: Wind | None = None,
    dragon: Dragon | None = None,
    flower_number: int | None = None,
) -> Tile:
    suit = Suit(category.value) if category in _SUITED_CATEGORIES else None
    return Tile(
        id=tile_type_id(category, value=value, wind=wind, dragon=dragon, flower_number=flower_number),
        instance_id=instance_id,
        category=category,
        suit=suit,
        value=value,
        wind=wind,
        dragon=dragon,
        flower_number=flower_number,
    )


def create_tile_set(include_flowers: bool = True) -> list[Tile]:  # noqa: FBT001, FBT002
    """
    Create a full tile set: 136 tiles, or 144 with flowers and seasons.

    Instance ids are sequential ("bamboo-1-0", "bamboo-1-1", ...) and unique
    within the returned set.
    """
    counter = itertools.count()
    tiles: list[Tile] = []

    def add(copies: int, category: TileCategory, **kwargs: object) -> None:
        for _ in range(copies):
            type_id = tile_type_id(category, **kwargs)  # type: ignore[arg-type]
            tiles.append(_make_tile(f"{type_id}-{next(counter)}", category, **kwargs))  # type: ignore[arg-type]

    # 3 suits x 9 values x 4 copies = 108
    for suit in SUITS:
        for value in range(1, 10):
            add(COPIES_PER_TYPE, TileCategory(suit.value), value=value)

    # 4 winds x 4 copies = 16
    for wind in WINDS:
        add(COPIES_PER_TYPE, TileCategory.WIND, wind=wind)

    # 3 dragons x 4 copies = 12
    for dragon in DRAGONS:
        add(COPIES_PER_TYPE, TileCategory.DRAGON, dragon=dragon)

    # flowers and seasons are singles
    if include_flowers:
        for category in (TileCategory.FLOWER, TileCategory.SEASON):
            for number in range(1, NUM_BONUS_TILES + 1):
                add(1, category, flower_number=number)

    return tiles


def shuffle_tiles(tiles: Sequence[Tile], rng: random.Random | None = None) -> list[Tile]:
    """
    Return a shuffled copy using an unbiased Fisher-Yates permutation.
    """
    rng = rng or random.Random()  # noqa: S311
    shuffled = list(tiles)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def create_tile(
    category: TileCategory,
    *,
    value: int | None = None,
    wind: Wind | None = None,
    dragon: Dragon | None = None,
    flower_number: int | None = None,
    instance_id: str | None = None,
) -> Tile:
    """Create a single loose tile (tests, probes) with a fresh instance id."""
    type_id = tile_type_id(category, value=value, wind=wind, dragon=dragon, flower_number=flower_number)
    if instance_id is None:
        instance_id = f"{type_id}-x{next(_loose_counter)}"
    return _make_tile(
        instance_id,
        category,
        value=value,
        wind=wind,
        dragon=dragon,
        flower_number=flower_number,
    )


def tile_from_type_index(index: int, instance_id: str = "probe") -> Tile:
    """Build a representative tile for a 34-format index."""
    if index < HONOR_34_START:
        suit = SUITS[index // 9]
        return create_tile(TileCategory(suit.value), value=index % 9 + 1, instance_id=instance_id)
    if index < DRAGON_34_START:
        return create_tile(TileCategory.WIND, wind=WINDS[index - WIND_34_START], instance_id=instance_id)
    return create_tile(TileCategory.DRAGON, dragon=DRAGONS[index - DRAGON_34_START], instance_id=instance_id)


def is_suited(tile: Tile) -> bool:
    return tile.category in _SUITED_CATEGORIES


def is_honor(tile: Tile) -> bool:
    return tile.category in _HONOR_CATEGORIES


def is_bonus(tile: Tile) -> bool:
    """Flowers and seasons."""
    return tile.category in _BONUS_CATEGORIES


def is_terminal(tile: Tile) -> bool:
    """1 or 9 of a suit."""
    return is_suited(tile) and tile.value in (1, 9)


def tiles_equal(a: Tile, b: Tile) -> bool:
    """Same logical tile, ignoring the physical copy."""
    return a.id == b.id


def tiles_same_type(a: Tile, b: Tile) -> bool:
    return (
        a.category == b.category
        and a.suit == b.suit
        and a.value == b.value
        and a.wind == b.wind
        and a.dragon == b.dragon
    )


def tile_sort_key(tile: Tile) -> tuple[int, int, str]:
    """
    Total order: bamboo < character < dot < wind < dragon < flower < season,
    then value / wind index / dragon index / flower number, then instance id.
    """
    if tile.value is not None:
        rank = tile.value
    elif tile.wind is not None:
        rank = WINDS.index(tile.wind)
    elif tile.dragon is not None:
        rank = DRAGONS.index(tile.dragon)
    else:
        rank = tile.flower_number or 0
    return (_CATEGORY_ORDER[tile.category], rank, tile.instance_id)


def sort_tiles(tiles: Iterable[Tile]) -> list[Tile]:
    return sorted(tiles, key=tile_sort_key)


def playable_tiles(tiles: Iterable[Tile]) -> list[Tile]:
    """Drop flowers and seasons."""
    return [t for t in tiles if not is_bonus(t)]


def hand_to_34_array(tiles: Iterable[Tile]) -> list[int]:
    """
    Convert tiles to a 34-array of per-type counts. Bonus tiles are ignored.
    """
    tiles_34 = [0] * NUM_TILE_TYPES
    for tile in tiles:
        index = tile.type_index
        if index is not None:
            tiles_34[index] += 1
    return tiles_34


def tile_display_name(tile: Tile) -> str:
    if tile.category == TileCategory.FLOWER:
        return f"Flower {tile.flower_number}"
    if tile.category == TileCategory.SEASON:
        return f"Season {tile.flower_number}"
    if tile.wind is not None:
        return f"{tile.wind.value} Wind"
    if tile.dragon is not None:
        return f"{tile.dragon.value} Dragon"
    return f"{tile.value} {tile.category.value}"
