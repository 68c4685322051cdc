"""Tile notation helpers shared by the unit tests."""

import itertools

from hk_mahjong.logic.enums import Dragon, TileCategory, Wind
from hk_mahjong.logic.tiles import NUM_TILE_TYPES, Tile, create_tile, hand_to_34_array

_WIND_LETTERS = {"E": Wind.EAST, "S": Wind.SOUTH, "W": Wind.WEST, "N": Wind.NORTH}
_DRAGON_LETTERS = {"R": Dragon.RED, "G": Dragon.GREEN, "W": Dragon.WHITE}

_ids = itertools.count()


def _next_id(prefix: str) -> str:
    return f"{prefix}-t{next(_ids)}"


def tiles(
    bamboo: str = "",
    character: str = "",
    dot: str = "",
    winds: str = "",
    dragons: str = "",
) -> list[Tile]:
    """
    Build tiles from compact notation, each with a fresh instance id.

    tiles(bamboo="123", winds="EE", dragons="RRR") -> 1-2-3 bamboo, two east
    winds, three red dragons.
    """
    result: list[Tile] = []
    for category, values in (
        (TileCategory.BAMBOO, bamboo),
        (TileCategory.CHARACTER, character),
        (TileCategory.DOT, dot),
    ):
        for ch in values:
            tile_id = f"{category.value}-{ch}"
            result.append(create_tile(category, value=int(ch), instance_id=_next_id(tile_id)))
    for ch in winds:
        wind = _WIND_LETTERS[ch]
        result.append(create_tile(TileCategory.WIND, wind=wind, instance_id=_next_id(f"wind-{wind.value}")))
    for ch in dragons:
        dragon = _DRAGON_LETTERS[ch]
        result.append(create_tile(TileCategory.DRAGON, dragon=dragon, instance_id=_next_id(f"dragon-{dragon.value}")))
    return result


def tile(**kwargs: str) -> Tile:
    """A single tile in the same notation: tile(dot="5")."""
    (only,) = tiles(**kwargs)
    return only


def flower(number: int) -> Tile:
    return create_tile(TileCategory.FLOWER, flower_number=number, instance_id=_next_id(f"flower-{number}"))


def season(number: int) -> Tile:
    return create_tile(TileCategory.SEASON, flower_number=number, instance_id=_next_id(f"season-{number}"))


# our 34 order: bamboo, character, dot, E S W N, red green white
# mahjong library order: man, pin, sou, E S W N, white green red
_TO_LIBRARY_INDEX = (
    [18 + i for i in range(9)]
    + list(range(9))
    + [9 + i for i in range(9)]
    + [27, 28, 29, 30]
    + [33, 32, 31]
)


def to_library_34(hand: list[Tile]) -> list[int]:
    """Count vector in the `mahjong` library's tile order, for oracle checks."""
    ours = hand_to_34_array(hand)
    converted = [0] * NUM_TILE_TYPES
    for index, count in enumerate(ours):
        converted[_TO_LIBRARY_INDEX[index]] = count
    return converted

