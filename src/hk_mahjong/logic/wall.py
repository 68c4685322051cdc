"""
Wall state and operations.

The Wall holds the live wall (normal draws, from the front) and the dead
wall (kong replacement draws, from the end). The dead wall is reserved at
deal time and is never replenished: every kong replacement shrinks it by
exactly one tile.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.enums import WINDS, Wind, next_wind
from hk_mahjong.logic.tiles import Tile, create_tile_set, is_bonus, shuffle_tiles, sort_tiles

if TYPE_CHECKING:
    import random
    from collections.abc import Sequence

DEAD_WALL_SIZE = 14
HAND_SIZE = 13
DEALER_EXTRA_TILES = 1


class Wall(BaseModel):
    """Immutable wall state for one hand."""

    model_config = ConfigDict(frozen=True)

    live_tiles: tuple[Tile, ...] = ()
    dead_wall_tiles: tuple[Tile, ...] = ()


class DealResult(BaseModel):
    """Hands and collected bonus tiles per seat after the initial deal."""

    model_config = ConfigDict(frozen=True)

    wall: Wall
    hands: dict[Wind, tuple[Tile, ...]]
    flowers: dict[Wind, tuple[Tile, ...]]


def create_wall(
    rng: random.Random,
    *,
    include_flowers: bool = True,
    dead_wall_size: int = DEAD_WALL_SIZE,
) -> Wall:
    """
    Build a fresh tile set, shuffle it, and reserve the dead wall.

    The last `dead_wall_size` tiles of the shuffled set form the dead wall.
    """
    shuffled = shuffle_tiles(create_tile_set(include_flowers=include_flowers), rng)
    return create_wall_from_tiles(shuffled, dead_wall_size=dead_wall_size)


def create_wall_from_tiles(tiles: Sequence[Tile], dead_wall_size: int = DEAD_WALL_SIZE) -> Wall:
    """
    Create a wall from an explicit tile order (for tests).

    Positional split: the last `dead_wall_size` tiles are the dead wall, the
    rest is the live wall in draw order.
    """
    if len(tiles) < dead_wall_size:
        raise ValueError(f"Need at least {dead_wall_size} tiles for the dead wall, got {len(tiles)}")
    instance_ids = [t.instance_id for t in tiles]
    if len(set(instance_ids)) != len(instance_ids):
        raise ValueError("All tile instance ids must be unique")

    split = len(tiles) - dead_wall_size
    return Wall(live_tiles=tuple(tiles[:split]), dead_wall_tiles=tuple(tiles[split:]))


def draw_tile(wall: Wall) -> tuple[Wall, Tile | None]:
    """Draw from front of live wall. Returns (new_wall, tile) or (wall, None) if empty."""
    if not wall.live_tiles:
        return wall, None
    tile = wall.live_tiles[0]
    return wall.model_copy(update={"live_tiles": wall.live_tiles[1:]}), tile


def draw_from_dead_wall(wall: Wall) -> tuple[Wall, Tile | None]:
    """Draw a kong replacement from the end of the dead wall. (wall, None) when empty."""
    if not wall.dead_wall_tiles:
        return wall, None
    tile = wall.dead_wall_tiles[-1]
    return wall.model_copy(update={"dead_wall_tiles": wall.dead_wall_tiles[:-1]}), tile


def draw_non_bonus_tile(wall: Wall) -> tuple[Wall, Tile | None, tuple[Tile, ...]]:
    """
    Draw from the live wall, setting aside flowers and seasons.

    Keeps drawing while the drawn tile is a bonus tile. Returns
    (new_wall, playable_tile_or_None, bonus_tiles_drawn); the playable tile
    is None when the live wall ran out first.
    """
    bonus: list[Tile] = []
    while True:
        wall, tile = draw_tile(wall)
        if tile is None:
            return wall, None, tuple(bonus)
        if not is_bonus(tile):
            return wall, tile, tuple(bonus)
        bonus.append(tile)


def deal_initial_hands(wall: Wall, dealer_seat: Wind, hand_size: int = HAND_SIZE) -> DealResult:
    """
    Deal `hand_size` tiles to each seat (one extra for the dealer).

    Seats are dealt one at a time in turn order starting from the dealer.
    Flowers and seasons are collected and replaced from the live wall. Hands
    come back sorted.
    """
    min_tiles = hand_size * len(WINDS) + DEALER_EXTRA_TILES
    if len(wall.live_tiles) < min_tiles:
        raise ValueError(f"Live wall has {len(wall.live_tiles)} tiles, need at least {min_tiles} for dealing")

    hands: dict[Wind, tuple[Tile, ...]] = {}
    flowers: dict[Wind, tuple[Tile, ...]] = {}
    for offset in range(len(WINDS)):
        seat = next_wind(dealer_seat, offset)
        count = hand_size + (DEALER_EXTRA_TILES if seat == dealer_seat else 0)
        hand: list[Tile] = []
        seat_flowers: list[Tile] = []
        while len(hand) < count:
            wall, tile, bonus = draw_non_bonus_tile(wall)
            seat_flowers.extend(bonus)
            if tile is None:
                break
            hand.append(tile)
        hands[seat] = tuple(sort_tiles(hand))
        flowers[seat] = tuple(seat_flowers)

    return DealResult(wall=wall, hands=hands, flowers=flowers)


def is_wall_exhausted(wall: Wall) -> bool:
    """Check if live wall is empty."""
    return len(wall.live_tiles) == 0


def tiles_remaining(wall: Wall) -> int:
    """Count tiles remaining in live wall."""
    return len(wall.live_tiles)


def dead_wall_remaining(wall: Wall) -> int:
    return len(wall.dead_wall_tiles)
