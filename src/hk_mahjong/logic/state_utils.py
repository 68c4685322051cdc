"""
Immutable state update utilities.

Helpers for common updates on the frozen GameState. They never mutate
their input; each returns a new state.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from hk_mahjong.logic.ai_player import AIContext
from hk_mahjong.logic.enums import WINDS, Wind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hk_mahjong.logic.state import GameState, Player
    from hk_mahjong.logic.tiles import Tile


def get_player(state: GameState, seat: Wind) -> Player:
    return state.players[WINDS.index(seat)]


def update_player(state: GameState, seat: Wind, **updates: object) -> GameState:
    """Return new state with the player at `seat` updated."""
    players = list(state.players)
    index = WINDS.index(seat)
    players[index] = state.players[index].model_copy(update=updates)
    return state.model_copy(update={"players": tuple(players)})


def add_tiles_to_hand(state: GameState, seat: Wind, tiles: Iterable[Tile]) -> GameState:
    player = get_player(state, seat)
    return update_player(state, seat, hand=(*player.hand, *tiles))


def remove_tiles_from_hand(state: GameState, seat: Wind, tiles: Iterable[Tile]) -> GameState:
    """
    Remove physical tiles (by instance id) from a seat's hand.

    Raises ValueError if any tile is not in the hand.
    """
    player = get_player(state, seat)
    gone = {t.instance_id for t in tiles}
    remaining = tuple(t for t in player.hand if t.instance_id not in gone)
    if len(player.hand) - len(remaining) != len(gone):
        raise ValueError(f"tiles {sorted(gone)} are not all in {seat.value}'s hand")
    return update_player(state, seat, hand=remaining)


def add_flowers(state: GameState, seat: Wind, flowers: Iterable[Tile]) -> GameState:
    player = get_player(state, seat)
    return update_player(state, seat, flowers=(*player.flowers, *flowers))


def remove_discard(state: GameState, seat: Wind, tile: Tile) -> GameState:
    """Take a claimed tile back out of the discarder's discards."""
    player = get_player(state, seat)
    discards = tuple(t for t in player.discards if t.instance_id != tile.instance_id)
    return update_player(state, seat, discards=discards)


def hand_contains(player: Player, tile: Tile) -> bool:
    return any(t.instance_id == tile.instance_id for t in player.hand)


def all_discards(state: GameState) -> tuple[Tile, ...]:
    """Every visible discard on the table, seat by seat."""
    return tuple(t for player in state.players for t in player.discards)


def exposed_tiles(state: GameState) -> tuple[Tile, ...]:
    """Tiles in every seat's declared melds."""
    return tuple(t for player in state.players for meld in player.melds for t in meld.tiles)


def build_ai_context(state: GameState, seat: Wind) -> AIContext:
    player = get_player(state, seat)
    return AIContext(
        hand=player.hand,
        melds=player.melds,
        seat_wind=seat,
        round_wind=state.round_wind,
        discards=all_discards(state),
        exposed_tiles=exposed_tiles(state),
        wall_remaining=len(state.wall.live_tiles),
    )


def count_tiles_in_play(state: GameState) -> Counter[str]:
    """
    Logical tile ids across wall, dead wall, hands, discards, melds and flowers.

    Equals the created tile set at every step of a hand.
    """
    counts: Counter[str] = Counter()
    counts.update(t.id for t in state.wall.live_tiles)
    counts.update(t.id for t in state.wall.dead_wall_tiles)
    for player in state.players:
        counts.update(t.id for t in player.hand)
        counts.update(t.id for t in player.discards)
        counts.update(t.id for t in player.flowers)
        counts.update(t.id for meld in player.melds for t in meld.tiles)
    return counts


def instance_ids_in_play(state: GameState) -> list[str]:
    """Physical instance ids across every location; duplicates mean a tile was copied."""
    ids = [t.instance_id for t in (*state.wall.live_tiles, *state.wall.dead_wall_tiles)]
    for player in state.players:
        ids.extend(t.instance_id for t in (*player.hand, *player.discards, *player.flowers))
        ids.extend(t.instance_id for meld in player.melds for t in meld.tiles)
    return ids
