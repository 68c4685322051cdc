from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from hk_mahjong.logic.enums import WINDS, GamePhase, TurnPhase, Wind
from hk_mahjong.logic.settings import GameSettings
from hk_mahjong.logic.state import GameState, Player
from hk_mahjong.logic.tiles import create_tile_set
from hk_mahjong.logic.wall import Wall, create_wall_from_tiles

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hk_mahjong.logic.melds import Meld
    from hk_mahjong.logic.tiles import Tile


# ============================================================================
# Test State Builder Helpers
# ============================================================================


def create_player(  # noqa: PLR0913
    seat: Wind = Wind.EAST,
    *,
    hand: Sequence[Tile] | None = None,
    melds: Sequence[Meld] | None = None,
    flowers: Sequence[Tile] | None = None,
    discards: Sequence[Tile] | None = None,
    score: int = 500,
    is_human: bool = False,
    is_replacement_draw: bool = False,
) -> Player:
    """Create a Player with sensible defaults for testing."""
    return Player(
        seat=seat,
        hand=tuple(hand) if hand is not None else (),
        melds=tuple(melds) if melds is not None else (),
        flowers=tuple(flowers) if flowers is not None else (),
        discards=tuple(discards) if discards is not None else (),
        score=score,
        is_human=is_human,
        is_replacement_draw=is_replacement_draw,
    )


def filler_wall(used: Sequence[Tile] = (), live: int = 40, dead: int = 14) -> Wall:
    """
    A wall built from a flowerless tile set, with `live` + `dead` tiles
    whose types do not collide with `used` beyond four copies.
    """
    used_counts: dict[str, int] = {}
    for t in used:
        used_counts[t.id] = used_counts.get(t.id, 0) + 1
    pool: list[Tile] = []
    for t in create_tile_set(include_flowers=False):
        if used_counts.get(t.id, 0) > 0:
            used_counts[t.id] -= 1
            continue
        pool.append(t)
    return create_wall_from_tiles(pool[: live + dead], dead_wall_size=dead)


def create_game_state(  # noqa: PLR0913
    *,
    players: Sequence[Player] | None = None,
    current_turn: Wind = Wind.EAST,
    turn_phase: TurnPhase = TurnPhase.DISCARD,
    phase: GamePhase = GamePhase.PLAYING,
    dealer_seat: Wind = Wind.EAST,
    round_wind: Wind = Wind.EAST,
    wall: Wall | None = None,
    **updates: object,
) -> GameState:
    """Create a mid-hand GameState; seats not given get empty players."""
    by_seat = {p.seat: p for p in players or ()}
    all_players = tuple(by_seat.get(seat, create_player(seat)) for seat in WINDS)
    state = GameState(
        phase=phase,
        round_wind=round_wind,
        dealer_seat=dealer_seat,
        players=all_players,
        current_turn=current_turn,
        turn_phase=turn_phase,
        wall=wall if wall is not None else Wall(),
    )
    return state.model_copy(update=updates) if updates else state


@pytest.fixture
def settings() -> GameSettings:
    """All-AI table with no pacing, seeded."""
    return GameSettings(
        human_seat=None,
        seed="a" * 64,
        deal_delay_seconds=0,
        discard_settle_seconds=0,
        draw_pacing_seconds=0,
        turn_pacing_seconds=0,
        human_draw_delay_seconds=0,
    )


@pytest.fixture
def human_settings(settings: GameSettings) -> GameSettings:
    return settings.model_copy(update={"human_seat": Wind.EAST})
