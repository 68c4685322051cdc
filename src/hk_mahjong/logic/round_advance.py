"""Hand-to-hand advancement: dealer rotation, round wind, score carry-over."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import structlog

from hk_mahjong.logic.enums import WINDS, GamePhase, Wind, next_wind
from hk_mahjong.logic.exceptions import InvalidActionError
from hk_mahjong.logic.turn import init_game

if TYPE_CHECKING:
    from hk_mahjong.logic.settings import GameSettings
    from hk_mahjong.logic.state import GameState
    from hk_mahjong.logic.wall import Wall

logger = structlog.get_logger()


class HandPosition(NamedTuple):
    dealer_seat: Wind
    round_wind: Wind
    round_number: int
    is_game_over: bool


def next_hand_position(state: GameState) -> HandPosition:
    """
    Where the next hand sits in the game.

    The dealer keeps the deal after winning; otherwise (a loss or an
    exhaustive draw) the deal passes to the next seat. Once every seat has
    dealt the round wind advances, and the game ends after the north round.
    """
    if state.winner is not None and state.winner == state.dealer_seat:
        return HandPosition(state.dealer_seat, state.round_wind, state.round_number, is_game_over=False)

    dealer = next_wind(state.dealer_seat)
    round_number = state.round_number + 1
    round_wind = state.round_wind
    if round_number > len(WINDS):
        if round_wind == WINDS[-1]:
            return HandPosition(dealer, round_wind, state.round_number, is_game_over=True)
        round_number = 1
        round_wind = next_wind(round_wind)
    return HandPosition(dealer, round_wind, round_number, is_game_over=False)


def start_next_hand(state: GameState, settings: GameSettings, wall: Wall) -> GameState:
    """
    Fresh `dealing` state for the next hand, carrying every seat's score.

    When the north round has finished the finished state is returned
    marked game over instead.
    """
    if state.phase != GamePhase.FINISHED:
        raise InvalidActionError(f"cannot start the next hand in phase {state.phase.value}")
    if state.is_game_over:
        raise InvalidActionError("the game is over")

    position = next_hand_position(state)
    if position.is_game_over:
        logger.info("game over", hand_number=state.hand_number)
        return state.model_copy(update={"is_game_over": True})

    scores = {player.seat: player.score for player in state.players}
    logger.info(
        "starting next hand",
        hand_number=state.hand_number + 1,
        dealer=position.dealer_seat.value,
        round_wind=position.round_wind.value,
    )
    return init_game(
        settings,
        wall,
        scores=scores,
        dealer_seat=position.dealer_seat,
        round_wind=position.round_wind,
        round_number=position.round_number,
        hand_number=state.hand_number + 1,
    )
