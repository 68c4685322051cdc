import pytest

from hk_mahjong.logic.enums import GamePhase, Wind
from hk_mahjong.logic.exceptions import InvalidActionError
from hk_mahjong.logic.round_advance import HandPosition, next_hand_position, start_next_hand
from hk_mahjong.tests.conftest import create_game_state, create_player, filler_wall


def _finished(**updates):
    return create_game_state(phase=GamePhase.FINISHED, **updates)


class TestNextHandPosition:
    def test_dealer_keeps_deal_after_winning(self):
        state = _finished(dealer_seat=Wind.SOUTH, winner=Wind.SOUTH, round_number=2)
        assert next_hand_position(state) == HandPosition(Wind.SOUTH, Wind.EAST, 2, is_game_over=False)

    def test_deal_passes_after_other_seat_wins(self):
        state = _finished(dealer_seat=Wind.SOUTH, winner=Wind.NORTH, round_number=2)
        assert next_hand_position(state) == HandPosition(Wind.WEST, Wind.EAST, 3, is_game_over=False)

    def test_deal_passes_after_exhaustive_draw(self):
        state = _finished(dealer_seat=Wind.EAST, winner=None)
        assert next_hand_position(state).dealer_seat == Wind.SOUTH

    def test_round_wind_advances(self):
        state = _finished(dealer_seat=Wind.NORTH, round_wind=Wind.EAST, round_number=4)
        assert next_hand_position(state) == HandPosition(Wind.EAST, Wind.SOUTH, 1, is_game_over=False)

    def test_game_ends_after_north_round(self):
        state = _finished(dealer_seat=Wind.NORTH, round_wind=Wind.NORTH, round_number=4)
        assert next_hand_position(state).is_game_over


class TestStartNextHand:
    def test_scores_carry_over(self, settings):
        players = [create_player(seat, score=score) for seat, score in zip(Wind, (548, 476, 500, 476), strict=True)]
        state = _finished(players=players, winner=Wind.EAST, hand_number=3)
        wall = filler_wall(live=60)

        next_state = start_next_hand(state, settings, wall)

        assert next_state.phase == GamePhase.DEALING
        assert next_state.hand_number == 4
        assert next_state.dealer_seat == Wind.EAST
        assert next_state.wall == wall
        assert [p.score for p in next_state.players] == [548, 476, 500, 476]
        assert all(p.hand == () for p in next_state.players)

    def test_game_over(self, settings):
        state = _finished(dealer_seat=Wind.NORTH, round_wind=Wind.NORTH, round_number=4, hand_number=16)
        over = start_next_hand(state, settings, filler_wall())
        assert over.is_game_over
        assert over.phase == GamePhase.FINISHED
        with pytest.raises(InvalidActionError, match="game is over"):
            start_next_hand(over, settings, filler_wall())

    def test_hand_must_be_finished(self, settings):
        with pytest.raises(InvalidActionError, match="cannot start the next hand"):
            start_next_hand(create_game_state(), settings, filler_wall())
