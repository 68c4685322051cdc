"""
MahjongGame -- the single owner of a table's state.

Commands from the human seat and the automated steps for AI seats go
through the same pure transitions (turn.py, call_resolution.py,
round_advance.py). Each accepted transition is committed in one
assignment, bumps the state version, and delivers its events to the
listeners. Delayed steps are handed to a Scheduler together with the
version they were planned against; if anything was committed in the
meantime they are dropped.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from hk_mahjong.logic import call_resolution, round_advance, turn
from hk_mahjong.logic.advisor import TeacherSuggestion, suggest_discard
from hk_mahjong.logic.ai_player import AIPlayer, create_ai_player
from hk_mahjong.logic.enums import WINDS, GamePhase, TurnPhase, Wind
from hk_mahjong.logic.exceptions import InvalidActionError, NoPlayableTilesError
from hk_mahjong.logic.rng import create_ai_rng, create_hand_rng, generate_seed
from hk_mahjong.logic.rules import find_added_kongs, find_concealed_kongs, is_complete_hand
from hk_mahjong.logic.settings import GameSettings, validate_settings
from hk_mahjong.logic.state import ClaimOffer, GameState
from hk_mahjong.logic.state_utils import build_ai_context, get_player
from hk_mahjong.logic.timer import AsyncioScheduler, Scheduler
from hk_mahjong.logic.types import (
    ChowDecision,
    ClaimDecision,
    KongDecision,
    PassDecision,
    PongDecision,
    WinDecision,
)
from hk_mahjong.logic.wall import Wall, create_wall

if TYPE_CHECKING:
    import random

    from hk_mahjong.logic.events import GameEvent
    from hk_mahjong.logic.tiles import Tile

logger = structlog.get_logger()

EventListener = Callable[["GameEvent"], None]


class MahjongGame:
    """
    Coordinator for one four-seat game.

    Seats other than settings.human_seat are played by AI. With
    human_seat=None every seat is AI and the game runs to the end of each
    hand on its own once dealt.
    """

    def __init__(self, settings: GameSettings | None = None, scheduler: Scheduler | None = None) -> None:
        self._settings = settings or GameSettings()
        validate_settings(self._settings)
        self._scheduler = scheduler or AsyncioScheduler()
        self._seed = self._settings.seed or generate_seed()
        self._state = GameState()
        self._version = 0
        self._listeners: list[EventListener] = []
        self._ai_players: dict[Wind, AIPlayer] = {}
        self._ai_rng: random.Random = create_ai_rng(self._seed, 0)

    # --- outputs ---

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def seed(self) -> str:
        return self._seed

    @property
    def version(self) -> int:
        return self._version

    @property
    def claim_offer(self) -> ClaimOffer | None:
        return self._state.claim_offer

    @property
    def ai_players(self) -> dict[Wind, AIPlayer]:
        return dict(self._ai_players)

    @property
    def suggestion(self) -> TeacherSuggestion | None:
        """Discard advice for the human seat while it is due to discard."""
        seat = self._settings.human_seat
        state = self._state
        if seat is None or state.phase != GamePhase.PLAYING or state.pending_claim is not None:
            return None
        if state.current_turn != seat or state.turn_phase != TurnPhase.DISCARD:
            return None
        player = get_player(state, seat)
        try:
            return suggest_discard(player.hand, player.melds, seat, state.round_wind)
        except NoPlayableTilesError:
            return None

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        self._listeners.remove(listener)

    # --- commands ---

    def init_game(self, wall: Wall | None = None) -> None:
        """
        Set up the first hand and schedule the deal.

        `wall` replaces the seeded shuffle, for tests and replays.
        """
        self._scheduler.cancel_all()
        hand_number = 1
        self._start_hand_services(hand_number)
        state = turn.init_game(self._settings, wall or self._build_wall(hand_number))
        logger.info("game initialized", seed=self._seed, human_seat=self._human_value())
        self._commit(state, [])

    def deal_tiles(self) -> None:
        state, events = turn.deal_tiles(self._state, self._settings)
        self._commit(state, events)

    def draw_tile(self, seat: Wind) -> None:
        state, events = turn.draw_tile(self._state, seat)
        self._commit(state, events)

    def discard_tile(self, seat: Wind, tile: Tile) -> None:
        state, events = turn.discard_tile(self._state, seat, tile)
        self._commit(state, events)

    def declare_pong(self, seat: Wind) -> bool:
        return self._answer_offer(seat, PongDecision())

    def declare_chow(self, seat: Wind, tiles: tuple[Tile, Tile]) -> bool:
        return self._answer_offer(seat, ChowDecision(tiles=tiles))

    def declare_kong(self, seat: Wind, tile: Tile | None = None) -> bool:
        """
        Kong on the offered discard, or on one's own turn a concealed kong
        (four in hand) or an added kong (promoting an exposed pung).

        `tile` picks which kong when more than one is possible on one's own turn.
        """
        if self._offer_for(seat) is not None:
            return self._answer_offer(seat, KongDecision())

        player = get_player(self._state, seat)
        for same in find_concealed_kongs(player.hand):
            if tile is None or same[0].id == tile.id:
                return self._apply(turn.declare_concealed_kong(self._state, seat, same[0], self._settings))
        for _, fourth in find_added_kongs(player.hand, player.melds):
            if tile is None or fourth.id == tile.id:
                return self._declare_added_kong(seat, fourth)
        logger.debug("kong denied, nothing to declare", seat=seat.value)
        return False

    def declare_win(self, seat: Wind) -> bool:
        """Win on the offered tile, or by self-draw on one's own turn."""
        if self._offer_for(seat) is not None:
            return self._answer_offer(seat, WinDecision())
        return self._apply(turn.declare_self_draw_win(self._state, seat, self._settings))

    def resolve_claim(self, decision: ClaimDecision) -> bool:
        """
        Answer the pending claim offer for the human seat.

        Returns False when the decision was stale or not allowed by the offer.
        """
        state, events = call_resolution.apply_claim_decision(self._state, decision, self._settings)
        if state is self._state:
            return False
        if isinstance(decision, PassDecision):
            self._commit(state, events, schedule=False)
            self._resolve_claims()
        else:
            self._commit(state, events)
        return True

    def sort_hand(self, seat: Wind) -> None:
        self._commit(turn.sort_hand(self._state, seat), [])

    def start_next_hand(self) -> None:
        """Carry scores into the next hand (or mark the game over) and schedule its deal."""
        wall = self._build_wall(self._state.hand_number + 1)
        state = round_advance.start_next_hand(self._state, self._settings, wall)
        if not state.is_game_over:
            self._start_hand_services(state.hand_number)
        self._commit(state, [])

    # --- internals ---

    def _human_value(self) -> str | None:
        return self._settings.human_seat.value if self._settings.human_seat else None

    def _build_wall(self, hand_number: int) -> Wall:
        return create_wall(
            create_hand_rng(self._seed, hand_number),
            include_flowers=self._settings.include_flowers,
            dead_wall_size=self._settings.dead_wall_size,
        )

    def _start_hand_services(self, hand_number: int) -> None:
        self._ai_rng = create_ai_rng(self._seed, hand_number)
        self._ai_players = {
            seat: create_ai_player(self._settings.ai_difficulty, self._ai_rng)
            for seat in WINDS
            if seat != self._settings.human_seat
        }

    def _offer_for(self, seat: Wind) -> ClaimOffer | None:
        offer = self._state.claim_offer
        return offer if offer is not None and offer.seat == seat else None

    def _answer_offer(self, seat: Wind, decision: ClaimDecision) -> bool:
        if self._offer_for(seat) is None:
            logger.debug("claim denied, no offer for seat", seat=seat.value, action=decision.action.value)
            return False
        return self.resolve_claim(decision)

    def _apply(self, result: tuple[GameState, list[GameEvent]]) -> bool:
        state, events = result
        if state is self._state:
            return False
        self._commit(state, events)
        return True

    def _declare_added_kong(self, seat: Wind, tile: Tile) -> bool:
        state, events = turn.declare_added_kong(self._state, seat, tile, self._settings)
        if state is self._state:
            return False
        self._commit(state, events, schedule=False)
        self._resolve_claims()
        return True

    def _commit(self, state: GameState, events: list[GameEvent], *, schedule: bool = True) -> None:
        self._state = state
        self._version += 1
        for event in events:
            for listener in list(self._listeners):
                listener(event)
        if schedule:
            self._schedule_next()

    def _schedule(self, delay: float, step: Callable[[], None]) -> None:
        version = self._version

        def run() -> None:
            if version != self._version:
                logger.debug("stale continuation dropped", planned=version, current=self._version)
                return
            step()

        self._scheduler.call_later(delay, run)

    def _schedule_next(self) -> None:
        """Plan the automated step that follows the current state, if any."""
        state = self._state
        settings = self._settings

        if state.is_game_over or state.phase in (GamePhase.WAITING, GamePhase.FINISHED):
            return
        if state.phase == GamePhase.DEALING:
            self._schedule(settings.deal_delay_seconds, self.deal_tiles)
            return

        if state.claim_offer is not None:
            if settings.claim_decision_seconds is not None:
                sequence = state.claim_offer.sequence
                self._schedule(
                    settings.claim_decision_seconds,
                    lambda: self._claim_timeout(sequence),
                )
            return
        if state.pending_claim is not None:
            self._schedule(settings.discard_settle_seconds, self._resolve_claims)
            return

        seat = state.current_turn
        is_human = get_player(state, seat).is_human
        if state.turn_phase == TurnPhase.DRAW:
            delay = settings.human_draw_delay_seconds if is_human else settings.draw_pacing_seconds
            self._schedule(delay, lambda: self.draw_tile(seat))
        elif not is_human:
            self._schedule(settings.turn_pacing_seconds, lambda: self._play_ai_turn(seat))

    def _claim_timeout(self, sequence: int) -> None:
        logger.debug("claim decision timed out", sequence=sequence)
        self.resolve_claim(PassDecision(sequence=sequence))

    def _resolve_claims(self) -> None:
        state, events, outcome = call_resolution.resolve_claims(
            self._state,
            self._settings,
            self._ai_players,
            self._ai_rng,
        )
        logger.debug("claims resolved", outcome=outcome.value)
        self._commit(state, events)

    def _play_ai_turn(self, seat: Wind) -> None:
        """Self-draw win if complete, else a worthwhile kong, else a discard."""
        ai = self._ai_players.get(seat)
        if ai is None:
            raise InvalidActionError(f"no AI player at {seat.value}")
        player = get_player(self._state, seat)

        if is_complete_hand(player.hand, player.melds) and self.declare_win(seat):
            return

        context = build_ai_context(self._state, seat)
        for same in find_concealed_kongs(player.hand):
            if ai.should_declare_kong(context, same) and self.declare_kong(seat, same[0]):
                return
        for _, fourth in find_added_kongs(player.hand, player.melds):
            if ai.should_declare_added_kong(context, fourth) and self._declare_added_kong(seat, fourth):
                return

        self.discard_tile(seat, ai.select_discard(context))
