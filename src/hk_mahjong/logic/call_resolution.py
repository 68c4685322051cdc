"""Claim resolution -- decide who, if anyone, takes a discarded tile.

Stages run in priority order: win, then pong/kong, then chow. Within a
stage the three other seats are visited in turn order from the discarder.
AI seats decide on the spot; the human seat gets a stage-specific offer
and resolution suspends until apply_claim_decision answers it. A human
pass is recorded on the claim window so resuming skips that seat/stage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from hk_mahjong.logic.ai_player import AIDecision, ClaimOptions
from hk_mahjong.logic.enums import (
    CLAIM_STAGE_ORDER,
    ClaimAction,
    ClaimKind,
    ClaimOutcome,
    ClaimPolicy,
    ClaimStage,
    GamePhase,
    MeldType,
    TurnPhase,
    Wind,
    next_wind,
    seats_after,
)
from hk_mahjong.logic.events import ClaimOfferEvent, GameEvent, MeldEvent, TurnEvent
from hk_mahjong.logic.exceptions import InvalidActionError
from hk_mahjong.logic.melds import make_meld
from hk_mahjong.logic.rules import can_chow, can_kong, can_pong, can_win
from hk_mahjong.logic.state import ClaimOffer, GameState
from hk_mahjong.logic.state_utils import (
    build_ai_context,
    get_player,
    remove_discard,
    remove_tiles_from_hand,
    update_player,
)
from hk_mahjong.logic.tiles import tiles_same_type
from hk_mahjong.logic.turn import (
    advance_turn,
    can_replace_for_kong,
    claim_win,
    complete_added_kong,
    draw_kong_replacement,
    score_win,
)
from hk_mahjong.logic.types import (
    ChowDecision,
    ClaimDecision,
    KongDecision,
    PassDecision,
    PongDecision,
    WinDecision,
)

if TYPE_CHECKING:
    import random

    from hk_mahjong.logic.ai_player import AIPlayer
    from hk_mahjong.logic.settings import GameSettings
    from hk_mahjong.logic.tiles import Tile

logger = structlog.get_logger()

_STAGE_ACTIONS: dict[ClaimStage, frozenset[ClaimAction]] = {
    ClaimStage.WIN: frozenset({ClaimAction.WIN}),
    ClaimStage.PONG: frozenset({ClaimAction.PONG, ClaimAction.KONG}),
    ClaimStage.CHOW: frozenset({ClaimAction.CHOW}),
}


def claim_options(state: GameState, seat: Wind, stage: ClaimStage, settings: GameSettings) -> ClaimOptions:
    """
    Legal responses for `seat` at one stage of the current claim window.

    A robbing-the-kong window only ever offers a win. Chow is open to the
    seat after the discarder alone.
    """
    window = state.pending_claim
    if window is None or seat == window.from_seat:
        return ClaimOptions()

    player = get_player(state, seat)
    tile = window.tile
    if stage == ClaimStage.WIN:
        winnable = can_win(player.hand, player.melds, tile)
        if winnable and settings.enforce_min_fan:
            result = score_win(
                state,
                seat,
                tile,
                player.hand,
                settings,
                is_self_draw=False,
                is_robbing_kong=window.kind == ClaimKind.ROBBING_KONG,
                discarder=window.from_seat,
            )
            winnable = result is not None and result.is_valid
        return ClaimOptions(can_win=winnable)

    if window.kind == ClaimKind.ROBBING_KONG:
        return ClaimOptions()

    if stage == ClaimStage.PONG:
        return ClaimOptions(
            can_pong=can_pong(player.hand, tile),
            can_kong=can_kong(player.hand, tile) and can_replace_for_kong(state, settings),
        )

    if seat != next_wind(window.from_seat):
        return ClaimOptions()
    chow_sets = tuple(can_chow(player.hand, tile))
    return ClaimOptions(can_chow=bool(chow_sets), chow_sets=chow_sets)


def _has_any(options: ClaimOptions) -> bool:
    return options.can_win or options.can_pong or options.can_kong or options.can_chow


def _random_policy_decision(
    stage: ClaimStage,
    options: ClaimOptions,
    settings: GameSettings,
    rng: random.Random,
) -> AIDecision:
    if stage == ClaimStage.WIN:
        return AIDecision(action=ClaimAction.WIN, reasoning="Winning hand!")
    if rng.random() >= settings.ai_claim_probability:
        return AIDecision(action=ClaimAction.PASS)
    if stage == ClaimStage.PONG:
        action = ClaimAction.KONG if options.can_kong else ClaimAction.PONG
        return AIDecision(action=action, reasoning="random claim")
    return AIDecision(action=ClaimAction.CHOW, chow_set=options.chow_sets[0], reasoning="random claim")


def _ai_decision(  # noqa: PLR0913
    state: GameState,
    seat: Wind,
    stage: ClaimStage,
    options: ClaimOptions,
    settings: GameSettings,
    ai_player: AIPlayer | None,
    rng: random.Random,
) -> AIDecision:
    if settings.claim_policy == ClaimPolicy.STRATEGIC and ai_player is not None:
        tile = state.pending_claim.tile  # type: ignore[union-attr]
        decision = ai_player.should_claim(build_ai_context(state, seat), tile, options)
        if decision.action not in _STAGE_ACTIONS[stage]:
            return AIDecision(action=ClaimAction.PASS, reasoning=decision.reasoning)
        return decision
    return _random_policy_decision(stage, options, settings, rng)


def _to_claim_decision(decision: AIDecision, sequence: int) -> ClaimDecision:
    match decision.action:
        case ClaimAction.WIN:
            return WinDecision(sequence=sequence)
        case ClaimAction.PONG:
            return PongDecision(sequence=sequence)
        case ClaimAction.KONG:
            return KongDecision(sequence=sequence)
        case ClaimAction.CHOW if decision.chow_set is not None:
            return ChowDecision(tiles=decision.chow_set, sequence=sequence)
        case _:
            return PassDecision(sequence=sequence)


def resolve_claims(
    state: GameState,
    settings: GameSettings,
    ai_players: dict[Wind, AIPlayer],
    rng: random.Random,
) -> tuple[GameState, list[GameEvent], ClaimOutcome]:
    """
    Run (or resume) claim resolution over the pending window.

    Returns OFFERED when it stopped on a human offer, WON or CLAIMED when a
    seat took the tile, and NONE when play moved on unclaimed.
    """
    window = state.pending_claim
    if window is None:
        raise InvalidActionError("no claim window is open")
    if state.claim_offer is not None:
        raise InvalidActionError("a claim offer is already waiting for a decision")

    for stage in CLAIM_STAGE_ORDER:
        for seat in seats_after(window.from_seat):
            if window.has_declined(seat, stage):
                continue
            options = claim_options(state, seat, stage, settings)
            if not _has_any(options):
                continue

            if get_player(state, seat).is_human:
                offer = ClaimOffer(
                    seat=seat,
                    tile=window.tile,
                    from_player=window.from_seat,
                    stage=stage,
                    can_win=options.can_win,
                    can_pong=options.can_pong,
                    can_kong=options.can_kong,
                    can_chow=options.can_chow,
                    chow_sets=options.chow_sets,
                    sequence=window.sequence,
                )
                logger.debug("claim offered", seat=seat.value, stage=stage.value, tile=window.tile.id)
                return state.model_copy(update={"claim_offer": offer}), [ClaimOfferEvent(offer=offer)], ClaimOutcome.OFFERED

            decision = _ai_decision(state, seat, stage, options, settings, ai_players.get(seat), rng)
            if decision.action == ClaimAction.PASS:
                continue
            new_state, events = apply_claim(state, seat, _to_claim_decision(decision, window.sequence), settings)
            if events:
                outcome = ClaimOutcome.WON if new_state.phase == GamePhase.FINISHED else ClaimOutcome.CLAIMED
                return new_state, events, outcome

    if window.kind == ClaimKind.ROBBING_KONG:
        new_state, events = complete_added_kong(state)
    else:
        new_state, events = advance_turn(state)
    logger.debug("no claims", tile=window.tile.id, sequence=window.sequence)
    return new_state, events, ClaimOutcome.NONE


def _take_claimed_tile(state: GameState, seat: Wind) -> GameState:
    """Move control to the claimer and retire the discard from the table."""
    window = state.pending_claim
    new_state = remove_discard(state, window.from_seat, window.tile)  # type: ignore[union-attr]
    return new_state.model_copy(
        update={
            "current_turn": seat,
            "turn_phase": TurnPhase.DISCARD,
            "pending_claim": None,
            "claim_offer": None,
            "last_discard": None,
            "last_discard_by": None,
            "last_drawn": None,
        }
    )


def _claim_meld(
    state: GameState,
    seat: Wind,
    meld_type: MeldType,
    hand_tiles: list[Tile],
) -> tuple[GameState, list[GameEvent]]:
    window = state.pending_claim
    tile = window.tile  # type: ignore[union-attr]
    from_seat = window.from_seat  # type: ignore[union-attr]
    meld = make_meld(meld_type, [*hand_tiles, tile], is_concealed=False, claimed_from=from_seat)
    player = get_player(state, seat)

    new_state = remove_tiles_from_hand(state, seat, hand_tiles)
    new_state = update_player(new_state, seat, melds=(*player.melds, meld), is_replacement_draw=False)
    new_state = _take_claimed_tile(new_state, seat)
    events: list[GameEvent] = [MeldEvent(seat=seat, meld=meld, from_seat=from_seat)]
    logger.debug("tile claimed", seat=seat.value, meld_type=meld_type.value, tile=tile.id, from_seat=from_seat.value)
    return new_state, events


def apply_claim(
    state: GameState,
    seat: Wind,
    decision: ClaimDecision,
    settings: GameSettings,
) -> tuple[GameState, list[GameEvent]]:
    """
    Apply one seat's claim on the pending tile.

    The claim is rechecked against the rules; anything not currently legal
    is soft-denied with the state unchanged and no events.
    """
    window = state.pending_claim
    if window is None or seat == window.from_seat:
        logger.debug("claim denied, no window", seat=seat.value)
        return state, []

    player = get_player(state, seat)
    tile = window.tile

    if isinstance(decision, WinDecision):
        return claim_win(state, seat, settings)

    if window.kind == ClaimKind.ROBBING_KONG or isinstance(decision, PassDecision):
        return state, []

    matching = [t for t in player.hand if tiles_same_type(t, tile)]

    if isinstance(decision, PongDecision):
        if not can_pong(player.hand, tile):
            logger.debug("pong denied", seat=seat.value, tile=tile.id)
            return state, []
        new_state, events = _claim_meld(state, seat, MeldType.PUNG, matching[:2])
        return new_state, [*events, TurnEvent(seat=seat, turn_phase=TurnPhase.DISCARD)]

    if isinstance(decision, KongDecision):
        if not can_kong(player.hand, tile) or not can_replace_for_kong(state, settings):
            logger.debug("kong denied", seat=seat.value, tile=tile.id)
            return state, []
        new_state, events = _claim_meld(state, seat, MeldType.KONG, matching[:3])
        new_state, draw_events = draw_kong_replacement(new_state, seat)
        return new_state, [*events, *draw_events, TurnEvent(seat=seat, turn_phase=TurnPhase.DISCARD)]

    if seat != next_wind(window.from_seat):
        logger.debug("chow denied, not the next seat", seat=seat.value, tile=tile.id)
        return state, []
    wanted = {t.instance_id for t in decision.tiles}
    chow_set = next(
        (pair for pair in can_chow(player.hand, tile) if {t.instance_id for t in pair} == wanted),
        None,
    )
    if chow_set is None:
        # accept the same tile types held as different physical copies
        wanted_ids = sorted(t.id for t in decision.tiles)
        chow_set = next(
            (pair for pair in can_chow(player.hand, tile) if sorted(t.id for t in pair) == wanted_ids),
            None,
        )
    if chow_set is None:
        logger.debug("chow denied", seat=seat.value, tile=tile.id)
        return state, []
    new_state, events = _claim_meld(state, seat, MeldType.CHOW, list(chow_set))
    return new_state, [*events, TurnEvent(seat=seat, turn_phase=TurnPhase.DISCARD)]


def apply_claim_decision(
    state: GameState,
    decision: ClaimDecision,
    settings: GameSettings,
) -> tuple[GameState, list[GameEvent]]:
    """
    Answer the pending human claim offer.

    A pass records the declined stage and clears the offer; the caller then
    resumes resolve_claims. Any other action must be one the offer allowed.
    Decisions arriving with no offer pending, or for an older offer, are ignored.
    """
    offer = state.claim_offer
    window = state.pending_claim
    if offer is None or window is None:
        logger.debug("claim decision ignored, no offer pending", action=decision.action.value)
        return state, []
    if decision.sequence is not None and decision.sequence != offer.sequence:
        logger.debug("stale claim decision ignored", sequence=decision.sequence, current=offer.sequence)
        return state, []

    allowed = {
        ClaimAction.PASS: True,
        ClaimAction.WIN: offer.can_win,
        ClaimAction.PONG: offer.can_pong,
        ClaimAction.KONG: offer.can_kong,
        ClaimAction.CHOW: offer.can_chow,
    }
    if not allowed[decision.action]:
        logger.debug("claim decision not offered", seat=offer.seat.value, action=decision.action.value)
        return state, []

    if isinstance(decision, PassDecision):
        declined = window.model_copy(update={"declined": (*window.declined, (offer.seat, offer.stage))})
        logger.debug("claim passed", seat=offer.seat.value, stage=offer.stage.value)
        return state.model_copy(update={"pending_claim": declined, "claim_offer": None}), []

    return apply_claim(state, offer.seat, decision, settings)
