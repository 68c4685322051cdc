"""
Turn transitions: deal, draw, discard, kongs declared on one's own turn,
and wins.

Every function is pure: it takes the current GameState and returns
(new_state, events). Illegal draw/discard commands raise; meld and win
declarations that are not allowed soft-deny by returning the state
unchanged with no events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from hk_mahjong.logic.enums import (
    WINDS,
    ClaimKind,
    DeadWallPolicy,
    GamePhase,
    HandEndType,
    MeldType,
    TurnPhase,
    Wind,
    next_wind,
)
from hk_mahjong.logic.events import (
    DealEvent,
    DiscardEvent,
    DrawEvent,
    ExhaustiveDrawEvent,
    FlowerEvent,
    GameEvent,
    MeldEvent,
    TurnEvent,
    WinEvent,
)
from hk_mahjong.logic.exceptions import InvalidActionError, InvalidDiscardError
from hk_mahjong.logic.melds import make_meld, upgrade_pung_to_kong
from hk_mahjong.logic.rules import find_added_kongs
from hk_mahjong.logic.scoring import ScoringContext, WinResult, evaluate_winning_hand
from hk_mahjong.logic.state import ClaimWindow, GameState, Player
from hk_mahjong.logic.state_utils import (
    add_flowers,
    add_tiles_to_hand,
    get_player,
    hand_contains,
    remove_discard,
    remove_tiles_from_hand,
    update_player,
)
from hk_mahjong.logic.tiles import Tile, is_bonus, sort_tiles
from hk_mahjong.logic.wall import Wall, deal_initial_hands, draw_from_dead_wall, draw_non_bonus_tile

if TYPE_CHECKING:
    from hk_mahjong.logic.settings import GameSettings

logger = structlog.get_logger()

TILES_FOR_KONG = 4


def init_game(
    settings: GameSettings,
    wall: Wall,
    *,
    scores: dict[Wind, int] | None = None,
    dealer_seat: Wind = Wind.EAST,
    round_wind: Wind = Wind.EAST,
    round_number: int = 1,
    hand_number: int = 1,
) -> GameState:
    """
    Fresh state for one hand, phase `dealing`.

    `scores` carries totals from earlier hands; missing seats start at
    settings.initial_score.
    """
    scores = scores or {}
    players = tuple(
        Player(
            seat=seat,
            score=scores.get(seat, settings.initial_score),
            is_human=seat == settings.human_seat,
        )
        for seat in WINDS
    )
    return GameState(
        phase=GamePhase.DEALING,
        round_wind=round_wind,
        dealer_seat=dealer_seat,
        players=players,
        current_turn=dealer_seat,
        turn_phase=TurnPhase.DRAW,
        wall=wall,
        round_number=round_number,
        hand_number=hand_number,
    )


def deal_tiles(state: GameState, settings: GameSettings) -> tuple[GameState, list[GameEvent]]:
    """Deal hands, set flowers aside, and give the dealer the first discard."""
    if state.phase != GamePhase.DEALING:
        raise InvalidActionError(f"cannot deal in phase {state.phase.value}")

    dealt = deal_initial_hands(state.wall, state.dealer_seat, settings.hand_size)
    players = tuple(
        player.model_copy(update={"hand": dealt.hands[player.seat], "flowers": dealt.flowers[player.seat]})
        for player in state.players
    )
    new_state = state.model_copy(
        update={
            "players": players,
            "wall": dealt.wall,
            "phase": GamePhase.PLAYING,
            "current_turn": state.dealer_seat,
            "turn_phase": TurnPhase.DISCARD,
        }
    )

    events: list[GameEvent] = [
        DealEvent(
            dealer_seat=state.dealer_seat,
            hand_number=state.hand_number,
            hand_sizes={seat: len(hand) for seat, hand in dealt.hands.items()},
        )
    ]
    for seat in WINDS:
        events.extend(FlowerEvent(seat=seat, tile=flower) for flower in dealt.flowers[seat])
    events.append(TurnEvent(seat=state.dealer_seat, turn_phase=TurnPhase.DISCARD))

    logger.debug("tiles dealt", dealer=state.dealer_seat.value, hand_number=state.hand_number)
    return new_state, events


def _require_turn(state: GameState, seat: Wind, turn_phase: TurnPhase) -> None:
    if state.phase != GamePhase.PLAYING:
        raise InvalidActionError(f"game is not in play (phase {state.phase.value})")
    if state.pending_claim is not None:
        raise InvalidActionError("claim resolution is in progress")
    if state.current_turn != seat:
        raise InvalidActionError(f"it is {state.current_turn.value}'s turn, not {seat.value}'s")
    if state.turn_phase != turn_phase:
        raise InvalidActionError(f"{seat.value} must {state.turn_phase.value}, not {turn_phase.value}")


def _is_own_discard_turn(state: GameState, seat: Wind) -> bool:
    return (
        state.phase == GamePhase.PLAYING
        and state.pending_claim is None
        and state.current_turn == seat
        and state.turn_phase == TurnPhase.DISCARD
    )


def exhaustive_draw(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """The live wall is empty: the hand ends with no winner."""
    logger.debug("exhaustive draw", hand_number=state.hand_number)
    new_state = state.model_copy(
        update={
            "phase": GamePhase.FINISHED,
            "winner": None,
            "pending_claim": None,
            "claim_offer": None,
        }
    )
    return new_state, [ExhaustiveDrawEvent(hand_number=state.hand_number)]


def draw_tile(state: GameState, seat: Wind) -> tuple[GameState, list[GameEvent]]:
    """
    Draw from the live wall for the seat whose turn it is.

    Flowers and seasons are set aside and replaced. An empty wall ends the
    hand as an exhaustive draw.
    """
    _require_turn(state, seat, TurnPhase.DRAW)

    wall, tile, bonus = draw_non_bonus_tile(state.wall)
    new_state = add_flowers(state.model_copy(update={"wall": wall}), seat, bonus)
    events: list[GameEvent] = [FlowerEvent(seat=seat, tile=flower) for flower in bonus]

    if tile is None:
        new_state, end_events = exhaustive_draw(new_state)
        return new_state, events + end_events

    new_state = add_tiles_to_hand(new_state, seat, [tile])
    new_state = update_player(new_state, seat, is_replacement_draw=False)
    new_state = new_state.model_copy(update={"turn_phase": TurnPhase.DISCARD, "last_drawn": tile})
    events.append(DrawEvent(seat=seat, tile=tile))

    logger.debug("tile drawn", seat=seat.value, tile=tile.id, wall_remaining=len(wall.live_tiles))
    return new_state, events


def discard_tile(state: GameState, seat: Wind, tile: Tile) -> tuple[GameState, list[GameEvent]]:
    """
    Discard a tile and open the claim window over it.

    Raises InvalidDiscardError when the tile is not in hand or is a bonus tile.
    """
    _require_turn(state, seat, TurnPhase.DISCARD)
    player = get_player(state, seat)
    if not hand_contains(player, tile):
        raise InvalidDiscardError(f"{tile!r} is not in {seat.value}'s hand")
    if is_bonus(tile):
        raise InvalidDiscardError(f"{tile!r} is a bonus tile and cannot be discarded")

    new_state = remove_tiles_from_hand(state, seat, [tile])
    new_state = update_player(new_state, seat, discards=(*player.discards, tile), is_replacement_draw=False)
    sequence = state.discard_sequence + 1
    new_state = new_state.model_copy(
        update={
            "last_discard": tile,
            "last_discard_by": seat,
            "last_drawn": None,
            "turn_phase": TurnPhase.DRAW,
            "discard_sequence": sequence,
            "pending_claim": ClaimWindow(tile=tile, from_seat=seat, sequence=sequence),
        }
    )

    logger.debug("tile discarded", seat=seat.value, tile=tile.id, sequence=sequence)
    return new_state, [DiscardEvent(seat=seat, tile=tile, sequence=sequence)]


def advance_turn(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """Close an unclaimed window and pass the turn to the seat after the discarder."""
    from_seat = state.pending_claim.from_seat if state.pending_claim else state.current_turn
    next_seat = next_wind(from_seat)
    new_state = state.model_copy(
        update={
            "current_turn": next_seat,
            "turn_phase": TurnPhase.DRAW,
            "pending_claim": None,
            "claim_offer": None,
        }
    )
    return new_state, [TurnEvent(seat=next_seat, turn_phase=TurnPhase.DRAW)]


def can_replace_for_kong(state: GameState, settings: GameSettings) -> bool:
    """Whether a kong may be made under the dead wall policy."""
    return bool(state.wall.dead_wall_tiles) or settings.dead_wall_policy == DeadWallPolicy.ALLOW_WITHOUT_REPLACEMENT


def draw_kong_replacement(state: GameState, seat: Wind) -> tuple[GameState, list[GameEvent]]:
    """
    Draw a replacement from the dead wall after a kong.

    Bonus tiles drawn here are set aside and replaced from the dead wall too.
    With the dead wall empty the kong stands without a replacement.
    """
    events: list[GameEvent] = []
    wall = state.wall
    while True:
        wall, tile = draw_from_dead_wall(wall)
        if tile is None or not is_bonus(tile):
            break
        state = add_flowers(state, seat, [tile])
        events.append(FlowerEvent(seat=seat, tile=tile))

    state = state.model_copy(update={"wall": wall})
    if tile is None:
        logger.debug("dead wall empty, kong without replacement", seat=seat.value)
        events.append(DrawEvent(seat=seat, tile=None, from_dead_wall=True))
        return state, events

    state = add_tiles_to_hand(state, seat, [tile])
    state = update_player(state, seat, is_replacement_draw=True)
    state = state.model_copy(update={"last_drawn": tile})
    events.append(DrawEvent(seat=seat, tile=tile, from_dead_wall=True))
    return state, events


def declare_concealed_kong(
    state: GameState,
    seat: Wind,
    tile: Tile,
    settings: GameSettings,
) -> tuple[GameState, list[GameEvent]]:
    """Declare four of a kind held in hand, then draw a replacement."""
    player = get_player(state, seat)
    same = [t for t in player.hand if t.id == tile.id]
    if not _is_own_discard_turn(state, seat) or len(same) != TILES_FOR_KONG:
        logger.debug("concealed kong denied", seat=seat.value, tile=tile.id)
        return state, []
    if not can_replace_for_kong(state, settings):
        logger.debug("concealed kong denied, dead wall empty", seat=seat.value, tile=tile.id)
        return state, []

    meld = make_meld(MeldType.KONG, same, is_concealed=True)
    new_state = remove_tiles_from_hand(state, seat, same)
    new_state = update_player(new_state, seat, melds=(*player.melds, meld))
    events: list[GameEvent] = [MeldEvent(seat=seat, meld=meld)]
    new_state, draw_events = draw_kong_replacement(new_state, seat)

    logger.debug("concealed kong declared", seat=seat.value, tile=tile.id)
    return new_state, events + draw_events


def declare_added_kong(
    state: GameState,
    seat: Wind,
    tile: Tile,
    settings: GameSettings,
) -> tuple[GameState, list[GameEvent]]:
    """
    Promote an exposed pung with its fourth tile.

    Opens a robbing-the-kong window first; the kong completes only if
    nobody wins on the tile.
    """
    player = get_player(state, seat)
    match = next(
        ((meld, fourth) for meld, fourth in find_added_kongs(player.hand, player.melds) if fourth.id == tile.id),
        None,
    )
    if not _is_own_discard_turn(state, seat) or match is None or not can_replace_for_kong(state, settings):
        logger.debug("added kong denied", seat=seat.value, tile=tile.id)
        return state, []

    meld, fourth = match
    sequence = state.discard_sequence + 1
    new_state = state.model_copy(
        update={
            "discard_sequence": sequence,
            "pending_claim": ClaimWindow(
                tile=fourth,
                from_seat=seat,
                kind=ClaimKind.ROBBING_KONG,
                sequence=sequence,
                kong_meld=meld,
            ),
        }
    )
    logger.debug("added kong pending", seat=seat.value, tile=tile.id, sequence=sequence)
    return new_state, []


def complete_added_kong(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """Nobody robbed the kong: finish the promotion and draw a replacement."""
    window = state.pending_claim
    if window is None or window.kind != ClaimKind.ROBBING_KONG or window.kong_meld is None:
        raise InvalidActionError("no added kong is pending")

    seat = window.from_seat
    player = get_player(state, seat)
    kong = upgrade_pung_to_kong(window.kong_meld, window.tile)
    melds = tuple(kong if m == window.kong_meld else m for m in player.melds)
    new_state = remove_tiles_from_hand(state, seat, [window.tile])
    new_state = update_player(new_state, seat, melds=melds)
    new_state = new_state.model_copy(update={"pending_claim": None, "claim_offer": None})
    events: list[GameEvent] = [MeldEvent(seat=seat, meld=kong, from_seat=kong.claimed_from, is_added_kong=True)]
    new_state, draw_events = draw_kong_replacement(new_state, seat)

    logger.debug("added kong declared", seat=seat.value, tile=window.tile.id)
    return new_state, events + draw_events


def score_win(
    state: GameState,
    seat: Wind,
    winning_tile: Tile,
    concealed: tuple[Tile, ...],
    settings: GameSettings,
    *,
    is_self_draw: bool,
    is_robbing_kong: bool = False,
    discarder: Wind | None = None,
) -> WinResult | None:
    """Best-scoring result for `concealed` + `winning_tile`, or None if not complete."""
    player = get_player(state, seat)
    context = ScoringContext(
        hand=concealed,
        melds=player.melds,
        flowers=player.flowers,
        winning_tile=winning_tile,
        seat_wind=seat,
        round_wind=state.round_wind,
        is_self_draw=is_self_draw,
        is_last_tile=not state.wall.live_tiles,
        is_replacement_tile=is_self_draw and player.is_replacement_draw,
        is_robbing_kong=is_robbing_kong,
    )
    return evaluate_winning_hand(
        context,
        discarder=discarder,
        min_fan=settings.min_fan,
        limit_fan=settings.limit_fan,
    )


def _is_acceptable(result: WinResult | None, settings: GameSettings) -> bool:
    if result is None:
        return False
    return result.is_valid or not settings.enforce_min_fan


def _finish_with_win(
    state: GameState,
    seat: Wind,
    tile: Tile,
    result: WinResult,
    *,
    end_type: HandEndType,
    discarder: Wind | None,
) -> tuple[GameState, list[GameEvent]]:
    players = tuple(
        player.model_copy(update={"score": player.score + result.final_payment.payments[player.seat]})
        for player in state.players
    )
    new_state = state.model_copy(
        update={
            "players": players,
            "phase": GamePhase.FINISHED,
            "current_turn": seat,
            "winner": seat,
            "winning_tile": tile,
            "is_self_draw": end_type == HandEndType.SELF_DRAW,
            "win_result": result,
            "pending_claim": None,
            "claim_offer": None,
        }
    )
    logger.debug(
        "hand won",
        winner=seat.value,
        tile=tile.id,
        end_type=end_type.value,
        fan=result.total_fan,
        points=result.base_points,
        valid=result.is_valid,
    )
    event = WinEvent(winner=seat, winning_tile=tile, end_type=end_type, from_seat=discarder, result=result)
    return new_state, [event]


def _self_drawn_tile(state: GameState, seat: Wind) -> Tile | None:
    """
    The tile this seat drew this turn, or None after a claimed discard.

    The dealer's opening fourteen count as drawn until the first discard.
    """
    player = get_player(state, seat)
    if state.last_drawn is not None and hand_contains(player, state.last_drawn):
        return state.last_drawn
    if seat == state.dealer_seat and state.discard_sequence == 0 and not player.melds:
        return player.hand[-1] if player.hand else None
    return None


def declare_self_draw_win(state: GameState, seat: Wind, settings: GameSettings) -> tuple[GameState, list[GameEvent]]:
    """Win on one's own turn with the tiles already in hand."""
    if not _is_own_discard_turn(state, seat):
        logger.debug("self-draw win denied, not this seat's discard turn", seat=seat.value)
        return state, []

    player = get_player(state, seat)
    winning_tile = _self_drawn_tile(state, seat)
    if winning_tile is None:
        logger.debug("self-draw win denied, no tile drawn this turn", seat=seat.value)
        return state, []
    concealed = tuple(t for t in player.hand if t.instance_id != winning_tile.instance_id)
    result = score_win(state, seat, winning_tile, concealed, settings, is_self_draw=True)
    if not _is_acceptable(result, settings):
        logger.debug("self-draw win denied", seat=seat.value)
        return state, []
    return _finish_with_win(state, seat, winning_tile, result, end_type=HandEndType.SELF_DRAW, discarder=None)  # type: ignore[arg-type]


def claim_win(state: GameState, seat: Wind, settings: GameSettings) -> tuple[GameState, list[GameEvent]]:
    """
    Win on the tile in the current claim window (a discard or a robbed kong).

    The tile moves from the discarder's discards (or, when robbing a kong,
    from the declarer's hand) into the winner's hand.
    """
    window = state.pending_claim
    if window is None or window.from_seat == seat:
        return state, []

    player = get_player(state, seat)
    robbing = window.kind == ClaimKind.ROBBING_KONG
    result = score_win(
        state,
        seat,
        window.tile,
        player.hand,
        settings,
        is_self_draw=False,
        is_robbing_kong=robbing,
        discarder=window.from_seat,
    )
    if not _is_acceptable(result, settings):
        logger.debug("claimed win denied", seat=seat.value, tile=window.tile.id)
        return state, []

    if robbing:
        new_state = remove_tiles_from_hand(state, window.from_seat, [window.tile])
    else:
        new_state = remove_discard(state, window.from_seat, window.tile)
    new_state = add_tiles_to_hand(new_state, seat, [window.tile])
    end_type = HandEndType.ROBBING_KONG if robbing else HandEndType.DISCARD_WIN
    return _finish_with_win(new_state, seat, window.tile, result, end_type=end_type, discarder=window.from_seat)  # type: ignore[arg-type]


def sort_hand(state: GameState, seat: Wind) -> GameState:
    player = get_player(state, seat)
    return update_player(state, seat, hand=tuple(sort_tiles(player.hand)))
