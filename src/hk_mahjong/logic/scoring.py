"""
Fan scoring and payments for Hong Kong Old Style.

calculate_fan walks a fixed catalogue from the highest value down:

  limit hands (13 fan, returned alone):
    thirteen orphans, big four winds, all terminals
  high value (stack with everything below):
    all honors 10, big three dragons 8 / small three dragons 5,
    small four winds 6, pure flush 7 / mixed flush 3
  3 fan: all pungs, seven pairs, pure straight
  1 fan: all chows (only without any 3+ fan entry, suited pair), dragon
    pungs, seat wind, round wind, seat flowers, no flowers, self draw,
    last tile, after kong, robbing kong, concealed hand won by discard

Everything here is pure: the same context and melds always produce the
same breakdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.enums import DRAGONS, WINDS, MeldType, TileCategory, Wind, WinningShape, wind_to_number
from hk_mahjong.logic.hand_analysis import (
    STANDARD_SETS,
    decompose_hand,
    is_seven_pairs,
    is_thirteen_orphans,
)
from hk_mahjong.logic.hand_patterns import (
    is_all_chows,
    is_all_honors,
    is_all_pungs,
    is_all_terminals,
    is_mixed_flush,
    is_pure_flush,
)
from hk_mahjong.logic.melds import Meld, count_declared_sets
from hk_mahjong.logic.tiles import Tile, is_suited, playable_tiles

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = structlog.get_logger()

MIN_FAN = 3
LIMIT_FAN = 13

FAN_TO_POINTS: dict[int, int] = {
    0: 1,
    1: 2,
    2: 4,
    3: 8,
    4: 16,
    5: 24,
    6: 32,
    7: 48,
    8: 64,
    9: 96,
    10: 128,
    11: 192,
    12: 256,
    13: 384,
}

SELF_DRAW_MULTIPLIER = 3
DISCARD_WIN_MULTIPLIER = 2


class FanScore(BaseModel):
    """One scoring pattern and its fan."""

    model_config = ConfigDict(frozen=True)

    name: str
    fan: int
    description: str


class ScoringContext(BaseModel):
    """
    Everything the scorer needs about a win.

    `hand` is the concealed tiles without the winning tile; `melds` are the
    winner's declared melds.
    """

    model_config = ConfigDict(frozen=True)

    hand: tuple[Tile, ...]
    melds: tuple[Meld, ...] = ()
    flowers: tuple[Tile, ...] = ()
    winning_tile: Tile
    seat_wind: Wind
    round_wind: Wind
    is_self_draw: bool = False
    is_last_tile: bool = False
    is_replacement_tile: bool = False
    is_robbing_kong: bool = False


class PaymentResult(BaseModel):
    """Score delta per seat. Sums to zero once a payer is known."""

    model_config = ConfigDict(frozen=True)

    payments: dict[Wind, int]


class WinResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    total_fan: int
    meets_minimum: bool
    fan_breakdown: tuple[FanScore, ...]
    base_points: int
    final_payment: PaymentResult
    shape: WinningShape = WinningShape.STANDARD


def fan_to_points(fan: int, limit_fan: int = LIMIT_FAN) -> int:
    """Base points for a fan total; anything at or above the limit pays the limit."""
    if fan >= limit_fan:
        return FAN_TO_POINTS[LIMIT_FAN]
    return FAN_TO_POINTS[min(max(fan, 0), LIMIT_FAN)]


def _all_tiles(context: ScoringContext) -> list[Tile]:
    meld_tiles = [t for meld in context.melds for t in meld.tiles]
    return [*context.hand, *meld_tiles, context.winning_tile]


def _concealed_tiles(context: ScoringContext) -> list[Tile]:
    return playable_tiles([*context.hand, context.winning_tile])


def _honor_pungs(melds: Sequence[Meld], category: TileCategory) -> list[Meld]:
    return [m for m in melds if m.is_triplet_or_quad and m.base_tile.category == category]


def _has_honor_pair(melds: Sequence[Meld], category: TileCategory) -> bool:
    return any(m.type == MeldType.PAIR and m.base_tile.category == category for m in melds)


def _has_pure_straight(melds: Sequence[Meld]) -> bool:
    """Chows starting at 1, 4 and 7 in one suit."""
    chows = [m for m in melds if m.type == MeldType.CHOW]
    for suit in {m.base_tile.suit for m in chows}:
        starts = {m.base_tile.value for m in chows if m.base_tile.suit == suit}
        if {1, 4, 7} <= starts:
            return True
    return False


def _wind_pung(melds: Sequence[Meld], wind: Wind) -> bool:
    return any(m.base_tile.wind == wind for m in _honor_pungs(melds, TileCategory.WIND))


def calculate_fan(context: ScoringContext, completed_melds: Sequence[Meld]) -> list[FanScore]:
    """
    Fan breakdown for a win.

    `completed_melds` is the full reading of the hand: declared melds plus
    the concealed sets and pair.
    """
    scores: list[FanScore] = []
    all_tiles = _all_tiles(context)
    concealed_only = not context.melds

    # limit hands
    if concealed_only and is_thirteen_orphans(_concealed_tiles(context)):
        return [FanScore(name="Thirteen Orphans", fan=LIMIT_FAN, description="All terminals and honors with one pair")]
    if len(_honor_pungs(completed_melds, TileCategory.WIND)) == len(WINDS):
        return [FanScore(name="Big Four Winds", fan=LIMIT_FAN, description="Pungs of all four winds")]
    if is_all_terminals(all_tiles):
        return [FanScore(name="All Terminals", fan=LIMIT_FAN, description="Only 1s and 9s")]

    # high value hands
    if is_all_honors(all_tiles):
        scores.append(FanScore(name="All Honors", fan=10, description="Only honor tiles"))

    dragon_pungs = _honor_pungs(completed_melds, TileCategory.DRAGON)
    three_dragons = False
    if len(dragon_pungs) == len(DRAGONS):
        scores.append(FanScore(name="Big Three Dragons", fan=8, description="Pungs of all three dragons"))
        three_dragons = True
    elif len(dragon_pungs) == len(DRAGONS) - 1 and _has_honor_pair(completed_melds, TileCategory.DRAGON):
        scores.append(FanScore(name="Small Three Dragons", fan=5, description="Two dragon pungs and dragon pair"))
        three_dragons = True

    four_winds = False
    if len(_honor_pungs(completed_melds, TileCategory.WIND)) == len(WINDS) - 1 and _has_honor_pair(
        completed_melds, TileCategory.WIND
    ):
        scores.append(FanScore(name="Small Four Winds", fan=6, description="Three wind pungs and wind pair"))
        four_winds = True

    if is_pure_flush(all_tiles):
        scores.append(FanScore(name="Pure Flush", fan=7, description="Only one suit, no honors"))
    elif is_mixed_flush(all_tiles):
        scores.append(FanScore(name="Mixed Flush", fan=3, description="One suit plus honors"))

    # 3 fan hands
    if is_all_pungs(completed_melds):
        scores.append(FanScore(name="All Pungs", fan=3, description="Four triplets/quads"))
    if concealed_only and is_seven_pairs(_concealed_tiles(context)):
        scores.append(FanScore(name="Seven Pairs", fan=3, description="Seven pairs of tiles"))
    if _has_pure_straight(completed_melds):
        scores.append(FanScore(name="Pure Straight", fan=3, description="1-9 sequence in one suit"))

    # 1 fan elements
    if is_all_chows(completed_melds) and not any(s.fan >= 3 for s in scores):  # noqa: PLR2004
        pair = next((m for m in completed_melds if m.type == MeldType.PAIR), None)
        if pair is not None and is_suited(pair.base_tile):
            scores.append(FanScore(name="All Chows", fan=1, description="Only sequences"))

    if not three_dragons:
        scores.extend(
            FanScore(name=f"{meld.base_tile.dragon.value.capitalize()} Dragon Pung", fan=1, description="Dragon triplet")  # type: ignore[union-attr]
            for meld in dragon_pungs
        )

    if not four_winds:
        if _wind_pung(completed_melds, context.seat_wind):
            scores.append(FanScore(name="Seat Wind", fan=1, description=f"Pung of {context.seat_wind.value} wind"))
        if context.round_wind != context.seat_wind and _wind_pung(completed_melds, context.round_wind):
            scores.append(FanScore(name="Round Wind", fan=1, description=f"Pung of {context.round_wind.value} wind"))

    seat_number = wind_to_number(context.seat_wind)
    for flower in context.flowers:
        if flower.flower_number == seat_number:
            kind = "Flower" if flower.category == TileCategory.FLOWER else "Season"
            scores.append(FanScore(name=f"Seat {kind}", fan=1, description=f"{kind} matches seat"))
    if not context.flowers:
        scores.append(FanScore(name="No Flowers", fan=1, description="No flowers or seasons"))

    if context.is_self_draw:
        scores.append(FanScore(name="Self Draw", fan=1, description="Won by drawing tile"))
    if context.is_last_tile:
        scores.append(FanScore(name="Last Tile", fan=1, description="Won on last tile"))
    if context.is_replacement_tile:
        scores.append(FanScore(name="After Kong", fan=1, description="Won after declaring kong"))
    if context.is_robbing_kong:
        scores.append(FanScore(name="Robbing Kong", fan=1, description="Won by robbing kong"))

    if all(m.is_concealed for m in context.melds) and not context.is_self_draw:
        scores.append(FanScore(name="Concealed Hand", fan=1, description="All concealed, won by discard"))

    return scores


def calculate_payments(
    winner: Wind,
    points: int,
    *,
    is_self_draw: bool,
    discarder: Wind | None = None,
) -> PaymentResult:
    """
    Self-draw: every other seat pays `points`, the winner collects 3x.
    Discard win: the discarder alone pays 2x. Without a known discarder only
    the winner's side is filled in.
    """
    payments = dict.fromkeys(WINDS, 0)
    if is_self_draw:
        for seat in WINDS:
            payments[seat] = points * SELF_DRAW_MULTIPLIER if seat == winner else -points
    else:
        payments[winner] = points * DISCARD_WIN_MULTIPLIER
        if discarder is not None and discarder != winner:
            payments[discarder] = -points * DISCARD_WIN_MULTIPLIER
    return PaymentResult(payments=payments)


def calculate_win_result(
    context: ScoringContext,
    completed_melds: Sequence[Meld],
    *,
    discarder: Wind | None = None,
    min_fan: int = MIN_FAN,
    limit_fan: int = LIMIT_FAN,
    shape: WinningShape = WinningShape.STANDARD,
) -> WinResult:
    fan_breakdown = calculate_fan(context, completed_melds)
    total_fan = sum(score.fan for score in fan_breakdown)
    meets_minimum = total_fan >= min_fan
    base_points = fan_to_points(total_fan, limit_fan)
    payments = calculate_payments(
        context.seat_wind,
        base_points,
        is_self_draw=context.is_self_draw,
        discarder=discarder,
    )
    return WinResult(
        is_valid=meets_minimum,
        total_fan=total_fan,
        meets_minimum=meets_minimum,
        fan_breakdown=tuple(fan_breakdown),
        base_points=base_points,
        final_payment=payments,
        shape=shape,
    )


def evaluate_winning_hand(
    context: ScoringContext,
    *,
    discarder: Wind | None = None,
    min_fan: int = MIN_FAN,
    limit_fan: int = LIMIT_FAN,
) -> WinResult | None:
    """
    Score a win using the best reading of the hand.

    Decomposes the concealed tiles plus the winning tile and keeps the
    highest fan total (first reading on ties). None when the tiles do not
    form a complete hand.
    """
    melds_needed = STANDARD_SETS - count_declared_sets(context.melds)
    decompositions = decompose_hand(_concealed_tiles(context), melds_needed)
    best: WinResult | None = None
    for decomposition in decompositions:
        result = calculate_win_result(
            context,
            (*context.melds, *decomposition.melds),
            discarder=discarder,
            min_fan=min_fan,
            limit_fan=limit_fan,
            shape=decomposition.shape,
        )
        if best is None or result.total_fan > best.total_fan:
            best = result

    if best is None:
        logger.debug("hand does not decompose", seat=context.seat_wind.value, tiles=len(context.hand) + 1)
    return best
