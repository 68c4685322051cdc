"""
Discard advisor for the human seat.

Ranks every playable discard by the shanten it leaves, then by tile
acceptance (ukeire), then by the fan value of the most promising target
hand, and explains the top choice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.ai_player import find_improving_types
from hk_mahjong.logic.enums import DRAGONS, SUITS, Wind
from hk_mahjong.logic.exceptions import NoPlayableTilesError
from hk_mahjong.logic.hand_analysis import count_tile_types
from hk_mahjong.logic.hand_patterns import analyze_hand_shape, get_dominant_suit
from hk_mahjong.logic.melds import Meld, count_declared_sets
from hk_mahjong.logic.shanten import shanten_from_counts
from hk_mahjong.logic.tiles import COPIES_PER_TYPE, Tile, hand_to_34_array, playable_tiles

if TYPE_CHECKING:
    from collections.abc import Sequence

MAX_ALTERNATIVES = 3
BASIC_HAND = "Basic Hand"
BASIC_FAN = 1

MIXED_FLUSH_MIN_TILES = 10
MIXED_FLUSH_MAX_OFF_SUIT = 3
PURE_FLUSH_MIN_TILES = 11
PURE_FLUSH_MAX_OFF_SUIT = 2
ALL_PUNGS_MIN_GROUPS = 3


class HandTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    fan_value: int
    probability: float
    required_tiles: tuple[str, ...]

    @property
    def expected_fan(self) -> float:
        return self.fan_value * self.probability


class AlternativeMove(BaseModel):
    model_config = ConfigDict(frozen=True)

    tile: Tile
    reasoning: str
    fan_potential: int
    tiles_needed: int


class TeacherSuggestion(BaseModel):
    """Recommended discard with its rationale and up to three runner-up moves."""

    model_config = ConfigDict(frozen=True)

    recommended_tile: Tile
    reasoning: str
    target_hand: str
    fan_potential: int
    tiles_needed: int
    alternative_moves: tuple[AlternativeMove, ...] = ()


class _Evaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    tile: Tile
    shanten: int
    ukeire: int
    target_hand: str
    fan_potential: int


def calculate_ukeire(hand: Sequence[Tile], melds: Sequence[Meld], discard_tile: Tile) -> int:
    """
    Tiles that would improve the hand after discarding `discard_tile`.

    Each improving type counts four copies, regardless of what is visible.
    """
    remaining = [t for t in hand if t.instance_id != discard_tile.instance_id]
    improving = find_improving_types(hand_to_34_array(remaining), count_declared_sets(melds))
    return len(improving) * COPIES_PER_TYPE


def evaluate_hand_targets(
    hand: Sequence[Tile],
    melds: Sequence[Meld],
    seat_wind: Wind | None = None,
    round_wind: Wind | None = None,
) -> list[HandTarget]:
    """
    Scoring hands within reach, most promising first (fan x probability).

    Pairs of the seat or round wind count toward a wind pung target.
    """
    targets: list[HandTarget] = []
    all_tiles = playable_tiles([*hand, *(t for m in melds for t in m.tiles)])
    shape = analyze_hand_shape(all_tiles, melds)
    honor_count = shape.honor_count
    suited_total = sum(shape.suit_distribution.values())

    for suit in SUITS:
        suit_count = shape.suit_distribution[suit]
        off_suit = suited_total - suit_count
        if suit_count + honor_count >= MIXED_FLUSH_MIN_TILES and off_suit <= MIXED_FLUSH_MAX_OFF_SUIT:
            targets.append(
                HandTarget(
                    name="Mixed Flush",
                    fan_value=3,
                    probability=0.5 + (suit_count + honor_count) / 28,
                    required_tiles=(f"{suit.value} tiles", "honor tiles"),
                )
            )

    for suit in SUITS:
        suit_count = shape.suit_distribution[suit]
        off_suit = suited_total - suit_count
        if suit_count >= PURE_FLUSH_MIN_TILES and off_suit <= PURE_FLUSH_MAX_OFF_SUIT:
            targets.append(
                HandTarget(
                    name="Pure Flush",
                    fan_value=7,
                    probability=0.3 + suit_count / 26,
                    required_tiles=(f"{suit.value} tiles only",),
                )
            )

    pung_count = shape.pung_count
    pairs = sum(1 for c in count_tile_types(playable_tiles(hand)).values() if c >= 2)  # noqa: PLR2004
    if pung_count + pairs >= ALL_PUNGS_MIN_GROUPS:
        targets.append(
            HandTarget(
                name="All Pungs",
                fan_value=3,
                probability=0.4 + pung_count * 0.15,
                required_tiles=("triplets only",),
            )
        )

    for dragon in DRAGONS:
        held = sum(1 for t in hand if t.dragon == dragon)
        if held >= 2:  # noqa: PLR2004
            targets.append(
                HandTarget(
                    name=f"{dragon.value.capitalize()} Dragon Pung",
                    fan_value=1,
                    probability=0.9 if held >= 3 else 0.5,  # noqa: PLR2004
                    required_tiles=(f"{dragon.value} dragon",),
                )
            )

    for wind in dict.fromkeys(w for w in (seat_wind, round_wind) if w is not None):
        held = sum(1 for t in hand if t.wind == wind)
        if held >= 2:  # noqa: PLR2004
            label = "Seat Wind" if wind == seat_wind else "Round Wind"
            targets.append(
                HandTarget(
                    name=f"{label} Pung",
                    fan_value=1,
                    probability=0.9 if held >= 3 else 0.5,  # noqa: PLR2004
                    required_tiles=(f"{wind.value} wind",),
                )
            )

    return sorted(targets, key=lambda target: target.expected_fan, reverse=True)


def suggest_discard(
    hand: Sequence[Tile],
    melds: Sequence[Meld],
    seat_wind: Wind,
    round_wind: Wind,
) -> TeacherSuggestion:
    """
    Recommend a discard.

    Raises NoPlayableTilesError when the hand holds no playable tile.
    """
    candidates = playable_tiles(hand)
    if not candidates:
        raise NoPlayableTilesError("no tiles to discard")

    declared = count_declared_sets(melds)
    evaluations: list[_Evaluation] = []
    for tile in candidates:
        remaining = [t for t in hand if t.instance_id != tile.instance_id]
        targets = evaluate_hand_targets(remaining, melds, seat_wind, round_wind)
        best_target = targets[0] if targets else None
        evaluations.append(
            _Evaluation(
                tile=tile,
                shanten=shanten_from_counts(hand_to_34_array(remaining), declared),
                ukeire=calculate_ukeire(hand, melds, tile),
                target_hand=best_target.name if best_target else BASIC_HAND,
                fan_potential=best_target.fan_value if best_target else BASIC_FAN,
            )
        )

    evaluations.sort(key=lambda e: (e.shanten, -e.ukeire, -e.fan_potential))
    best = evaluations[0]
    reasoning = f"Moves toward {best.target_hand} ({best.fan_potential} fan). {best.ukeire} tiles can improve."
    dominant = get_dominant_suit(t for t in hand if t.instance_id != best.tile.instance_id)
    if dominant is not None:
        reasoning += f" Hand leans {dominant.value}."
    alternatives = tuple(
        AlternativeMove(
            tile=e.tile,
            reasoning=f"Shanten: {e.shanten}, {e.ukeire} improving tiles",
            fan_potential=e.fan_potential,
            tiles_needed=e.ukeire,
        )
        for e in evaluations[1 : 1 + MAX_ALTERNATIVES]
    )
    return TeacherSuggestion(
        recommended_tile=best.tile,
        reasoning=reasoning,
        target_hand=best.target_hand,
        fan_potential=best.fan_potential,
        tiles_needed=best.ukeire,
        alternative_moves=alternatives,
    )
