"""
AI decision making for non-human seats.

Three tiers share one interface (select_discard / should_claim /
should_declare_kong):

  easy    per-tile heuristic score with random jitter; pongs/kongs honors
          only, never chows
  medium  shanten then count of distinct improving tile types; claims only
          when shanten strictly improves, or an honor while shanten <= 2
  hard    improving tiles weighted by unseen copies, blended with a
          defensive score; claims to reach tenpai, to improve while the wall
          is long, or honors near tenpai; chows only to reach tenpai

Every tier accepts a win first.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.enums import AIDifficulty, ClaimAction, Wind
from hk_mahjong.logic.exceptions import NoPlayableTilesError
from hk_mahjong.logic.melds import Meld, count_declared_sets
from hk_mahjong.logic.shanten import AGARI_STATE, shanten_from_counts
from hk_mahjong.logic.tiles import (
    COPIES_PER_TYPE,
    NUM_TILE_TYPES,
    Tile,
    hand_to_34_array,
    is_honor,
    is_suited,
    is_terminal,
    playable_tiles,
    tiles_same_type,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

# easy heuristic weights
EASY_BASE_SCORE = 50
EASY_PAIR_BONUS = 30
EASY_TRIPLET_BONUS = 50
EASY_LONE_HONOR_PENALTY = 20
EASY_LONE_TERMINAL_PENALTY = 10
EASY_SIMPLE_BONUS = 15
EASY_JITTER = 10

# medium claim threshold
MEDIUM_HONOR_CLAIM_SHANTEN = 2

# hard thresholds and weights
HARD_LATE_GAME_WALL = 30
HARD_LONG_WALL = 20
HARD_HONOR_CLAIM_SHANTEN = 1
HARD_EARLY_DEFENSE_WEIGHT = 0.1
HARD_LATE_DEFENSE_WEIGHT = 0.4
DEFENSE_BASE_SCORE = 50
DEFENSE_DISCARDED_BONUS = 25
DEFENSE_HONOR_BONUS = 10
DEFENSE_TERMINAL_BONUS = 5
DEFENSE_MIDDLE_PENALTY = 10


class AIContext(BaseModel):
    """What a seat can see when deciding."""

    model_config = ConfigDict(frozen=True)

    hand: tuple[Tile, ...]
    melds: tuple[Meld, ...] = ()
    seat_wind: Wind
    round_wind: Wind
    discards: tuple[Tile, ...] = ()  # every visible discard on the table
    exposed_tiles: tuple[Tile, ...] = ()  # tiles in every seat's declared melds
    wall_remaining: int = 0


class ClaimOptions(BaseModel):
    """Legal responses to a discard for one seat."""

    model_config = ConfigDict(frozen=True)

    can_win: bool = False
    can_pong: bool = False
    can_kong: bool = False
    can_chow: bool = False
    chow_sets: tuple[tuple[Tile, Tile], ...] = ()


class AIDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: ClaimAction
    chow_set: tuple[Tile, Tile] | None = None
    reasoning: str = ""


def find_improving_types(tiles_34: Sequence[int], declared_sets: int, shanten: int | None = None) -> list[int]:
    """34-format types whose draw lowers shanten. Types already held four times are skipped."""
    if shanten is None:
        shanten = shanten_from_counts(tiles_34, declared_sets)
    if shanten <= AGARI_STATE:
        return []
    work = list(tiles_34)
    improving: list[int] = []
    for index in range(NUM_TILE_TYPES):
        if work[index] >= COPIES_PER_TYPE:
            continue
        work[index] += 1
        if shanten_from_counts(work, declared_sets) < shanten:
            improving.append(index)
        work[index] -= 1
    return improving


def _without(hand: Sequence[Tile], removed: Iterable[Tile]) -> list[Tile]:
    gone = {t.instance_id for t in removed}
    return [t for t in hand if t.instance_id not in gone]


def _distinct_candidates(hand: Sequence[Tile]) -> list[Tile]:
    """One playable tile per type, in hand order."""
    seen: set[str] = set()
    candidates: list[Tile] = []
    for tile in playable_tiles(hand):
        if tile.id not in seen:
            seen.add(tile.id)
            candidates.append(tile)
    return candidates


def _claim_shanten_after(context: AIContext, used: Sequence[Tile]) -> int:
    """Shanten after exposing `used` from hand as one new set."""
    remaining = _without(context.hand, used)
    return shanten_from_counts(hand_to_34_array(remaining), count_declared_sets(context.melds) + 1)


def _pong_tiles(context: AIContext, tile: Tile, options: ClaimOptions) -> list[Tile]:
    matching = [t for t in context.hand if tiles_same_type(t, tile)]
    return matching[:3] if options.can_kong else matching[:2]


def _pong_or_kong(options: ClaimOptions, reasoning: str) -> AIDecision:
    return AIDecision(action=ClaimAction.KONG if options.can_kong else ClaimAction.PONG, reasoning=reasoning)


class AIPlayer:
    """
    Base AI seat. Subclasses override the tier-specific hooks.

    The base behaviour discards the first playable tile and passes on every
    claim except a win.
    """

    difficulty: AIDifficulty = AIDifficulty.EASY

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()  # noqa: S311

    def select_discard(self, context: AIContext) -> Tile:
        if not playable_tiles(context.hand):
            raise NoPlayableTilesError("cannot select discard from a hand without playable tiles")
        return self._choose_discard(context)

    def should_claim(self, context: AIContext, tile: Tile, options: ClaimOptions) -> AIDecision:
        if options.can_win:
            return AIDecision(action=ClaimAction.WIN, reasoning="Winning hand!")
        return self._claim_decision(context, tile, options)

    def should_declare_kong(self, context: AIContext, tiles: Sequence[Tile]) -> bool:
        """Declare a concealed kong only if it does not set the hand back."""
        before = shanten_from_counts(hand_to_34_array(context.hand), count_declared_sets(context.melds))
        after = _claim_shanten_after(context, tiles)
        return after <= before

    def should_declare_added_kong(self, context: AIContext, tile: Tile) -> bool:
        """Promote an exposed pung unless losing the tile sets the hand back."""
        declared = count_declared_sets(context.melds)
        before = shanten_from_counts(hand_to_34_array(context.hand), declared)
        after = shanten_from_counts(hand_to_34_array(_without(context.hand, [tile])), declared)
        return after <= before

    def _choose_discard(self, context: AIContext) -> Tile:
        return playable_tiles(context.hand)[0]

    def _claim_decision(self, context: AIContext, tile: Tile, options: ClaimOptions) -> AIDecision:  # noqa: ARG002
        return AIDecision(action=ClaimAction.PASS)


class EasyAIPlayer(AIPlayer):
    difficulty = AIDifficulty.EASY

    def _choose_discard(self, context: AIContext) -> Tile:
        hand = playable_tiles(context.hand)
        counts = hand_to_34_array(hand)

        def score(tile: Tile) -> float:
            count = counts[tile.type_index]  # type: ignore[index]
            value = EASY_BASE_SCORE
            if count >= 2:  # noqa: PLR2004
                value += EASY_PAIR_BONUS
            if count >= 3:  # noqa: PLR2004
                value += EASY_TRIPLET_BONUS
            if is_honor(tile) and count == 1:
                value -= EASY_LONE_HONOR_PENALTY
            if is_terminal(tile) and count == 1:
                value -= EASY_LONE_TERMINAL_PENALTY
            if is_suited(tile) and 3 <= tile.value <= 7:  # type: ignore[operator]  # noqa: PLR2004
                value += EASY_SIMPLE_BONUS
            return value + self._rng.random() * EASY_JITTER

        return min(hand, key=score)

    def _claim_decision(self, context: AIContext, tile: Tile, options: ClaimOptions) -> AIDecision:  # noqa: ARG002
        if (options.can_pong or options.can_kong) and is_honor(tile):
            return _pong_or_kong(options, "Claiming honor tile")
        return AIDecision(action=ClaimAction.PASS, reasoning="Easy AI passes on most claims")

    def should_declare_kong(self, context: AIContext, tiles: Sequence[Tile]) -> bool:  # noqa: ARG002
        return False

    def should_declare_added_kong(self, context: AIContext, tile: Tile) -> bool:  # noqa: ARG002
        return False


class MediumAIPlayer(AIPlayer):
    difficulty = AIDifficulty.MEDIUM

    def _choose_discard(self, context: AIContext) -> Tile:
        declared = count_declared_sets(context.melds)
        base = hand_to_34_array(context.hand)
        best: tuple[int, int] | None = None
        choice = None
        for tile in _distinct_candidates(context.hand):
            after = list(base)
            after[tile.type_index] -= 1  # type: ignore[index]
            shanten = shanten_from_counts(after, declared)
            ukeire = len(find_improving_types(after, declared, shanten))
            key = (shanten, -ukeire)
            if best is None or key < best:
                best, choice = key, tile
        return choice  # type: ignore[return-value]

    def _claim_decision(self, context: AIContext, tile: Tile, options: ClaimOptions) -> AIDecision:
        if options.can_pong or options.can_kong:
            current = shanten_from_counts(hand_to_34_array(context.hand), count_declared_sets(context.melds))
            after = _claim_shanten_after(context, _pong_tiles(context, tile, options))
            if after < current:
                return _pong_or_kong(options, f"Shanten {current} -> {after}")
            if is_honor(tile) and current <= MEDIUM_HONOR_CLAIM_SHANTEN:
                return _pong_or_kong(options, "Claiming valuable honor tile")
        return AIDecision(action=ClaimAction.PASS, reasoning="Claim would not improve hand significantly")


def defensive_score(tile: Tile, discards: Iterable[Tile]) -> int:
    """Higher is safer to discard."""
    score = DEFENSE_BASE_SCORE
    score += sum(1 for d in discards if tiles_same_type(d, tile)) * DEFENSE_DISCARDED_BONUS
    if is_honor(tile):
        score += DEFENSE_HONOR_BONUS
    if is_terminal(tile):
        score += DEFENSE_TERMINAL_BONUS
    if is_suited(tile) and 4 <= tile.value <= 6:  # type: ignore[operator]  # noqa: PLR2004
        score -= DEFENSE_MIDDLE_PENALTY
    return score


class HardAIPlayer(AIPlayer):
    difficulty = AIDifficulty.HARD

    def _choose_discard(self, context: AIContext) -> Tile:
        declared = count_declared_sets(context.melds)
        base = hand_to_34_array(context.hand)
        visible = hand_to_34_array([*context.hand, *context.discards, *context.exposed_tiles])
        weight = HARD_LATE_DEFENSE_WEIGHT if context.wall_remaining < HARD_LATE_GAME_WALL else HARD_EARLY_DEFENSE_WEIGHT

        best: tuple[int, float] | None = None
        choice = None
        for tile in _distinct_candidates(context.hand):
            after = list(base)
            after[tile.type_index] -= 1  # type: ignore[index]
            shanten = shanten_from_counts(after, declared)
            ukeire = sum(
                max(0, COPIES_PER_TYPE - visible[index]) for index in find_improving_types(after, declared, shanten)
            )
            blended = ukeire * (1 - weight) + defensive_score(tile, context.discards) * weight
            key = (shanten, -blended)
            if best is None or key < best:
                best, choice = key, tile
        return choice  # type: ignore[return-value]

    def _claim_decision(self, context: AIContext, tile: Tile, options: ClaimOptions) -> AIDecision:
        current = shanten_from_counts(hand_to_34_array(context.hand), count_declared_sets(context.melds))

        if options.can_pong or options.can_kong:
            after = _claim_shanten_after(context, _pong_tiles(context, tile, options))
            if after <= 0 < current:
                return _pong_or_kong(options, "Claiming to reach tenpai")
            if after < current and context.wall_remaining > HARD_LONG_WALL:
                return _pong_or_kong(options, "Significant shanten improvement")
            if is_honor(tile) and current <= HARD_HONOR_CLAIM_SHANTEN:
                return _pong_or_kong(options, "Valuable honor tile near tenpai")

        if options.can_chow:
            for chow_set in options.chow_sets:
                after = _claim_shanten_after(context, chow_set)
                if after <= 0 < current:
                    return AIDecision(action=ClaimAction.CHOW, chow_set=chow_set, reasoning="Chow to reach tenpai")

        return AIDecision(action=ClaimAction.PASS, reasoning="Keeping hand closed for better scoring")


_AI_TIERS: dict[AIDifficulty, type[AIPlayer]] = {
    AIDifficulty.EASY: EasyAIPlayer,
    AIDifficulty.MEDIUM: MediumAIPlayer,
    AIDifficulty.HARD: HardAIPlayer,
}


def create_ai_player(difficulty: AIDifficulty, rng: random.Random | None = None) -> AIPlayer:
    return _AI_TIERS[difficulty](rng)
