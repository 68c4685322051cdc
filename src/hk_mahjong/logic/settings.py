"""Centralized game settings - all configurable gameplay rules and pacing."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.enums import AIDifficulty, ClaimPolicy, DeadWallPolicy, Wind
from hk_mahjong.logic.exceptions import UnsupportedSettingsError

MAX_DEAD_WALL_SIZE = 16


class GameSettings(BaseModel):
    """
    Configuration for a Hong Kong Old Style table.

    All fields have defaults matching the standard four-player game with a
    human in the east seat.
    """

    model_config = ConfigDict(frozen=True)

    # --- Tiles ---
    include_flowers: bool = True
    dead_wall_size: int = 14
    hand_size: int = 13

    # --- Scoring ---
    min_fan: int = 3
    limit_fan: int = 13
    initial_score: int = 500
    enforce_min_fan: bool = False  # refuse wins below min_fan instead of recording an invalid result

    # --- Seats / AI ---
    human_seat: Wind | None = Wind.EAST
    ai_difficulty: AIDifficulty = AIDifficulty.MEDIUM
    claim_policy: ClaimPolicy = ClaimPolicy.RANDOM
    ai_claim_probability: float = 0.5

    # --- Kong ---
    dead_wall_policy: DeadWallPolicy = DeadWallPolicy.ALLOW_WITHOUT_REPLACEMENT

    # --- Pacing (seconds) ---
    deal_delay_seconds: float = 0.5
    discard_settle_seconds: float = 0.4
    draw_pacing_seconds: float = 0.6
    turn_pacing_seconds: float = 0.8
    human_draw_delay_seconds: float = 0.5
    claim_decision_seconds: float | None = None  # None waits for the human indefinitely

    # --- Randomness ---
    seed: str | None = None


def validate_settings(settings: GameSettings) -> None:
    """Validate that all settings values are supported by the engine.

    Raises UnsupportedSettingsError listing every offending field.
    """
    errors: list[str] = []

    if settings.hand_size != 13:  # noqa: PLR2004
        errors.append(f"hand_size={settings.hand_size} is not supported (only 13-tile hands)")

    if not 0 <= settings.dead_wall_size <= MAX_DEAD_WALL_SIZE:
        errors.append(f"dead_wall_size={settings.dead_wall_size} must be between 0 and {MAX_DEAD_WALL_SIZE}")

    if settings.min_fan < 0 or settings.min_fan > settings.limit_fan:
        errors.append(f"min_fan={settings.min_fan} must be between 0 and limit_fan={settings.limit_fan}")

    if not 0.0 <= settings.ai_claim_probability <= 1.0:
        errors.append(f"ai_claim_probability={settings.ai_claim_probability} must be within [0, 1]")

    if settings.claim_decision_seconds is not None and settings.claim_decision_seconds <= 0:
        errors.append("claim_decision_seconds must be positive when set")

    pacing = {
        "deal_delay_seconds": settings.deal_delay_seconds,
        "discard_settle_seconds": settings.discard_settle_seconds,
        "draw_pacing_seconds": settings.draw_pacing_seconds,
        "turn_pacing_seconds": settings.turn_pacing_seconds,
        "human_draw_delay_seconds": settings.human_draw_delay_seconds,
    }
    errors.extend(f"{name}={value} must not be negative" for name, value in pacing.items() if value < 0)

    if errors:
        raise UnsupportedSettingsError("; ".join(errors))
