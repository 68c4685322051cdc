"""Simulate all-AI games headlessly and report how hands end.

Every seat is played by AI and delays run on a virtual clock, so a full
game finishes in seconds. The same seed always replays the same games.

Usage:
    uv run python bin/simulate_games.py
    uv run python bin/simulate_games.py --games 20 --difficulty hard
    uv run python bin/simulate_games.py --seed <hex> --log-dir logs/sim
"""

from __future__ import annotations

import argparse
import logging
import statistics
import time
from collections import Counter
from pathlib import Path

from hk_mahjong.logic.enums import AIDifficulty, ClaimPolicy, HandEndType
from hk_mahjong.logic.events import ExhaustiveDrawEvent, GameEvent, WinEvent
from hk_mahjong.logic.game import MahjongGame
from hk_mahjong.logic.rng import create_hand_rng, generate_seed
from hk_mahjong.logic.settings import GameSettings
from hk_mahjong.logic.timer import ManualScheduler
from hk_mahjong.shared.logging import setup_logging

MAX_HANDS_PER_GAME = 500


class _Tally:
    """Hand outcomes across every simulated game."""

    def __init__(self) -> None:
        self.end_types: Counter[HandEndType] = Counter()
        self.fan_names: Counter[str] = Counter()
        self.fan_totals: list[int] = []
        self.invalid_wins = 0

    def __call__(self, event: GameEvent) -> None:
        if isinstance(event, WinEvent):
            self.end_types[event.end_type] += 1
            if event.result is not None:
                self.fan_totals.append(event.result.total_fan)
                self.fan_names.update(score.name for score in event.result.fan_breakdown)
                if not event.result.is_valid:
                    self.invalid_wins += 1
        elif isinstance(event, ExhaustiveDrawEvent):
            self.end_types[HandEndType.EXHAUSTIVE_DRAW] += 1


def simulate_game(settings: GameSettings, tally: _Tally) -> tuple[int, dict[str, int]]:
    """Play one game to the end. Returns the number of hands and final scores."""
    scheduler = ManualScheduler()
    game = MahjongGame(settings, scheduler)
    game.add_listener(tally)
    game.init_game()

    hands = 0
    while hands < MAX_HANDS_PER_GAME:
        scheduler.run_until_idle()
        hands += 1
        game.start_next_hand()
        if game.state.is_game_over:
            break
    return hands, {p.seat.value: p.score for p in game.state.players}


def _print_report(tally: _Tally, hands: list[int], elapsed: float) -> None:
    total_hands = sum(tally.end_types.values())
    print("=" * 60)
    print("OUTCOMES")
    print("=" * 60)
    print(f"Games: {len(hands)}  Hands: {total_hands}  Time: {elapsed:.2f}s")
    print(f"Hands per game: median {statistics.median(hands):.0f}, max {max(hands)}")
    for end_type, count in tally.end_types.most_common():
        print(f"  {end_type.value:<16} {count:>6}  ({count / total_hands:.1%})")
    if tally.fan_totals:
        print(f"Fan per win: mean {statistics.mean(tally.fan_totals):.2f}, max {max(tally.fan_totals)}")
        print(f"Wins below the fan minimum: {tally.invalid_wins}")
    print()
    print("Most common fan entries:")
    for name, count in tally.fan_names.most_common(15):
        print(f"  {name:<24} {count:>6}")
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate all-AI Hong Kong mahjong games")
    parser.add_argument("-n", "--games", type=int, default=5, help="number of games (default: 5)")
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in AIDifficulty],
        default=AIDifficulty.MEDIUM.value,
        help="AI tier for every seat (default: medium)",
    )
    parser.add_argument(
        "--strategic-claims",
        action="store_true",
        help="let each AI tier decide claims instead of the random claim policy",
    )
    parser.add_argument("--seed", help="hex seed for the first game; later games derive theirs from it")
    parser.add_argument("--log-dir", type=Path, help="also write engine logs to a timestamped file here")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every engine decision")
    args = parser.parse_args()

    log_file = setup_logging(args.log_dir, level=logging.DEBUG if args.verbose else logging.WARNING)
    if log_file is not None:
        print(f"Logging to {log_file}")

    base_seed = args.seed or generate_seed()
    print(f"Seed: {base_seed}")
    tally = _Tally()
    hands: list[int] = []
    start = time.perf_counter()
    for index in range(args.games):
        # derive one seed per game from the base seed
        seed = base_seed if index == 0 else f"{create_hand_rng(base_seed, index).getrandbits(256):064x}"
        settings = GameSettings(
            human_seat=None,
            seed=seed,
            ai_difficulty=AIDifficulty(args.difficulty),
            claim_policy=ClaimPolicy.STRATEGIC if args.strategic_claims else ClaimPolicy.RANDOM,
        )
        game_hands, scores = simulate_game(settings, tally)
        hands.append(game_hands)
        print(f"Game {index + 1}: {game_hands} hands, scores {scores}")
    print()

    _print_report(tally, hands, time.perf_counter() - start)


if __name__ == "__main__":
    main()
