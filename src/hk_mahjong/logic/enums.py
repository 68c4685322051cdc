"""
String enum definitions for Hong Kong Old Style Mahjong concepts.
"""

from enum import Enum


class TileCategory(str, Enum):
    """Category of a physical tile."""

    BAMBOO = "bamboo"
    CHARACTER = "character"
    DOT = "dot"
    WIND = "wind"
    DRAGON = "dragon"
    FLOWER = "flower"
    SEASON = "season"


class Suit(str, Enum):
    """The three numbered suits."""

    BAMBOO = "bamboo"
    CHARACTER = "character"
    DOT = "dot"


class Wind(str, Enum):
    """Wind direction, also used as the seat identifier."""

    EAST = "east"
    SOUTH = "south"
    WEST = "west"
    NORTH = "north"


class Dragon(str, Enum):
    """Dragon honor tiles."""

    RED = "red"
    GREEN = "green"
    WHITE = "white"


# turn order is fixed: east -> south -> west -> north -> east
WINDS: tuple[Wind, ...] = (Wind.EAST, Wind.SOUTH, Wind.WEST, Wind.NORTH)
DRAGONS: tuple[Dragon, ...] = (Dragon.RED, Dragon.GREEN, Dragon.WHITE)
SUITS: tuple[Suit, ...] = (Suit.BAMBOO, Suit.CHARACTER, Suit.DOT)


def wind_to_number(wind: Wind) -> int:
    """Seat number 1-4 used to match flowers and seasons."""
    return WINDS.index(wind) + 1


def next_wind(wind: Wind, steps: int = 1) -> Wind:
    """Seat `steps` places after `wind` in turn order."""
    return WINDS[(WINDS.index(wind) + steps) % len(WINDS)]


def seats_after(seat: Wind) -> tuple[Wind, ...]:
    """The three other seats in turn order, starting with the next one."""
    return tuple(next_wind(seat, offset) for offset in range(1, len(WINDS)))


class MeldType(str, Enum):
    """Structural meld kinds."""

    CHOW = "chow"
    PUNG = "pung"
    KONG = "kong"
    PAIR = "pair"


class GamePhase(str, Enum):
    """Phase of a single hand."""

    WAITING = "waiting"
    DEALING = "dealing"
    PLAYING = "playing"
    FINISHED = "finished"


class TurnPhase(str, Enum):
    """Step within the current seat's turn."""

    DRAW = "draw"
    DISCARD = "discard"


class ClaimAction(str, Enum):
    """Responses available to a seat when a tile is discarded."""

    PASS = "pass"  # noqa: S105
    WIN = "win"
    PONG = "pong"
    KONG = "kong"
    CHOW = "chow"


class ClaimStage(str, Enum):
    """Ordered passes of claim resolution: win beats pong/kong beats chow."""

    WIN = "win"
    PONG = "pong"
    CHOW = "chow"


CLAIM_STAGE_ORDER: tuple[ClaimStage, ...] = (ClaimStage.WIN, ClaimStage.PONG, ClaimStage.CHOW)


class ClaimKind(str, Enum):
    """What opened the claim window."""

    DISCARD = "discard"
    ROBBING_KONG = "robbing_kong"  # another seat promoted a pung to a kong


class ClaimOutcome(str, Enum):
    """Result of running claim resolution over a discard."""

    NONE = "none"
    WON = "won"
    CLAIMED = "claimed"
    OFFERED = "offered"


class AIDifficulty(str, Enum):
    """AI tiers for non-human seats."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ClaimPolicy(str, Enum):
    """How AI seats accept pong/kong/chow offers during claim resolution."""

    RANDOM = "random"  # coin flip with GameSettings.ai_claim_probability
    STRATEGIC = "strategic"  # delegate to the seat's AI tier


class DeadWallPolicy(str, Enum):
    """What a kong does when the dead wall has no replacement tile left."""

    ALLOW_WITHOUT_REPLACEMENT = "allow_without_replacement"
    DISALLOW = "disallow"


class HandEndType(str, Enum):
    """How a hand finished."""

    SELF_DRAW = "self_draw"
    DISCARD_WIN = "discard_win"
    ROBBING_KONG = "robbing_kong"
    EXHAUSTIVE_DRAW = "exhaustive_draw"


class WinningShape(str, Enum):
    """Shape a complete hand decomposes into."""

    STANDARD = "standard"  # four sets and a pair
    SEVEN_PAIRS = "seven_pairs"
    THIRTEEN_ORPHANS = "thirteen_orphans"
