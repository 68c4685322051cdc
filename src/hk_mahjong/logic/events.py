"""Domain event models.

Transition functions return these alongside the next state; the
coordinator delivers them to listeners after committing the state.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.enums import HandEndType, TurnPhase, Wind
from hk_mahjong.logic.melds import Meld
from hk_mahjong.logic.scoring import WinResult
from hk_mahjong.logic.state import ClaimOffer
from hk_mahjong.logic.tiles import Tile


class EventType(StrEnum):
    """Types of game events."""

    DEAL = "deal"
    DRAW = "draw"
    FLOWER = "flower"
    DISCARD = "discard"
    CLAIM_OFFER = "claim_offer"
    MELD = "meld"
    WIN = "win"
    EXHAUSTIVE_DRAW = "exhaustive_draw"
    TURN = "turn"


class GameEvent(BaseModel):
    """Base class for all domain game events."""

    model_config = ConfigDict(frozen=True)

    type: EventType


class DealEvent(GameEvent):
    """Initial hands were dealt."""

    type: Literal[EventType.DEAL] = EventType.DEAL
    dealer_seat: Wind
    hand_number: int
    hand_sizes: dict[Wind, int]


class DrawEvent(GameEvent):
    """A seat drew a tile. `tile` is None only for a kong with no replacement left."""

    type: Literal[EventType.DRAW] = EventType.DRAW
    seat: Wind
    tile: Tile | None
    from_dead_wall: bool = False


class FlowerEvent(GameEvent):
    """A flower or season was set aside and replaced."""

    type: Literal[EventType.FLOWER] = EventType.FLOWER
    seat: Wind
    tile: Tile


class DiscardEvent(GameEvent):
    type: Literal[EventType.DISCARD] = EventType.DISCARD
    seat: Wind
    tile: Tile
    sequence: int


class ClaimOfferEvent(GameEvent):
    """The human seat may respond to a discard; play is suspended until it does."""

    type: Literal[EventType.CLAIM_OFFER] = EventType.CLAIM_OFFER
    offer: ClaimOffer


class MeldEvent(GameEvent):
    """A seat exposed or declared a meld."""

    type: Literal[EventType.MELD] = EventType.MELD
    seat: Wind
    meld: Meld
    from_seat: Wind | None = None
    is_added_kong: bool = False


class WinEvent(GameEvent):
    type: Literal[EventType.WIN] = EventType.WIN
    winner: Wind
    winning_tile: Tile
    end_type: HandEndType
    from_seat: Wind | None = None
    result: WinResult | None = None


class ExhaustiveDrawEvent(GameEvent):
    """The live wall ran out with no winner."""

    type: Literal[EventType.EXHAUSTIVE_DRAW] = EventType.EXHAUSTIVE_DRAW
    hand_number: int


class TurnEvent(GameEvent):
    """Turn control moved to a seat."""

    type: Literal[EventType.TURN] = EventType.TURN
    seat: Wind
    turn_phase: TurnPhase
