"""
Pydantic models for decisions that cross the coordinator boundary.

A ClaimDecision is what the human seat (or a driver standing in for it)
sends back in response to a claim offer.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from hk_mahjong.logic.enums import ClaimAction
from hk_mahjong.logic.tiles import Tile


class _Decision(BaseModel):
    model_config = ConfigDict(frozen=True)

    # discard_sequence of the offer being answered; None answers whatever is pending
    sequence: int | None = None


class PassDecision(_Decision):
    action: Literal[ClaimAction.PASS] = ClaimAction.PASS


class WinDecision(_Decision):
    action: Literal[ClaimAction.WIN] = ClaimAction.WIN


class PongDecision(_Decision):
    action: Literal[ClaimAction.PONG] = ClaimAction.PONG


class KongDecision(_Decision):
    action: Literal[ClaimAction.KONG] = ClaimAction.KONG


class ChowDecision(_Decision):
    """Chow with the two named hand tiles."""

    action: Literal[ClaimAction.CHOW] = ClaimAction.CHOW
    tiles: tuple[Tile, Tile]


ClaimDecision = Annotated[
    PassDecision | WinDecision | PongDecision | KongDecision | ChowDecision,
    Field(discriminator="action"),
]
