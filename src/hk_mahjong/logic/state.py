"""
Game state models.

All models are frozen; transitions build new instances with model_copy.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from hk_mahjong.logic.enums import WINDS, ClaimKind, ClaimStage, GamePhase, TurnPhase, Wind
from hk_mahjong.logic.melds import Meld
from hk_mahjong.logic.scoring import WinResult
from hk_mahjong.logic.tiles import Tile
from hk_mahjong.logic.wall import Wall

NUM_PLAYERS = 4


class Player(BaseModel):
    """
    One seat at the table.

    `hand` holds concealed tiles only. Outside its own turn a seat holds
    13 - 3 * declared sets tiles; one more while it must discard.
    """

    model_config = ConfigDict(frozen=True)

    seat: Wind
    hand: tuple[Tile, ...] = ()
    melds: tuple[Meld, ...] = ()
    flowers: tuple[Tile, ...] = ()
    discards: tuple[Tile, ...] = ()
    score: int = 500
    is_human: bool = False
    is_replacement_draw: bool = False  # last tile came from the dead wall


class ClaimOffer(BaseModel):
    """
    A pending decision for the human seat on a discard (or an added kong).

    Offers are stage-specific: a win offer carries only can_win, a pong
    offer only can_pong/can_kong, a chow offer only can_chow.
    """

    model_config = ConfigDict(frozen=True)

    seat: Wind
    tile: Tile
    from_player: Wind
    stage: ClaimStage
    can_win: bool = False
    can_pong: bool = False
    can_kong: bool = False
    can_chow: bool = False
    chow_sets: tuple[tuple[Tile, Tile], ...] = ()
    sequence: int


class ClaimWindow(BaseModel):
    """Claim resolution in progress over one tile."""

    model_config = ConfigDict(frozen=True)

    tile: Tile
    from_seat: Wind
    kind: ClaimKind = ClaimKind.DISCARD
    sequence: int
    declined: tuple[tuple[Wind, ClaimStage], ...] = ()
    kong_meld: Meld | None = None  # the pung being promoted, for a robbing-kong window

    def has_declined(self, seat: Wind, stage: ClaimStage) -> bool:
        return (seat, stage) in self.declined


class GameState(BaseModel):
    """
    State of one hand plus the scores carried between hands.

    While `pending_claim` is set play is suspended on claim resolution;
    `claim_offer` is set when that resolution is waiting on the human seat.
    """

    model_config = ConfigDict(frozen=True)

    phase: GamePhase = GamePhase.WAITING
    round_wind: Wind = Wind.EAST
    dealer_seat: Wind = Wind.EAST
    players: tuple[Player, ...] = tuple(Player(seat=seat) for seat in WINDS)
    current_turn: Wind = Wind.EAST
    turn_phase: TurnPhase = TurnPhase.DRAW
    wall: Wall = Wall()
    last_discard: Tile | None = None
    last_discard_by: Wind | None = None
    last_drawn: Tile | None = None
    round_number: int = 1  # dealer position within the current round wind (1-4)
    hand_number: int = 1
    winner: Wind | None = None
    winning_tile: Tile | None = None
    is_self_draw: bool = False
    win_result: WinResult | None = None
    discard_sequence: int = 0
    pending_claim: ClaimWindow | None = None
    claim_offer: ClaimOffer | None = None
    is_game_over: bool = False

    @property
    def dead_wall(self) -> tuple[Tile, ...]:
        return self.wall.dead_wall_tiles

    @property
    def live_wall(self) -> tuple[Tile, ...]:
        return self.wall.live_tiles
