"""
Meld model: chow, pung, kong and pair groupings.

A Meld validates its shape on construction. Exposed melds record the seat
the claimed tile came from; concealed melds (including the pair and chows
found when decomposing a hand) do not.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, model_validator

from hk_mahjong.logic.enums import MeldType, Wind
from hk_mahjong.logic.exceptions import InvalidMeldError
from hk_mahjong.logic.tiles import Tile, is_suited, sort_tiles

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_MELD_SIZES: dict[MeldType, int] = {
    MeldType.CHOW: 3,
    MeldType.PUNG: 3,
    MeldType.KONG: 4,
    MeldType.PAIR: 2,
}


def is_valid_meld_shape(meld_type: MeldType, tiles: Sequence[Tile]) -> bool:
    """Check the structural predicate for a meld type."""
    if len(tiles) != _MELD_SIZES[meld_type]:
        return False
    if meld_type == MeldType.CHOW:
        if not all(is_suited(t) for t in tiles):
            return False
        if len({t.suit for t in tiles}) != 1:
            return False
        values = sorted(t.value for t in tiles)  # type: ignore[type-var]
        return values[1] == values[0] + 1 and values[2] == values[0] + 2
    return len({t.id for t in tiles}) == 1


class Meld(BaseModel):
    """Immutable meld. `base_tile` is the lowest chow tile or the repeated tile."""

    model_config = ConfigDict(frozen=True)

    type: MeldType
    tiles: tuple[Tile, ...]
    is_concealed: bool
    base_tile: Tile
    claimed_from: Wind | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> Meld:
        if not is_valid_meld_shape(self.type, self.tiles):
            raise ValueError(f"tiles {list(self.tiles)} do not form a {self.type.value}")
        return self

    @property
    def is_triplet_or_quad(self) -> bool:
        return self.type in (MeldType.PUNG, MeldType.KONG)

    @property
    def is_set(self) -> bool:
        """Counts toward the four sets of a standard hand (everything but a pair)."""
        return self.type != MeldType.PAIR


def make_meld(
    meld_type: MeldType,
    tiles: Iterable[Tile],
    *,
    is_concealed: bool = False,
    claimed_from: Wind | None = None,
) -> Meld:
    """
    Build a meld, deriving the base tile and sorting the tiles.

    Raises InvalidMeldError when the tiles do not form the requested shape.
    """
    ordered = sort_tiles(tiles)
    if not is_valid_meld_shape(meld_type, ordered):
        raise InvalidMeldError(f"tiles {ordered} do not form a {meld_type.value}")
    return Meld(
        type=meld_type,
        tiles=tuple(ordered),
        is_concealed=is_concealed,
        base_tile=ordered[0],
        claimed_from=claimed_from,
    )


def count_declared_sets(melds: Iterable[Meld]) -> int:
    """Number of declared melds that count as completed sets."""
    return sum(1 for m in melds if m.is_set)


def meld_display_name(meld: Meld) -> str:
    prefix = "Concealed" if meld.is_concealed else "Melded"
    return f"{prefix} {meld.type.value.capitalize()}"


def upgrade_pung_to_kong(meld: Meld, tile: Tile) -> Meld:
    """Promote an exposed pung with its fourth tile (added kong)."""
    if meld.type != MeldType.PUNG or tile.id != meld.base_tile.id:
        raise InvalidMeldError(f"cannot add {tile!r} to {meld_display_name(meld)}")
    return make_meld(
        MeldType.KONG,
        (*meld.tiles, tile),
        is_concealed=meld.is_concealed,
        claimed_from=meld.claimed_from,
    )
