import pytest
from pydantic import ValidationError

from hk_mahjong.logic.enums import MeldType, Wind
from hk_mahjong.logic.exceptions import InvalidMeldError
from hk_mahjong.logic.melds import (
    Meld,
    count_declared_sets,
    is_valid_meld_shape,
    make_meld,
    meld_display_name,
    upgrade_pung_to_kong,
)
from hk_mahjong.tests.unit.helpers import tile, tiles


class TestMeldShape:
    def test_pung_kong_pair(self):
        assert is_valid_meld_shape(MeldType.PUNG, tiles(dot="555"))
        assert is_valid_meld_shape(MeldType.KONG, tiles(winds="EEEE"))
        assert is_valid_meld_shape(MeldType.PAIR, tiles(dragons="RR"))

    def test_chow_needs_consecutive_same_suit(self):
        assert is_valid_meld_shape(MeldType.CHOW, tiles(bamboo="342"))
        assert not is_valid_meld_shape(MeldType.CHOW, tiles(bamboo="124"))
        assert not is_valid_meld_shape(MeldType.CHOW, [*tiles(bamboo="12"), tile(dot="3")])

    def test_honors_never_chow(self):
        assert not is_valid_meld_shape(MeldType.CHOW, tiles(winds="ESW"))

    def test_wrong_size(self):
        assert not is_valid_meld_shape(MeldType.PUNG, tiles(dot="55"))

    def test_mixed_types_not_a_pung(self):
        assert not is_valid_meld_shape(MeldType.PUNG, tiles(dot="556"))


class TestMakeMeld:
    def test_chow_base_is_lowest(self):
        meld = make_meld(MeldType.CHOW, tiles(character="978"))
        assert meld.base_tile.value == 7
        assert [t.value for t in meld.tiles] == [7, 8, 9]

    def test_invalid_raises(self):
        with pytest.raises(InvalidMeldError):
            make_meld(MeldType.PUNG, tiles(dot="123"))

    def test_model_validator_rejects_bad_shape(self):
        bad = tiles(dot="123")
        with pytest.raises(ValidationError):
            Meld(type=MeldType.PUNG, tiles=tuple(bad), is_concealed=False, base_tile=bad[0])

    def test_claimed_from_is_kept(self):
        meld = make_meld(MeldType.PUNG, tiles(dot="999"), claimed_from=Wind.NORTH)
        assert meld.claimed_from == Wind.NORTH
        assert not meld.is_concealed


class TestMeldHelpers:
    def test_count_declared_sets_ignores_pairs(self):
        melds = [
            make_meld(MeldType.PUNG, tiles(dot="111")),
            make_meld(MeldType.KONG, tiles(bamboo="2222"), is_concealed=True),
            make_meld(MeldType.PAIR, tiles(dot="55")),
        ]
        assert count_declared_sets(melds) == 2

    def test_display_name(self):
        assert meld_display_name(make_meld(MeldType.PUNG, tiles(dot="111"))) == "Melded Pung"
        assert meld_display_name(make_meld(MeldType.KONG, tiles(dot="1111"), is_concealed=True)) == "Concealed Kong"

    def test_upgrade_pung_to_kong(self):
        pung = make_meld(MeldType.PUNG, tiles(winds="SSS"), claimed_from=Wind.WEST)
        kong = upgrade_pung_to_kong(pung, tile(winds="S"))
        assert kong.type == MeldType.KONG
        assert len(kong.tiles) == 4
        assert kong.claimed_from == Wind.WEST

    def test_upgrade_with_wrong_tile_raises(self):
        pung = make_meld(MeldType.PUNG, tiles(winds="SSS"))
        with pytest.raises(InvalidMeldError):
            upgrade_pung_to_kong(pung, tile(winds="E"))

    def test_is_triplet_or_quad(self):
        assert make_meld(MeldType.KONG, tiles(dot="4444")).is_triplet_or_quad
        assert not make_meld(MeldType.CHOW, tiles(dot="456")).is_triplet_or_quad
