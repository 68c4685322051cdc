from hk_mahjong.logic.enums import MeldType, WinningShape
from hk_mahjong.logic.hand_analysis import (
    can_form_complete_hand,
    count_tile_types,
    decompose_hand,
    find_possible_melds,
    group_tiles,
    is_seven_pairs,
    is_standard_winning_hand,
    is_thirteen_orphans,
)
from hk_mahjong.logic.melds import make_meld
from hk_mahjong.tests.unit.helpers import flower, tiles


class TestGrouping:
    def test_count_tile_types(self):
        counts = count_tile_types(tiles(dot="1123"))
        assert counts["dot-1"] == 2
        assert counts["dot-3"] == 1

    def test_group_tiles_keys_by_id(self):
        groups = group_tiles(tiles(bamboo="55", winds="E"))
        assert set(groups) == {"bamboo-5", "wind-east"}
        assert len(groups["bamboo-5"]) == 2


class TestFindPossibleMelds:
    def test_finds_pairs_pungs_kongs_and_chows(self):
        melds = find_possible_melds(tiles(dot="1111234"))
        kinds = sorted(m.type.value for m in melds)
        assert kinds.count("pair") == 1
        assert kinds.count("pung") == 1
        assert kinds.count("kong") == 1
        assert kinds.count("chow") == 2  # 123 and 234

    def test_ignores_flowers(self):
        assert find_possible_melds([flower(1), flower(1)]) == []

    def test_no_chow_across_suits(self):
        melds = find_possible_melds([*tiles(dot="12"), *tiles(bamboo="3")])
        assert all(m.type != MeldType.CHOW for m in melds)


class TestCanFormCompleteHand:
    def test_four_pungs_and_pair(self):
        assert can_form_complete_hand(tiles(dot="111", bamboo="222", character="333", winds="EEE", dragons="RR"), 4)

    def test_chows_and_pair(self):
        assert can_form_complete_hand(tiles(dot="123456789", bamboo="234", winds="SS"), 4)

    def test_pair_on_smallest_tile(self):
        # reading must take 11 as the pair first, then 123 456 789 ...
        assert can_form_complete_hand(tiles(bamboo="11123456789", dot="555"), 4)

    def test_incomplete(self):
        assert not can_form_complete_hand(tiles(dot="123456789", bamboo="235", winds="SS"), 4)

    def test_wrong_tile_count(self):
        assert not can_form_complete_hand(tiles(dot="111"), 4)

    def test_fewer_melds_needed_after_declaring(self):
        assert can_form_complete_hand(tiles(dot="123", winds="NN"), 1)

    def test_standard_winning_hand_counts_declared(self):
        declared = [
            make_meld(MeldType.PUNG, tiles(bamboo="999")),
            make_meld(MeldType.KONG, tiles(dragons="GGGG"), is_concealed=True),
        ]
        assert is_standard_winning_hand(tiles(dot="123789", winds="EE"), declared)


class TestSpecialShapes:
    def test_seven_pairs(self):
        assert is_seven_pairs(tiles(dot="1155", bamboo="2288", winds="EENN", dragons="RR"))

    def test_four_of_a_kind_is_not_two_pairs(self):
        assert not is_seven_pairs(tiles(dot="1111", bamboo="2288", winds="EENN", dragons="RR"))

    def test_thirteen_orphans(self):
        assert is_thirteen_orphans(tiles(bamboo="19", character="19", dot="199", winds="ESWN", dragons="RGW"))

    def test_thirteen_orphans_needs_every_type(self):
        assert not is_thirteen_orphans(tiles(bamboo="19", character="19", dot="199", winds="ESWW", dragons="RGW"))


class TestDecomposeHand:
    def test_multiple_readings(self):
        # 111222333 reads as three pungs or three chows
        decompositions = decompose_hand(tiles(dot="111222333", bamboo="789", winds="EE"), 4)
        assert len(decompositions) == 2
        kinds = {tuple(sorted(m.type.value for m in d.melds)) for d in decompositions}
        assert ("chow", "chow", "chow", "chow", "pair") in kinds
        assert ("chow", "pair", "pung", "pung", "pung") in kinds

    def test_every_reading_has_one_pair(self):
        for decomposition in decompose_hand(tiles(dot="111222333", bamboo="789", winds="EE"), 4):
            assert decomposition.pair is not None

    def test_seven_pairs_reported(self):
        decompositions = decompose_hand(tiles(dot="1155", bamboo="2288", winds="EENN", dragons="RR"), 4)
        assert [d.shape for d in decompositions] == [WinningShape.SEVEN_PAIRS]
        assert len(decompositions[0].melds) == 7

    def test_seven_pairs_not_with_declared_melds(self):
        assert decompose_hand(tiles(dot="1155", bamboo="22", winds="EE", dragons="RR"), 3) == []

    def test_thirteen_orphans_reported(self):
        decompositions = decompose_hand(
            tiles(bamboo="19", character="19", dot="199", winds="ESWN", dragons="RGW"),
            4,
        )
        assert [d.shape for d in decompositions] == [WinningShape.THIRTEEN_ORPHANS]

    def test_melds_use_the_physical_tiles(self):
        hand = tiles(dot="123456789", bamboo="234", winds="SS")
        (decomposition,) = decompose_hand(hand, 4)
        used = sorted(t.instance_id for m in decomposition.melds for t in m.tiles)
        assert used == sorted(t.instance_id for t in hand)

    def test_incomplete_is_empty(self):
        assert decompose_hand(tiles(dot="123456789", bamboo="235", winds="SS"), 4) == []
