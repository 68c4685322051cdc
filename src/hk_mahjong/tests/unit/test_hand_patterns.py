from hk_mahjong.logic.enums import MeldType, Suit
from hk_mahjong.logic.hand_patterns import (
    analyze_hand_shape,
    get_dominant_suit,
    is_all_chows,
    is_all_honors,
    is_all_pungs,
    is_all_terminals,
    is_mixed_flush,
    is_mixed_terminals,
    is_pure_flush,
    suit_distribution,
)
from hk_mahjong.logic.melds import make_meld
from hk_mahjong.tests.unit.helpers import flower, tiles


class TestFlushes:
    def test_pure_flush(self):
        assert is_pure_flush(tiles(dot="11123455678999"))
        assert not is_mixed_flush(tiles(dot="11123455678999"))

    def test_mixed_flush(self):
        hand = tiles(bamboo="123456789", winds="EEE", dragons="RR")
        assert is_mixed_flush(hand)
        assert not is_pure_flush(hand)

    def test_two_suits_is_neither(self):
        hand = tiles(bamboo="123", dot="456")
        assert not is_pure_flush(hand)
        assert not is_mixed_flush(hand)

    def test_flowers_do_not_break_a_flush(self):
        assert is_pure_flush([*tiles(dot="123"), flower(2)])


class TestTerminalsAndHonors:
    def test_all_honors(self):
        assert is_all_honors(tiles(winds="EEESSS", dragons="RRRGGGWW"))
        assert not is_all_honors(tiles(winds="EEE", dot="1"))

    def test_all_terminals(self):
        assert is_all_terminals(tiles(bamboo="111999", dot="111999", character="11"))
        assert not is_all_terminals(tiles(bamboo="111", winds="EE"))

    def test_mixed_terminals(self):
        assert is_mixed_terminals(tiles(bamboo="111999", winds="EEE", dragons="RR"))
        assert not is_mixed_terminals(tiles(bamboo="111999"))

    def test_empty_hand_is_not_all_honors(self):
        assert not is_all_honors([])


class TestMeldPatterns:
    def test_all_pungs_counts_kongs(self):
        melds = [
            make_meld(MeldType.PUNG, tiles(dot="111")),
            make_meld(MeldType.KONG, tiles(dot="2222")),
            make_meld(MeldType.PUNG, tiles(winds="EEE")),
            make_meld(MeldType.PUNG, tiles(bamboo="555")),
            make_meld(MeldType.PAIR, tiles(dragons="RR")),
        ]
        assert is_all_pungs(melds)
        assert not is_all_chows(melds)

    def test_all_chows(self):
        melds = [
            make_meld(MeldType.CHOW, tiles(dot="123")),
            make_meld(MeldType.CHOW, tiles(dot="456")),
            make_meld(MeldType.CHOW, tiles(bamboo="789")),
            make_meld(MeldType.CHOW, tiles(character="234")),
            make_meld(MeldType.PAIR, tiles(dot="99")),
        ]
        assert is_all_chows(melds)

    def test_three_sets_is_not_all_pungs(self):
        melds = [make_meld(MeldType.PUNG, tiles(dot="111")) for _ in range(3)]
        assert not is_all_pungs(melds)


class TestSuitAnalysis:
    def test_suit_distribution(self):
        distribution = suit_distribution(tiles(bamboo="123", dot="45", winds="E"))
        assert distribution == {Suit.BAMBOO: 3, Suit.CHARACTER: 0, Suit.DOT: 2}

    def test_dominant_suit_needs_six(self):
        assert get_dominant_suit(tiles(bamboo="12345")) is None
        assert get_dominant_suit(tiles(bamboo="123456", dot="1")) == Suit.BAMBOO

    def test_dominant_suit_tie_goes_to_first_suit(self):
        assert get_dominant_suit(tiles(bamboo="123456", dot="123456")) == Suit.BAMBOO

    def test_analyze_hand_shape(self):
        melds = [make_meld(MeldType.PUNG, tiles(winds="EEE")), make_meld(MeldType.CHOW, tiles(dot="123"))]
        shape = analyze_hand_shape(tiles(dot="19", dragons="R"), melds)
        assert shape.honor_count == 1
        assert shape.terminal_count == 2
        assert shape.pung_count == 1
        assert shape.chow_count == 1
        assert shape.pair_count == 0
