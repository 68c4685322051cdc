from hk_mahjong.logic.enums import MeldType, Wind
from hk_mahjong.logic.melds import make_meld
from hk_mahjong.logic.rules import (
    can_chow,
    can_kong,
    can_pong,
    can_win,
    find_added_kongs,
    find_concealed_kongs,
    is_complete_hand,
)
from hk_mahjong.tests.unit.helpers import flower, tile, tiles


class TestPongAndKong:
    def test_pong_needs_two_matching(self):
        assert can_pong(tiles(dot="55", bamboo="5"), tile(dot="5"))
        assert not can_pong(tiles(dot="5", bamboo="55"), tile(dot="5"))

    def test_kong_needs_three_matching(self):
        assert can_kong(tiles(winds="EEE"), tile(winds="E"))
        assert not can_kong(tiles(winds="EE"), tile(winds="E"))

    def test_honors_pong(self):
        assert can_pong(tiles(dragons="RR"), tile(dragons="R"))


class TestChow:
    def test_all_three_positions_in_order(self):
        hand = tiles(dot="3467")
        options = can_chow(hand, tile(dot="5"))
        values = [(a.value, b.value) for a, b in options]
        assert values == [(3, 4), (4, 6), (6, 7)]

    def test_edge_tile(self):
        options = can_chow(tiles(dot="23", bamboo="23"), tile(dot="1"))
        assert len(options) == 1
        assert all(t.id == "dot-2" or t.id == "dot-3" for t in options[0])

    def test_other_suit_does_not_help(self):
        assert can_chow(tiles(bamboo="46"), tile(dot="5")) == []

    def test_honors_never_chow(self):
        assert can_chow(tiles(winds="ESW"), tile(winds="S")) == []


class TestWin:
    def test_can_win_completes_the_hand(self):
        hand = tiles(dot="123456789", bamboo="234", winds="S")
        assert can_win(hand, [], tile(winds="S"))
        assert not can_win(hand, [], tile(winds="E"))

    def test_bonus_tile_never_wins(self):
        hand = tiles(dot="123456789", bamboo="234", winds="S")
        assert not can_win(hand, [], flower(1))

    def test_complete_with_declared_melds(self):
        melds = [
            make_meld(MeldType.PUNG, tiles(dragons="RRR"), claimed_from=Wind.SOUTH),
            make_meld(MeldType.CHOW, tiles(bamboo="789"), claimed_from=Wind.NORTH),
        ]
        assert is_complete_hand(tiles(dot="123456", winds="WW"), melds)
        assert not is_complete_hand(tiles(dot="123457", winds="WW"), melds)

    def test_seven_pairs_and_thirteen_orphans_win(self):
        assert can_win(tiles(dot="1155", bamboo="2288", winds="EENN", dragons="R"), [], tile(dragons="R"))
        orphans = tiles(bamboo="19", character="19", dot="19", winds="ESWN", dragons="RGW")
        assert can_win(orphans, [], tile(winds="N"))


class TestKongDiscovery:
    def test_concealed_kongs(self):
        hand = tiles(dot="55551", winds="EEEE")
        kongs = find_concealed_kongs(hand)
        assert sorted(group[0].id for group in kongs) == ["dot-5", "wind-east"]
        assert all(len(group) == 4 for group in kongs)

    def test_no_concealed_kong_with_three(self):
        assert find_concealed_kongs(tiles(dot="555")) == []

    def test_added_kong_needs_exposed_pung(self):
        exposed = make_meld(MeldType.PUNG, tiles(dot="777"), claimed_from=Wind.WEST)
        concealed = make_meld(MeldType.PUNG, tiles(bamboo="333"), is_concealed=True)
        hand = tiles(dot="7", bamboo="3")
        options = find_added_kongs(hand, [exposed, concealed])
        assert len(options) == 1
        meld, fourth = options[0]
        assert meld == exposed
        assert fourth.id == "dot-7"
