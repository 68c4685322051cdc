import random

import pytest
from mahjong.agari import Agari

from hk_mahjong.logic.enums import MeldType
from hk_mahjong.logic.melds import make_meld
from hk_mahjong.logic.shanten import (
    AGARI_STATE,
    MAX_SHANTEN,
    TENPAI_STATE,
    calculate_seven_pairs_shanten,
    calculate_shanten,
    calculate_standard_shanten,
    calculate_thirteen_orphans_shanten,
    shanten_from_counts,
)
from hk_mahjong.logic.tiles import NUM_TILE_TYPES, create_tile_set, hand_to_34_array, tile_from_type_index
from hk_mahjong.tests.unit.helpers import flower, to_library_34, tiles


def _random_complete_counts(rng: random.Random) -> list[int]:
    """Four random sets plus a pair, respecting four copies per type."""
    while True:
        counts = [0] * NUM_TILE_TYPES
        for _ in range(4):
            if rng.random() < 0.5:
                counts[rng.randrange(NUM_TILE_TYPES)] += 3
            else:
                suit_start = rng.choice((0, 9, 18))
                start = suit_start + rng.randrange(7)
                for offset in range(3):
                    counts[start + offset] += 1
        counts[rng.randrange(NUM_TILE_TYPES)] += 2
        if max(counts) <= 4:
            return counts


def _counts_to_tiles(counts: list[int]) -> list:
    return [
        tile_from_type_index(index, instance_id=f"oracle-{index}-{copy}")
        for index, count in enumerate(counts)
        for copy in range(count)
    ]


class TestStandardShanten:
    def test_four_pungs_and_pair_is_complete(self):
        hand = tiles(dot="111", bamboo="222", character="333", winds="EEE", dragons="RR")
        assert calculate_shanten(hand) == AGARI_STATE

    def test_one_tile_away_is_tenpai(self):
        hand = tiles(dot="123456789", bamboo="234", winds="S")
        assert calculate_shanten(hand) == TENPAI_STATE

    def test_pair_wait_tenpai(self):
        hand = tiles(dot="111", bamboo="222", character="333", winds="EE", dragons="RR")
        assert calculate_shanten(hand) == TENPAI_STATE

    def test_gap_partial_counts(self):
        # 13 and 57 are gap waits: two sets, two partials, one pair
        hand = tiles(dot="123456", bamboo="13", character="57", winds="EE", dragons="R")
        assert calculate_standard_shanten(hand_to_34_array(hand)) == 1

    def test_scattered_hand(self):
        hand = tiles(bamboo="147", character="258", dot="369", winds="ESWN")
        assert calculate_standard_shanten(hand_to_34_array(hand)) == MAX_SHANTEN

    def test_declared_sets_reduce_melds_needed(self):
        declared = [
            make_meld(MeldType.PUNG, tiles(bamboo="999")),
            make_meld(MeldType.CHOW, tiles(character="123")),
            make_meld(MeldType.KONG, tiles(dragons="GGGG"), is_concealed=True),
        ]
        assert calculate_shanten(tiles(dot="123", winds="NN"), declared) == AGARI_STATE
        assert calculate_shanten(tiles(dot="12", winds="NN"), declared) == TENPAI_STATE

    def test_bonus_tiles_are_ignored(self):
        hand = tiles(dot="123456789", bamboo="234", winds="S")
        assert calculate_shanten([*hand, flower(1)]) == calculate_shanten(hand)


class TestSevenPairs:
    def test_seven_pairs_is_complete(self):
        hand = tiles(dot="1155", bamboo="2288", winds="EENN", dragons="RR")
        assert calculate_shanten(hand) == AGARI_STATE

    def test_formula(self):
        hand = tiles(dot="1155", bamboo="2288", winds="EENN", dragons="R")
        assert calculate_seven_pairs_shanten(hand_to_34_array(hand)) == 1

    def test_only_thirteen_or_fourteen_tiles(self):
        assert calculate_seven_pairs_shanten(hand_to_34_array(tiles(dot="1155"))) == MAX_SHANTEN

    def test_declared_meld_rules_it_out(self):
        counts = hand_to_34_array(tiles(dot="1155", bamboo="2288", winds="EENN", dragons="RR"))
        assert shanten_from_counts(counts, declared_sets=1) != AGARI_STATE


class TestThirteenOrphans:
    def test_complete(self):
        hand = tiles(bamboo="19", character="19", dot="199", winds="ESWN", dragons="RGW")
        assert calculate_shanten(hand) == AGARI_STATE

    def test_thirteen_singles_is_tenpai(self):
        hand = tiles(bamboo="19", character="19", dot="19", winds="ESWN", dragons="RGW")
        assert calculate_thirteen_orphans_shanten(hand_to_34_array(hand)) == TENPAI_STATE
        assert calculate_shanten(hand) == TENPAI_STATE

    def test_rescues_a_scattered_hand(self):
        # six terminal/honor types held: 13 - 6 = 7, better than the standard 8
        hand = tiles(bamboo="147", character="258", dot="369", winds="ESWN")
        assert calculate_shanten(hand) == 7


class TestAgainstAgariOracle:
    @pytest.mark.parametrize("seed", range(40))
    def test_random_complete_hands(self, seed):
        counts = _random_complete_counts(random.Random(seed))
        hand = _counts_to_tiles(counts)
        assert Agari().is_agari(to_library_34(hand))
        assert calculate_shanten(hand) == AGARI_STATE

    @pytest.mark.parametrize("seed", range(40))
    def test_removing_a_tile_leaves_tenpai(self, seed):
        rng = random.Random(1000 + seed)
        hand = _counts_to_tiles(_random_complete_counts(rng))
        hand.pop(rng.randrange(len(hand)))
        assert calculate_shanten(hand) == TENPAI_STATE

    @pytest.mark.parametrize("seed", range(60))
    def test_random_fourteen_tile_hands_agree(self, seed):
        hand = random.Random(seed).sample(create_tile_set(include_flowers=False), 14)
        assert (calculate_shanten(hand) == AGARI_STATE) == Agari().is_agari(to_library_34(hand))

    def test_seven_pairs_agree(self):
        hand = tiles(dot="1155", bamboo="2288", winds="EENN", dragons="RR")
        assert Agari().is_agari(to_library_34(hand))

    def test_thirteen_orphans_agree(self):
        hand = tiles(bamboo="19", character="19", dot="199", winds="ESWN", dragons="RGW")
        assert Agari().is_agari(to_library_34(hand))
