import pytest

from hk_mahjong.logic.rng import SEED_BYTES, create_ai_rng, create_hand_rng, generate_seed


class TestSeeds:
    def test_generate_seed_is_hex(self):
        seed = generate_seed()
        assert len(seed) == SEED_BYTES * 2
        int(seed, 16)

    def test_seeds_differ(self):
        assert generate_seed() != generate_seed()


class TestDerivedStreams:
    def test_same_seed_same_hand_repeats(self):
        first = [create_hand_rng("seed", 3).random() for _ in range(3)]
        second = [create_hand_rng("seed", 3).random() for _ in range(3)]
        assert first == second

    def test_hands_are_independent(self):
        assert create_hand_rng("seed", 1).random() != create_hand_rng("seed", 2).random()

    def test_ai_stream_is_separate_from_wall(self):
        assert create_ai_rng("seed", 1).random() != create_hand_rng("seed", 1).random()

    def test_unseeded_ai_rng(self):
        assert 0.0 <= create_ai_rng(None, 1).random() < 1.0

    @pytest.mark.parametrize("hand_number", [-1, 2**32])
    def test_hand_number_out_of_range(self, hand_number):
        with pytest.raises(ValueError, match="index must be in"):
            create_hand_rng("seed", hand_number)
