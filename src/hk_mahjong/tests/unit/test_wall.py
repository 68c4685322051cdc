import random

import pytest

from hk_mahjong.logic.enums import WINDS, Wind
from hk_mahjong.logic.tiles import create_tile_set, is_bonus
from hk_mahjong.logic.wall import (
    create_wall,
    create_wall_from_tiles,
    deal_initial_hands,
    dead_wall_remaining,
    draw_from_dead_wall,
    draw_non_bonus_tile,
    draw_tile,
    is_wall_exhausted,
    tiles_remaining,
)
from hk_mahjong.tests.unit.helpers import flower, tiles


class TestCreateWall:
    def test_reserves_dead_wall(self):
        wall = create_wall(random.Random(1))
        assert len(wall.dead_wall_tiles) == 14
        assert len(wall.live_tiles) == 130

    def test_custom_dead_wall_size(self):
        wall = create_wall(random.Random(1), include_flowers=False, dead_wall_size=16)
        assert len(wall.dead_wall_tiles) == 16
        assert len(wall.live_tiles) == 120

    def test_from_tiles_keeps_order(self):
        ordered = create_tile_set(include_flowers=False)
        wall = create_wall_from_tiles(ordered)
        assert wall.live_tiles[0] == ordered[0]
        assert wall.dead_wall_tiles[-1] == ordered[-1]

    def test_from_tiles_rejects_duplicate_instances(self):
        t = tiles(dot="1")[0]
        with pytest.raises(ValueError, match="unique"):
            create_wall_from_tiles([t, t], dead_wall_size=0)

    def test_from_tiles_rejects_short_list(self):
        with pytest.raises(ValueError, match="dead wall"):
            create_wall_from_tiles(tiles(dot="123"), dead_wall_size=14)


class TestDraw:
    def test_draw_from_front(self):
        ordered = tiles(dot="123")
        wall = create_wall_from_tiles(ordered, dead_wall_size=0)
        wall, drawn = draw_tile(wall)
        assert drawn == ordered[0]
        assert tiles_remaining(wall) == 2

    def test_draw_from_empty_wall(self):
        wall = create_wall_from_tiles([], dead_wall_size=0)
        new_wall, drawn = draw_tile(wall)
        assert drawn is None
        assert new_wall == wall
        assert is_wall_exhausted(wall)

    def test_dead_wall_draws_from_end_and_is_not_replenished(self):
        ordered = tiles(dot="123456")
        wall = create_wall_from_tiles(ordered, dead_wall_size=2)
        wall, drawn = draw_from_dead_wall(wall)
        assert drawn == ordered[-1]
        assert dead_wall_remaining(wall) == 1
        assert tiles_remaining(wall) == 4

    def test_dead_wall_empty_returns_none(self):
        wall = create_wall_from_tiles(tiles(dot="1"), dead_wall_size=0)
        _, drawn = draw_from_dead_wall(wall)
        assert drawn is None

    def test_draw_non_bonus_sets_flowers_aside(self):
        f1, f2 = flower(1), flower(2)
        t = tiles(dot="5")[0]
        wall = create_wall_from_tiles([f1, f2, t], dead_wall_size=0)
        wall, drawn, bonus = draw_non_bonus_tile(wall)
        assert drawn == t
        assert bonus == (f1, f2)
        assert is_wall_exhausted(wall)

    def test_draw_non_bonus_runs_out(self):
        wall = create_wall_from_tiles([flower(3)], dead_wall_size=0)
        _, drawn, bonus = draw_non_bonus_tile(wall)
        assert drawn is None
        assert len(bonus) == 1


class TestDeal:
    def test_dealer_gets_fourteen(self):
        wall = create_wall(random.Random(3))
        result = deal_initial_hands(wall, Wind.SOUTH)
        assert len(result.hands[Wind.SOUTH]) == 14
        for seat in WINDS:
            if seat != Wind.SOUTH:
                assert len(result.hands[seat]) == 13

    def test_no_bonus_tiles_in_hands(self):
        result = deal_initial_hands(create_wall(random.Random(5)), Wind.EAST)
        for seat in WINDS:
            assert not any(is_bonus(t) for t in result.hands[seat])
            assert all(is_bonus(t) for t in result.flowers[seat])

    def test_dead_wall_untouched(self):
        wall = create_wall(random.Random(9))
        result = deal_initial_hands(wall, Wind.EAST)
        assert result.wall.dead_wall_tiles == wall.dead_wall_tiles

    def test_every_tile_accounted_for(self):
        wall = create_wall(random.Random(11))
        result = deal_initial_hands(wall, Wind.EAST)
        dealt = [t for seat in WINDS for t in (*result.hands[seat], *result.flowers[seat])]
        remaining = [*result.wall.live_tiles, *result.wall.dead_wall_tiles]
        assert sorted(t.instance_id for t in dealt + remaining) == sorted(
            t.instance_id for t in (*wall.live_tiles, *wall.dead_wall_tiles)
        )

    def test_short_wall_raises(self):
        wall = create_wall_from_tiles(tiles(dot="123"), dead_wall_size=0)
        with pytest.raises(ValueError, match="need at least"):
            deal_initial_hands(wall, Wind.EAST)
