"""Tests for the World model."""

import json

from gravity_snake.parser import parse_level
from gravity_snake.snake import Direction
from gravity_snake.world import World

LEVEL = [
    "....P",
    "1SoB.",
    "#####",
]


def _world(rows=LEVEL, **kwargs) -> World:
    return World.from_level(parse_level(rows), **kwargs)


class TestWorldFromLevel:
    def test_entities_loaded(self):
        world = _world()
        assert world.cols == 5
        assert world.rows == 3
        assert world.snake.segments == [(1, 1), (0, 1)]
        assert world.apples.positions() == {(2, 1)}
        assert world.blocks.positions() == {(3, 1)}
        assert world.portal == (4, 0)

    def test_direction_memory(self):
        world = _world()
        assert world.direction is Direction.RIGHT
        assert world.last_direction is None

    def test_fallback_chain(self):
        world = _world(["....", "....", "####"])
        assert world.snake.segments == [(2, 1), (1, 1), (0, 1)]

    def test_fallback_chain_on_free_floor(self):
        world = _world(["#####", "#...#", "#####"])
        for cell in world.snake.segments:
            assert world.in_bounds(cell)
            assert not world.is_wall(cell)

    def test_initial_direction_from_chain(self):
        assert _world(["1S..", "####"]).direction is Direction.RIGHT
        assert _world(["S1..", "####"]).direction is Direction.LEFT
        assert _world([".1", ".S"]).direction is Direction.DOWN


class TestWorldQueries:
    def test_cell_kinds(self):
        world = _world()
        assert world.is_wall((0, 2))
        assert world.is_apple((2, 1))
        assert world.is_block((3, 1))
        assert not world.is_block((2, 1))

    def test_is_solid(self):
        world = _world()
        assert world.is_solid((0, 2))
        assert world.is_solid((2, 1))
        assert world.is_solid((3, 1))
        assert not world.is_solid((4, 1))
        assert not world.is_solid((9, 9))

    def test_chain_only_solid_on_request(self):
        world = _world()
        assert not world.is_solid((1, 1))
        assert world.is_solid((1, 1), include_chain=True)

    def test_portal_inactive_while_apples_remain(self):
        world = _world()
        assert not world.portal_active
        assert not world.is_win_position((4, 0))

    def test_portal_activates_when_apples_gone(self):
        world = _world()
        world.consume_apple((2, 1))
        assert world.portal_active
        assert world.is_win_position((4, 0))
        assert not world.is_win_position((3, 0))

    def test_no_portal_never_active(self):
        world = _world(["1S..", "####"])
        assert world.apples.count() == 0
        assert not world.portal_active


class TestWorldMutations:
    def test_consume_apple_notifies(self):
        seen = []
        world = _world(on_apples_change=seen.append)
        assert world.consume_apple((2, 1))
        assert not world.consume_apple((2, 1))
        assert seen == [0]

    def test_replace_chain(self):
        world = _world()
        world.replace_chain([(2, 1), (1, 1), (0, 1)])
        assert world.snake.head == (2, 1)
        assert len(world.snake) == 3


class TestWorldSerialization:
    def test_to_dict_is_json_serializable(self):
        world = _world()
        d = world.to_dict()
        json.dumps(d)
        assert d["portal"] == [4, 0]
        assert d["portal_active"] is False
        assert d["direction"] == "right"
        assert d["last_direction"] is None

    def test_to_text_round_trips_layout(self):
        world = _world()
        assert world.to_text() == [
            "....P",
            "=SoB.",
            "#####",
        ]
