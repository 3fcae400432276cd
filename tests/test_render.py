import numpy as np
import pytest

from solong.image import TRANSPARENT, Image, new_image
from solong.mapfile import build_cells, parse_map
from solong.player import calculate_distance
from solong.render import (
    apply_fog,
    build_ground,
    build_minimap,
    build_plan,
    copy_fog_plan,
    copy_ground_plan,
    copy_plan_to_game,
    lerp_color,
)
from solong.state import Eye, GameState, Slime

SIZE = 8
MAP = "11111\n1PCE1\n10001\n11111\n"
BLACK = (0, 0, 0, 0)
MINIMAP_COLOR = 0x00ABCDEF


def _color(c, v, f):
    return ((c + 1) << 16) | ((v + 1) << 8) | (f + 1)


def _tileset():
    return [
        [
            [Image(np.full((SIZE, SIZE), _color(c, v, f), dtype=np.uint32)) for f in range(4)]
            for v in range(7)
        ]
        for c in range(9)
    ]


def _map_state():
    parsed = parse_map(MAP)
    cells = build_cells(parsed)
    state = GameState()
    state.head = cells[0]
    state.info.columns = parsed.columns
    state.info.lines = parsed.lines
    state.tiles = _tileset()
    state.ground = new_image(parsed.columns * SIZE, parsed.lines * SIZE)
    return state


def _at(state, x, y):
    return state.ground.get_pixel(x * SIZE, y * SIZE)


def test_lerp_zero_factor_is_identity():
    assert lerp_color(0x12345678, BLACK, 0.0) == 0x12345678


def test_lerp_full_factor_gives_fog_color():
    assert lerp_color(0x12345678, (10, 20, 30, 40), 1.0) == (10 << 24) | (20 << 16) | (30 << 8) | 40


def test_lerp_clamps_alpha():
    assert lerp_color(0xFF000000, BLACK, -0.3) >> 24 == 255


def test_fog_leaves_near_pixels():
    assert apply_fog(0xFF123456, 50.0, 300.0, BLACK) == 0xFF123456


def test_fog_darkens_far_pixels():
    color = 0x00C8A064
    result = apply_fog(color, 250.0, 300.0, BLACK)
    assert result >> 24 == 0
    for shift in (16, 8, 0):
        assert (result >> shift) & 0xFF <= ((color >> shift) & 0xFF) >> 1


def test_fog_saturates_beyond_vision():
    color = 0x00ABCDEF
    assert apply_fog(color, 500.0, 300.0, BLACK) == apply_fog(color, 5000.0, 300.0, BLACK)


def test_fog_monotone_with_distance():
    reds = [(apply_fog(0x00FF0000, d, 300.0, BLACK) >> 16) & 0xFF for d in range(100, 320, 20)]
    assert reds == sorted(reds, reverse=True)


def test_copy_fog_plan_matches_scalar():
    state = GameState()
    state.plan = Image(np.full((400, 400), 0x00808080, dtype=np.uint32))
    state.plan.pixels[1, 1] = TRANSPARENT
    state.vision = 300.0
    copy_fog_plan(state)
    distance = calculate_distance(state.player, 399, 399, 32)
    assert state.plan.get_pixel(0, 0) == 0x00808080
    assert state.plan.get_pixel(1, 1) == TRANSPARENT
    assert state.plan.get_pixel(399, 399) == apply_fog(0x00808080, distance, 300.0, BLACK)


def test_copy_ground_plan_copies_opaque_pixels():
    state = GameState()
    state.ground = Image(np.full((4, 4), 0x00112233, dtype=np.uint32))
    state.ground.pixels[0, 0] = TRANSPARENT
    state.plan = Image(np.full((4, 4), 7, dtype=np.uint32))
    copy_ground_plan(state)
    assert state.plan.get_pixel(3, 3) == 0x00112233
    assert state.plan.get_pixel(0, 0) == 7


def test_copy_plan_to_game_centres_view():
    state = GameState(window_width=10, window_height=10)
    state.view.w = state.view.h = 10
    state.plan = Image(np.arange(100, dtype=np.uint32).reshape(10, 10))
    state.game = new_image(10, 10)
    copy_plan_to_game(state)
    assert np.array_equal(state.game.pixels, state.plan.pixels)


def _minimap_state():
    state = GameState()
    state.tiles = _tileset()
    state.tiles[8][1][0] = Image(np.full((90, 100), MINIMAP_COLOR, dtype=np.uint32))
    state.game = new_image(200, 100)
    state.player.x, state.player.y = 100, 50
    return state


def _count(state, color):
    return int(np.count_nonzero(state.game.pixels == color))


def test_minimap_draws_markers():
    state = _minimap_state()
    state.eyes = [[Eye(x=150, y=60)]]
    state.slimes = [Slime(x=20, y=20)]
    build_minimap(state)
    assert state.game.get_pixel(0, 0) == MINIMAP_COLOR
    assert _count(state, _color(8, 2, 0)) > 0
    assert _count(state, _color(8, 3, 0)) > 0
    assert _count(state, _color(8, 5, 0)) > 0
    assert _count(state, _color(8, 4, 0)) == 0


def test_minimap_stops_at_dead_eye_and_free_slime():
    state = _minimap_state()
    state.eyes = [[Eye(x=150, y=60, is_dead=True), Eye(x=20, y=20)]]
    state.slimes = [Slime(is_free=True), Slime(x=20, y=20)]
    build_minimap(state)
    # The living eye and the caged slime would both land at (5, 10).
    assert state.game.get_pixel(5, 10) == MINIMAP_COLOR
    assert state.game.get_pixel(27, 25) == _color(8, 5, 0)
    assert _count(state, _color(8, 2, 0)) == 0
    assert _count(state, _color(8, 3, 0)) == 0


def test_minimap_shows_open_exit():
    state = _minimap_state()
    state.info.exit_open = True
    build_minimap(state)
    assert state.game.get_pixel(0, 0) == _color(8, 4, 0)
    assert _count(state, _color(8, 4, 0)) == SIZE * SIZE


def test_build_ground_walls_and_corners():
    state = _map_state()
    build_ground(state)
    assert _at(state, 0, 0) == _color(1, 4, 0)
    assert _at(state, 4, 0) == _color(1, 4, 1)
    assert _at(state, 0, 3) == _color(1, 4, 2)
    assert _at(state, 4, 3) == _color(1, 4, 3)
    assert _at(state, 2, 3) == _color(1, 1, 0)
    assert _at(state, 0, 1) == _color(1, 2, 0)
    assert _at(state, 4, 1) == _color(1, 3, 0)


def test_build_ground_top_wall_cycles():
    state = _map_state()
    build_ground(state)
    assert [_at(state, x, 0) for x in (1, 2, 3)] == [
        _color(1, 0, 1),
        _color(1, 0, 2),
        _color(1, 0, 0),
    ]


def test_build_ground_floor_and_closed_exit():
    state = _map_state()
    build_ground(state)
    assert _at(state, 1, 1) == _color(0, 0, 0)
    assert _at(state, 2, 1) == _color(0, 0, 1)
    assert _at(state, 3, 1) == _color(0, 0, 1)


def test_build_ground_open_exit():
    state = _map_state()
    state.info.exit_open = True
    build_ground(state)
    assert _at(state, 3, 1) == _color(3, 0, 0)


def test_build_plan_records_open_exit():
    state = _map_state()
    state.info.exit_open = True
    build_plan(state)
    assert (state.info.exit_x, state.info.exit_y) == (3, 1)
    assert _at(state, 3, 1) == _color(3, 0, 0)


def test_build_plan_ignores_closed_exit():
    state = _map_state()
    build_plan(state)
    assert not state.ground.pixels.any()
    assert (state.info.exit_x, state.info.exit_y) == (0, 0)