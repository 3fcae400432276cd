import pytest

from solong.state import (
    KEY_E,
    KEY_W,
    TILE_SIZE,
    Cell,
    GameState,
    Movement,
    Player,
)


@pytest.mark.parametrize(
    "char, expected",
    [("1", True), ("F", True), ("0", False), ("P", False), ("E", False), ("C", False)],
)
def test_is_wall(char, expected):
    assert Cell(char, 0, 0).is_wall() is expected


def test_pixel_coordinates_follow_tile_size():
    cell = Cell("0", 3, 5)
    assert cell.x_pxl == 3 * TILE_SIZE
    assert cell.y_pxl == 5 * TILE_SIZE


def _chain(chars):
    cells = [Cell(c, x, 0) for x, c in enumerate(chars)]
    for left, right in zip(cells, cells[1:]):
        left.right = right
        right.left = left
    return cells


def test_cells_walks_right_links():
    cells = _chain("1P0E1")
    state = GameState(head=cells[0])
    assert list(state.cells()) == cells


def test_cells_stops_on_cycle():
    cells = _chain("10C")
    cells[-1].right = cells[0]
    state = GameState(head=cells[0])
    assert list(state.cells()) == cells


def test_cells_empty_without_map():
    assert list(GameState().cells()) == []


def test_movement_is_pressed():
    movement = Movement()
    movement.pressed.add(KEY_W)
    assert movement.is_pressed(KEY_W)
    assert not movement.is_pressed(KEY_E)


def test_player_animation_not_shared():
    first = Player()
    second = Player()
    first.animation[0] = 3
    assert second.animation == [0] * 9
    assert first.animation[0] == 3