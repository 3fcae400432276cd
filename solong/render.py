"""Composing the frame: ground, fog of war, the camera copy and the minimap."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from solong.image import TRANSPARENT, copy_to_game, copy_to_ground
from solong.state import TILE_SIZE, Cell, GameState

FOG_START = 100.0
FOG_MAX = 0.7
FOG_BIAS = 0.3
FOG_OFFSET = TILE_SIZE // 2
MINIMAP_MARGIN_X = 46
MINIMAP_MARGIN_Y = 40


def _lerp(colors: np.ndarray, fog_color: Sequence[int], factors: np.ndarray) -> np.ndarray:
    values = colors.astype(np.int64)
    one = np.float32(1.0)
    factors = factors.astype(np.float32)
    mixed = []
    for shift, fog in zip((24, 16, 8, 0), fog_color):
        channel = ((values >> shift) & 0xFF).astype(np.float32)
        blend = (one - factors) * channel + factors * np.float32(fog)
        mixed.append(np.trunc(blend).astype(np.int64))
    alpha, red, green, blue = mixed
    alpha = np.clip(alpha, 0, 255)
    packed = (alpha << 24) | (red << 16) | (green << 8) | blue
    return (packed & 0xFFFFFFFF).astype(np.uint32)


def _fog_factors(distances: np.ndarray, vision: float) -> np.ndarray:
    dist = distances.astype(np.float64)
    vision = float(np.float32(vision))
    with np.errstate(divide="ignore", invalid="ignore"):
        ramp = (dist - FOG_START) / (vision - FOG_START) - FOG_BIAS
    return np.where(dist >= vision, FOG_MAX, ramp).astype(np.float32)


def _fog_pixels(
    colors: np.ndarray, distances: np.ndarray, vision: float, fog_color: Sequence[int]
) -> np.ndarray:
    colors = colors.astype(np.uint32)
    distances = distances.astype(np.float32)
    halved = (colors >> 1) & np.uint32(0x7F7F7F)
    fogged = _lerp(halved, fog_color, _fog_factors(distances, vision))
    return np.where(distances >= FOG_START, fogged, colors).astype(np.uint32)


def lerp_color(color: int, fog_color: Sequence[int], fog_factor: float) -> int:
    """Blend an ARGB colour toward ``fog_color`` (given as a, r, g, b)."""
    result = _lerp(
        np.array([color & 0xFFFFFFFF], dtype=np.uint32),
        fog_color,
        np.array([fog_factor], dtype=np.float32),
    )
    return int(result[0])


def apply_fog(color: int, distance: float, vision: float, fog_color: Sequence[int]) -> int:
    """Darken a colour seen from ``distance`` away; near pixels stay as they are."""
    result = _fog_pixels(
        np.array([color & 0xFFFFFFFF], dtype=np.uint32),
        np.array([distance]),
        vision,
        fog_color,
    )
    return int(result[0])


def copy_ground_plan(state: GameState) -> None:
    """Start the plan from the pre-drawn ground."""
    copy_to_game(state.ground, state.plan, 0, 0)


def copy_plan_to_game(state: GameState) -> None:
    """Copy the plan into the window image, centred on the view."""
    view = state.view
    copy_to_game(
        state.plan,
        state.game,
        state.window_width // 2 - (view.x + view.w // 2),
        state.window_height // 2 - (view.y + view.h // 2),
    )


def copy_fog_plan(state: GameState) -> None:
    """Shade every plan pixel by its distance from the player's centre."""
    plan, player = state.plan, state.player
    if plan.width == 0 or plan.height == 0:
        return
    ys, xs = np.ogrid[0:plan.height, 0:plan.width]
    dx = (player.x + FOG_OFFSET - xs).astype(np.float64)
    dy = (player.y + FOG_OFFSET - ys).astype(np.float64)
    distances = np.sqrt(dx * dx + dy * dy)
    fogged = _fog_pixels(plan.pixels, distances, state.vision, state.fog_color)
    plan.pixels[...] = np.where(fogged != TRANSPARENT, fogged, plan.pixels)
    state.dist_fog = float(np.float32(distances[-1, -1]))


def _cdiv(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def build_minimap(state: GameState) -> None:
    """Overlay the minimap with markers for eyes, slimes, player and exit."""
    tiles, game = state.tiles, state.game
    background = tiles[8][1][0]
    mini_x = background.width - MINIMAP_MARGIN_X
    mini_y = background.height - MINIMAP_MARGIN_Y

    def place(tile, x: int, y: int) -> None:
        copy_to_game(tile, game, _cdiv(x * mini_x, game.width), _cdiv(y * mini_y, game.height))

    copy_to_game(background, game, 0, 0)
    for group in state.eyes:
        for eye in group:
            if eye.is_dead:
                break
            place(tiles[8][2][0], eye.x, eye.y)
    for slime in state.slimes:
        if slime.is_free:
            break
        place(tiles[8][3][0], slime.x, slime.y)
    place(tiles[8][5][0], state.player.x, state.player.y)
    if state.info.exit_open:
        place(tiles[8][4][0], state.info.exit_x, state.info.exit_y)


def _draw_wall(state: GameState, cell: Cell, floor_count: int) -> None:
    tiles, ground = state.tiles, state.ground
    last_col = state.info.columns - 1
    last_row = state.info.lines - 1
    inner_x = 0 < cell.x < last_col
    inner_y = 0 < cell.y < last_row
    if cell.y == 0 and inner_x:
        state.wall_anim = (state.wall_anim + 1) % 3
        copy_to_ground(tiles[1][0][state.wall_anim], ground, cell)
    elif cell.y == last_row and inner_x:
        copy_to_ground(tiles[1][1][0], ground, cell)
    elif cell.x == 0 and inner_y:
        copy_to_ground(tiles[1][2][0], ground, cell)
    elif cell.x == last_col and inner_y:
        copy_to_ground(tiles[1][3][0], ground, cell)
    else:
        copy_to_ground(tiles[2][0][floor_count % 2], ground, cell)
    if cell.char == "1":
        corners = {
            (0, 0): 0,
            (last_col, 0): 1,
            (0, last_row): 2,
            (last_col, last_row): 3,
        }
        corner = corners.get((cell.x, cell.y))
        if corner is not None:
            copy_to_ground(tiles[1][4][corner], ground, cell)


def build_ground(state: GameState) -> None:
    """Draw floor, walls, corners and (if open) the exit onto the ground image."""
    tiles, ground, info = state.tiles, state.ground, state.info
    floor_count = -1
    for cell in state.cells():
        if 0 < cell.y < info.lines - 1 and 0 < cell.x < info.columns - 1:
            floor_count += 1
            if floor_count % 4 == 0:
                frame = 0
            elif floor_count % 6 == 0:
                frame = 2
            elif floor_count % 15 == 0:
                frame = 3
            else:
                frame = 1
            copy_to_ground(tiles[0][0][frame], ground, cell)
        if cell.is_wall():
            _draw_wall(state, cell, floor_count)
        if cell.char == "E" and info.exit_open:
            copy_to_ground(tiles[3][0][0], ground, cell)


def build_plan(state: GameState) -> None:
    """Draw the open exit and remember where it is."""
    info = state.info
    for cell in state.cells():
        if cell.char == "E" and info.exit_open:
            copy_to_ground(state.tiles[3][0][0], state.ground, cell)
            info.exit_x = cell.x
            info.exit_y = cell.y