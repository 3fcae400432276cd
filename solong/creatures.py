"""Enemies, collectible slimes and fire traps: their behaviour and drawing."""

from __future__ import annotations

import math
import random

from solong.image import Image, copy_to_game, copy_to_ground
from solong.player import calculate_distance
from solong.state import (
    KEY_E,
    KEY_SHIFT_L,
    TILE_SIZE,
    Cell,
    Eye,
    GameState,
    Player,
    Slime,
    Trap,
)

EYE_WALK_SPEED = 2
EYE_CHASE_SPEED = 4
EYE_TURN_DELAY = 1000 // 60
EYE_FRAME_DELAY = 200 // 60
EYE_FRAMES = 6
DEAD_PLAYER_POSE = 8

SLIME_FRAMES = 5
SLIME_FRAME_DELAY = 100 // 60
SLIME_SPACING = 32
TELEPORT_STEP = 4
TELEPORT_RANGE = 32.0
VISION_BONUS = 100.0

TRAP_BURN_FRAMES = 30
TRAP_FRAMES = 30
TRAP_FRAME_DELAY = 30 // 60
TRAP_DEADLY_FRAMES = range(5, 11)

TILES_SLIME = 4
TILES_EYE = 6
TILES_TRAP = 7
OPEN_JAR = (2, 1, 0)


def _plan_size(state: GameState) -> tuple[int, int]:
    if state.plan is not None:
        return state.plan.width, state.plan.height
    return state.info.columns * TILE_SIZE, state.info.lines * TILE_SIZE


def _draw(state: GameState, tile: Image, x: int, y: int) -> None:
    if state.plan is not None:
        copy_to_game(tile, state.plan, x, y)


def slime_distance(slime: Slime, obj_x: float, obj_y: float, off: int) -> float:
    """Euclidean distance from the slime's corner, shifted by ``off``, to a point."""
    return math.hypot(slime.x + off - obj_x, slime.y + off - obj_y)


def _update_cell(eye: Eye, axis: str, target: Cell, new_i: int) -> None:
    position = getattr(eye, axis)
    edge = target.y_pxl if axis == "y" else target.x_pxl
    if (eye.ms > 0 and position >= edge) or (eye.ms < 0 and position <= edge):
        eye.cell = target
        eye.i = new_i


def _step_eye(state: GameState, eye: Eye, target: Cell | None, axis: str) -> None:
    if target is None or target.is_wall() or eye.cell is None:
        return
    new_i = 1
    if eye.cell.up is target or eye.cell.left is target:
        eye.ms = -abs(eye.ms)
        new_i = 0
    else:
        eye.ms = abs(eye.ms)
    width, height = _plan_size(state)
    limit = height if axis == "y" else width
    position = getattr(eye, axis) + eye.ms
    if 0 <= position < limit:
        setattr(eye, axis, position)
    _update_cell(eye, axis, target, new_i)


def _wander(state: GameState, eye: Eye) -> None:
    if state.tick - eye.frame_move >= EYE_TURN_DELAY:
        eye.rd_dir = random.randrange(4)
        eye.frame_move = state.tick
    cell = eye.cell
    if cell is None:
        return
    moves = {0: (cell.up, "y"), 1: (cell.down, "y"), 2: (cell.left, "x"), 3: (cell.right, "x")}
    if eye.rd_dir in moves:
        target, axis = moves[eye.rd_dir]
        _step_eye(state, eye, target, axis)


def move_eye(state: GameState, eye: Eye, index: int) -> None:
    """Let one eye wander, chase the player once close, and kill on contact."""
    eye.ms = EYE_WALK_SPEED
    if eye.is_dead or eye.is_stun:
        return
    player = state.player
    distance = state.dist_eyes[index]
    if distance <= eye.reach + player.r:
        eye.focus = True
        eye.ms = EYE_CHASE_SPEED
    if distance <= eye.r + player.r:
        player.is_dead = True
        player.i = DEAD_PLAYER_POSE
        return
    if not eye.focus:
        _wander(state, eye)
        return
    if eye.cell is None:
        return
    if eye.x < player.x:
        _step_eye(state, eye, eye.cell.right, "x")
    elif eye.x > player.x:
        _step_eye(state, eye, eye.cell.left, "x")
    if eye.y < player.y:
        _step_eye(state, eye, eye.cell.down, "y")
    elif eye.y > player.y:
        _step_eye(state, eye, eye.cell.up, "y")


def draw_eye(state: GameState, eye: Eye) -> None:
    """Advance the eye's animation and draw it onto the plan."""
    if state.tick - eye.frame_anim >= EYE_FRAME_DELAY and not eye.is_dead:
        eye.anim = (eye.anim + 1) % EYE_FRAMES
        eye.frame_anim = state.tick
    _draw(state, state.tiles[TILES_EYE][eye.i][eye.anim], eye.x, eye.y)


def _cell_under(state: GameState, x: int, y: int) -> Cell | None:
    return next(
        (
            cell
            for cell in state.cells()
            if cell.x_pxl <= x <= cell.x_pxl + TILE_SIZE
            and cell.y_pxl <= y <= cell.y_pxl + TILE_SIZE
        ),
        None,
    )


def teleport(state: GameState, slime: Slime) -> None:
    """Steer a freed slime toward the cursor, then swap the player onto it."""
    view = state.view
    target_x = state.attack.x - state.window_width // 2 + (view.x + view.w // 2)
    target_y = state.attack.y - state.window_height // 2 + (view.y + view.h // 2)
    if state.movement.is_pressed(KEY_SHIFT_L) and state.attack.button:
        if slime.x <= target_x:
            slime.x += TELEPORT_STEP
        elif slime.x >= target_x:
            slime.x -= TELEPORT_STEP
        if slime.y <= target_y:
            slime.y += TELEPORT_STEP
        elif slime.y >= target_y:
            slime.y -= TELEPORT_STEP
        slime.waiting = True
    if slime.waiting and state.counter.button:
        if slime_distance(slime, target_x, target_y, 0) <= TELEPORT_RANGE:
            player = state.player
            player.x, player.y = slime.x, slime.y
            player.cell = _cell_under(state, player.x, player.y)
            slime.waiting = False


def _free_slime(state: GameState, slime: Slime, index: int) -> bool:
    cell = slime.cell
    if cell is not None and cell.visited == 2:
        player = state.player
        if not slime.is_free and state.dist_slimes[index] <= slime.r + player.r:
            category, variant, frame = OPEN_JAR
            if state.plan is not None:
                copy_to_ground(state.tiles[category][variant][frame], state.plan, cell)
        if state.movement.is_pressed(KEY_E) and not slime.is_free:
            slime.x, slime.y = player.x, player.y
            state.info.coins -= 1
            slime.is_free = True
            slime.i = 1
            cell.visited = 3
            state.vision += VISION_BONUS
            slime.waiting = False
    return slime.is_free


def _follow(player: Player, slime: Slime, off_x: int, off_y: int) -> None:
    if slime.y > player.y + off_y and slime.y:
        slime.y -= player.ms
    elif slime.y < player.y + off_y:
        slime.y += player.ms
    if slime.x > player.x + off_x:
        slime.x -= player.ms
    elif slime.x < player.x + off_x:
        slime.x += player.ms


def _trail(state: GameState, slime: Slime, index: int) -> None:
    if state.tick - slime.frame >= SLIME_FRAME_DELAY:
        slime.anim = (slime.anim + 1) % SLIME_FRAMES
        slime.frame = state.tick
    teleport(state, slime)
    if slime.waiting:
        return
    gap = SLIME_SPACING + index * SLIME_SPACING
    facing = state.movement.facing
    player = state.player
    if facing[0]:
        _follow(player, slime, 0, gap)
    elif facing[1]:
        _follow(player, slime, 0, -gap)
    if facing[2]:
        _follow(player, slime, gap, 0)
    elif facing[3]:
        _follow(player, slime, -gap, 0)


def handle_slimes(state: GameState) -> None:
    """Free slimes on request, make freed ones trail the player, draw them all."""
    for index, slime in enumerate(state.slimes):
        if _free_slime(state, slime, index):
            _trail(state, slime, index)
        draw_slime(state, slime)


def draw_slime(state: GameState, slime: Slime) -> None:
    _draw(state, state.tiles[TILES_SLIME][slime.i][slime.anim], slime.x, slime.y)


def handle_trap(state: GameState, trap: Trap, index: int) -> None:
    """Fire a trap while the player is near and burn whoever stands above it."""
    player = state.player
    if state.dist_traps[index] <= player.r + trap.r:
        trap.tot_frame = TRAP_BURN_FRAMES
        trap.detect = True
    else:
        trap.detect = False
    if not (trap.detect or trap.curr_frame < trap.tot_frame):
        return
    if trap.curr_frame == trap.tot_frame:
        trap.curr_frame = 0
    if trap.curr_frame < trap.tot_frame:
        if state.tick - trap.frame >= TRAP_FRAME_DELAY:
            trap.anim = (trap.anim + 1) % TRAP_FRAMES
            trap.curr_frame += 1
        trap.frame = state.tick
    above = trap.cell.up if trap.cell is not None else None
    if (
        trap.detect
        and above is not None
        and trap.curr_frame in TRAP_DEADLY_FRAMES
        and calculate_distance(player, above.x_pxl, above.y_pxl, 0) <= player.r
    ):
        player.is_dead = True
        player.i = DEAD_PLAYER_POSE
    draw_trap(state, trap)


def draw_trap(state: GameState, trap: Trap) -> None:
    """Draw the flame one tile above the trap's cell."""
    _draw(state, state.tiles[TILES_TRAP][trap.i][trap.anim], trap.x, trap.y - TILE_SIZE)