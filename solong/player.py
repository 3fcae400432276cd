"""Player input, movement, combat actions, distances and the camera view."""

from __future__ import annotations

import enum
import math
import sys
from dataclasses import dataclass

from solong.state import (
    BUTTON_LEFT,
    BUTTON_RIGHT,
    KEY_A,
    KEY_D,
    KEY_E,
    KEY_ESCAPE,
    KEY_S,
    KEY_W,
    TILE_SIZE,
    Action,
    Eye,
    GameState,
    Player,
)

WALK_SPEED = 4
GUARD_SPEED = 2
ACTION_FRAMES = 4
COOLDOWN_STEP = 20
COOLDOWN_READY = 50
COOLDOWN_LIMIT = 80
WALK_FRAMES = 6
PLAYER_FRAME_DELAY = 100 // 60
FINAL_LEVEL = 2

ATTACK_FACING_UP_RIGHT = 4
ATTACK_FACING_DOWN_LEFT = 5
COUNTER_FACING_UP_RIGHT = 6
COUNTER_FACING_DOWN_LEFT = 7


class Outcome(enum.Enum):
    """What the game loop should do after handling an event."""

    CONTINUE = "continue"
    QUIT = "quit"
    NEXT_LEVEL = "next_level"
    VICTORY = "victory"


@dataclass(frozen=True)
class _Direction:
    name: str
    key: int
    index: int
    neighbour: str
    axis: str
    sign: int


_UP = _Direction("up", KEY_W, 0, "up", "y", -1)
_DOWN = _Direction("down", KEY_S, 1, "down", "y", 1)
_LEFT = _Direction("left", KEY_A, 2, "left", "x", -1)
_RIGHT = _Direction("right", KEY_D, 3, "right", "x", 1)


def calculate_distance(player: Player, obj_x: float, obj_y: float, off: int) -> float:
    """Euclidean distance from the player's corner, shifted by ``off``, to a point."""
    return math.hypot(player.x + off - obj_x, player.y + off - obj_y)


def _all_eyes(state: GameState) -> list[Eye]:
    return [eye for group in state.eyes for eye in group]


def compute_distances(state: GameState) -> None:
    """Refresh the player's distance to every eye, slime and trap."""
    player = state.player
    state.dist_eyes = [calculate_distance(player, e.x, e.y, 0) for e in _all_eyes(state)]
    state.dist_slimes = [calculate_distance(player, s.x, s.y, 0) for s in state.slimes]
    state.dist_traps = [calculate_distance(player, t.x, t.y, 0) for t in state.traps]


def _plan_size(state: GameState) -> tuple[int, int]:
    if state.plan is not None:
        return state.plan.width, state.plan.height
    return state.info.columns * TILE_SIZE, state.info.lines * TILE_SIZE


def init_view(state: GameState) -> None:
    """Size the view to a quarter of the map and centre it on the player."""
    view = state.view
    view.w = state.info.columns * TILE_SIZE // 4
    view.h = state.info.lines * TILE_SIZE // 4
    view.x = state.player.x - view.w // 2
    view.y = state.player.y - view.h // 2


def follow_player(state: GameState) -> None:
    """Centre the view on the player, kept inside the map."""
    view, player = state.view, state.player
    plan_w, plan_h = _plan_size(state)
    view.x = player.x - view.w // 2
    view.y = player.y - view.h // 2
    if view.x < 0:
        view.x = 0
    elif view.x + view.w > plan_w:
        view.x = plan_w - view.w
    if view.y < 0:
        view.y = 0
    elif view.y + view.h > plan_h:
        view.y = plan_h - view.h


def press_key(state: GameState, keycode: int) -> Outcome:
    state.movement.pressed.add(keycode)
    if keycode == KEY_ESCAPE:
        return Outcome.QUIT
    return Outcome.CONTINUE


def release_key(state: GameState, keycode: int) -> None:
    state.movement.pressed.discard(keycode)
    player = state.player
    player.animation[player.i] = 0


def press_button(state: GameState, button: int, x: int, y: int) -> None:
    if button == BUTTON_LEFT:
        attack = state.attack
        attack.button = True
        attack.curr_frame = 0
        attack.tot_frame = ACTION_FRAMES
        attack.x, attack.y = x, y
    elif button == BUTTON_RIGHT:
        counter = state.counter
        counter.button = True
        counter.is_action = True
        counter.curr_frame = 0
        counter.tot_frame = ACTION_FRAMES
        counter.x, counter.y = x, y
        state.player.ms = GUARD_SPEED


def release_button(state: GameState, button: int, x: int, y: int) -> None:
    player = state.player
    if not player.is_dead:
        for index, facing in enumerate(state.movement.facing):
            if facing:
                player.i = index
    if button == BUTTON_LEFT:
        state.attack.button = False
        state.attack.is_action = False
    if button == BUTTON_RIGHT:
        state.counter.button = False
        state.counter.curr_frame = 0
        state.counter.is_action = False
        player.ms = WALK_SPEED


def _walk(state: GameState, direction: _Direction) -> None:
    player = state.player
    if not state.movement.is_pressed(direction.key) or player.cell is None:
        return
    target = getattr(player.cell, direction.neighbour)
    if target is None:
        return
    position = getattr(player, direction.axis)
    edge = target.x_pxl if direction.axis == "x" else target.y_pxl
    if direction.sign < 0:
        room = position - TILE_SIZE >= edge
    else:
        room = position + TILE_SIZE <= edge
    if target.is_wall() and not room:
        return

    facing = state.movement.facing
    facing[:] = [False] * len(facing)
    facing[direction.index] = True
    player.i = direction.index
    if state.tick - state.frame_player >= PLAYER_FRAME_DELAY:
        frame = player.animation[direction.index]
        if (frame + 1) % WALK_FRAMES == 0:
            frame += 2
        player.animation[direction.index] = (frame + 1) % WALK_FRAMES

    position += direction.sign * player.ms
    setattr(player, direction.axis, position)
    reached = position <= edge if direction.sign < 0 else position >= edge
    if reached:
        sys.stderr.write(f"{direction.name}: [x:y] [{player.x} {player.y}] pxl\n")
        player.cell = target
        state.step += 1


def move_up(state: GameState) -> None:
    _walk(state, _UP)


def move_down(state: GameState) -> None:
    _walk(state, _DOWN)


def move_left(state: GameState) -> None:
    _walk(state, _LEFT)


def move_right(state: GameState) -> None:
    _walk(state, _RIGHT)


def handle_movement(state: GameState) -> Outcome:
    """Walk in every held direction and report whether the exit was taken."""
    if state.attack.button:
        return Outcome.CONTINUE
    move_up(state)
    move_down(state)
    move_left(state)
    move_right(state)
    state.frame_player = state.tick
    cell = state.player.cell
    if (
        cell is not None
        and cell.char == "E"
        and state.info.exit_open
        and state.movement.is_pressed(KEY_E)
    ):
        return Outcome.VICTORY if state.level == FINAL_LEVEL else Outcome.NEXT_LEVEL
    return Outcome.CONTINUE


def _advance_frame(action: Action, player: Player, active: bool) -> None:
    if action.curr_frame == action.tot_frame:
        action.curr_frame = 0
    if action.curr_frame <= action.tot_frame and active:
        player.animation[player.i] = action.curr_frame
        action.curr_frame += 1


def _faces_up_or_right(state: GameState) -> bool:
    facing = state.movement.facing
    return facing[0] or facing[3]


def _attack(state: GameState) -> None:
    player = state.player
    player.i = ATTACK_FACING_UP_RIGHT if _faces_up_or_right(state) else ATTACK_FACING_DOWN_LEFT
    _advance_frame(state.attack, player, True)
    for slime, dist in zip(state.slimes, state.dist_slimes):
        if dist <= slime.r + player.r:
            if slime.cell is not None:
                slime.cell.visited = 2
            slime.anim = 1
    for eye, dist in zip(_all_eyes(state), state.dist_eyes):
        if dist <= eye.r + player.r and eye.is_stun:
            eye.i = 2
            eye.anim = 0
            eye.is_dead = True


def _counter(state: GameState) -> None:
    player = state.player
    state.counter.curr_frame_c += 1
    player.i = COUNTER_FACING_UP_RIGHT if _faces_up_or_right(state) else COUNTER_FACING_DOWN_LEFT
    _advance_frame(state.counter, player, state.counter.is_action)
    for eye, dist in zip(_all_eyes(state), state.dist_eyes):
        if dist <= eye.r + player.r:
            eye.is_stun = True


def _cool_down(action: Action) -> None:
    action.reload = True
    previous = action.curr_frame_c
    action.curr_frame_c -= 1
    if previous <= COOLDOWN_READY:
        action.reload = False


def handle_actions(state: GameState) -> None:
    """Run the counter and attack for this frame and tick their cooldowns."""
    counter, attack = state.counter, state.attack
    if counter.button and counter.curr_frame_c <= counter.tot_frame_c and not counter.reload:
        _counter(state)
    elif counter.curr_frame_c > 0:
        _cool_down(counter)
    if attack.button:
        if not attack.is_action and attack.curr_frame_c <= COOLDOWN_LIMIT:
            attack.curr_frame_c += COOLDOWN_STEP
            attack.is_action = True
        if attack.curr_frame_c <= attack.tot_frame_c and not attack.reload:
            _attack(state)
    elif attack.curr_frame_c > 0:
        _cool_down(attack)