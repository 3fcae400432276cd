"""Level set-up, the per-frame update and the windowed game loop."""

from __future__ import annotations

import random
import sys
from typing import Callable

import numpy as np

from solong.creatures import draw_eye, handle_slimes, handle_trap, move_eye
from solong.image import (
    Image,
    copy_countdowns,
    copy_to_game,
    copy_to_view,
    load_image,
    new_image,
)
from solong.mapfile import check_arguments, load_map
from solong.player import (
    Outcome,
    compute_distances,
    follow_player,
    handle_actions,
    handle_movement,
    init_view,
    press_button,
    press_key,
    release_button,
    release_key,
)
from solong.render import (
    build_ground,
    build_minimap,
    build_plan,
    copy_fog_plan,
    copy_ground_plan,
    copy_plan_to_game,
)
from solong.state import (
    KEY_ESCAPE,
    KEY_M,
    KEY_SHIFT_L,
    TILE_SIZE,
    GameError,
    GameState,
    MapError,
)
from solong.textures import build_tileset, load_manifest

PROGRAM = "so_long"
WINDOW_TITLE = "So_long"
MAX_MAP_PIXELS = 30000
FRAME_DELAY = 100 // 60
START_SPEED = 4
START_VISION = 300.0
COOLDOWN_TOTAL = 100
FRAMES_PER_SECOND = 60

TILES_PLAYER = 5
TILES_HUD = 8
HUD_DIED = 0
HUD_COUNTDOWN = 6
COUNTDOWN_X = 50
ATTACK_BAR_Y = 600
COUNTER_BAR_Y = 500
STEP_COLOR = (255, 255, 255)


def get_randoms(low: int, high: int, count: int) -> int:
    """Draw ``count`` random integers in ``[low, high]`` and return the last, or -1."""
    value = -1
    for _ in range(count):
        value = random.randint(low, high)
    return value


def init_variables(state: GameState) -> None:
    """Reset the counters every new level starts from."""
    state.player.ms = START_SPEED
    state.step = 0
    state.tick = -1
    state.frame = 0
    state.frame_player = 0
    state.vision = START_VISION
    state.counter.curr_frame_c = 0
    state.counter.tot_frame_c = COOLDOWN_TOTAL
    state.attack.curr_frame_c = 0
    state.attack.tot_frame_c = COOLDOWN_TOTAL


def prepare_level(
    argv: list[str],
    level: int,
    loader: Callable[[str], Image] = load_image,
) -> GameState:
    """Build a fresh state for the level after ``level``.

    ``argv`` holds the program name, the map files and, last, the texture
    manifest; the map used is ``argv[level + 1]``.
    """
    state = GameState()
    state.level = level + 1
    state.argv = list(argv)
    map_path = check_arguments(state.argv, state.level)
    manifest = load_manifest(state.argv[-1])
    load_map(state, map_path)
    state.tiles = build_tileset(manifest, loader)

    info = state.info
    width, height = info.columns * TILE_SIZE, info.lines * TILE_SIZE
    if width > MAX_MAP_PIXELS or height > MAX_MAP_PIXELS:
        raise MapError("map is too large")
    state.ground = new_image(width, height)
    state.plan = new_image(width, height)
    state.fog_color = (0, 0, 0, 0)
    state.game = new_image(state.window_width, state.window_height)

    init_view(state)
    state.rd_floor = get_randoms(0, 1, 2)
    info.collectibles = info.coins
    state.player.animation = [0] * 9
    build_ground(state)
    state.dist_eyes = [0.0] * sum(len(group) for group in state.eyes)
    state.dist_slimes = [0.0] * len(state.slimes)
    state.dist_traps = [0.0] * len(state.traps)
    init_variables(state)
    return state


def _draw_player(state: GameState) -> None:
    player = state.player
    tile = state.tiles[TILES_PLAYER][player.i][player.animation[player.i]]
    copy_to_game(tile, state.plan, player.x, player.y)


def _display_dynamic(state: GameState) -> None:
    eyes = (eye for group in state.eyes for eye in group)
    for index, eye in enumerate(eyes):
        if not state.player.is_dead:
            move_eye(state, eye, index)
        if state.dist_eyes[index] <= state.vision:
            draw_eye(state, eye)
    handle_slimes(state)
    for index, trap in enumerate(state.traps):
        handle_trap(state, trap, index)
    if state.info.coins == 0:
        state.info.exit_open = True
    copy_fog_plan(state)
    _draw_player(state)


def _display(state: GameState) -> None:
    build_plan(state)
    _display_dynamic(state)
    copy_plan_to_game(state)
    hud = state.tiles[TILES_HUD]
    bar, fill = hud[HUD_COUNTDOWN][0], hud[HUD_COUNTDOWN][1]
    copy_to_game(bar, state.game, COUNTDOWN_X, ATTACK_BAR_Y)
    copy_countdowns(fill, state.game, state.attack.curr_frame_c, ATTACK_BAR_Y)
    copy_to_game(bar, state.game, COUNTDOWN_X, COUNTER_BAR_Y)
    copy_countdowns(fill, state.game, state.counter.curr_frame_c, COUNTER_BAR_Y)
    if state.movement.is_pressed(KEY_M):
        build_minimap(state)
    if state.player.is_dead:
        copy_to_view(hud[HUD_DIED][0], state.game)


def tick(state: GameState) -> Outcome:
    """Advance the game by one loop iteration and compose the window image."""
    state.tick += 1
    if state.tick - state.frame < FRAME_DELAY:
        return Outcome.CONTINUE
    state.frame = state.tick
    state.game.clear()
    compute_distances(state)
    copy_ground_plan(state)
    follow_player(state)
    if not state.player.is_dead:
        outcome = handle_movement(state)
        if outcome is not Outcome.CONTINUE:
            return outcome
        handle_actions(state)
    _display(state)
    return Outcome.CONTINUE


def _step_position(state: GameState) -> tuple[int, int]:
    view, player = state.view, state.player
    x = state.window_width // 2 - (view.x + view.w // 2) + player.x + TILE_SIZE // 2
    y = state.window_height // 2 - (view.y + view.h // 2) + player.y - 5
    return x, y


def _present(pygame, screen, font, state: GameState) -> None:
    pixels = state.game.pixels
    rgb = np.stack(
        ((pixels >> 16) & 0xFF, (pixels >> 8) & 0xFF, pixels & 0xFF), axis=-1
    ).astype(np.uint8)
    surface = pygame.surfarray.make_surface(rgb.transpose(1, 0, 2))
    screen.blit(surface, (0, 0))
    text = font.render(str(state.step), True, STEP_COLOR)
    screen.blit(text, _step_position(state))
    pygame.display.flip()


def run(argv: list[str]) -> int:
    """Play the levels named in ``argv`` in a window; return the exit status."""
    state = prepare_level(argv, 0)
    import pygame

    pygame.init()
    try:
        screen = pygame.display.set_mode((state.window_width, state.window_height))
        pygame.display.set_caption(WINDOW_TITLE)
        font = pygame.font.Font(None, 24)
        clock = pygame.time.Clock()
        keymap = {pygame.K_ESCAPE: KEY_ESCAPE, pygame.K_LSHIFT: KEY_SHIFT_L}
        while True:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return 1
                if event.type == pygame.KEYDOWN:
                    keycode = keymap.get(event.key, event.key)
                    if press_key(state, keycode) is Outcome.QUIT:
                        return 0
                elif event.type == pygame.KEYUP:
                    release_key(state, keymap.get(event.key, event.key))
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    press_button(state, event.button, *event.pos)
                elif event.type == pygame.MOUSEBUTTONUP:
                    release_button(state, event.button, *event.pos)
            outcome = tick(state)
            if outcome is Outcome.VICTORY:
                return 0
            if outcome is Outcome.NEXT_LEVEL:
                state = prepare_level(argv, state.level)
                continue
            _present(pygame, screen, font, state)
            clock.tick(FRAMES_PER_SECOND)
    finally:
        pygame.quit()


def main(argv: list[str] | None = None) -> int:
    """Command entry point: ``so_long MAP.ber [MAP2.ber] TEXTURES``."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        return run([PROGRAM, *args])
    except GameError as exc:
        sys.stderr.write(f"Error\n{exc}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())