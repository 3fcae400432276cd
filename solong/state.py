"""Game state shared by the map loader, the simulation and the renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from solong.image import Image

TILE_SIZE = 64
WINDOW_WIDTH = 1920
WINDOW_HEIGHT = 1010
WALL_CHARS = frozenset("1F")

# X11 key symbols as delivered by the windowing layer.
KEY_A = 0x61
KEY_D = 0x64
KEY_E = 0x65
KEY_M = 0x6D
KEY_S = 0x73
KEY_W = 0x77
KEY_ESCAPE = 0xFF1B
KEY_SHIFT_L = 0xFFE1

BUTTON_LEFT = 1
BUTTON_RIGHT = 3


class GameError(Exception):
    """Base class for every error raised by the game."""


class MapError(GameError):
    """The map file is missing, malformed or not playable."""


class TextureError(GameError):
    """A texture manifest or texture file could not be used."""


@dataclass(eq=False)
class Cell:
    """One square of the map, linked to its four neighbours."""

    char: str
    x: int
    y: int
    visited: int = 0
    right: Cell | None = field(default=None, repr=False)
    left: Cell | None = field(default=None, repr=False)
    up: Cell | None = field(default=None, repr=False)
    down: Cell | None = field(default=None, repr=False)

    def is_wall(self) -> bool:
        """Whether nothing may walk onto this cell."""
        return self.char in WALL_CHARS

    @property
    def x_pxl(self) -> int:
        """Left edge of the cell in pixels."""
        return self.x * TILE_SIZE

    @property
    def y_pxl(self) -> int:
        """Top edge of the cell in pixels."""
        return self.y * TILE_SIZE


@dataclass
class Info:
    """Counts and dimensions gathered while reading a map."""

    map_text: str = ""
    lines: int = 0
    columns: int = 0
    size_map: int = 0
    coins: int = 0
    collectibles: int = 0
    traps: int = 0
    eye_spawns: int = 0
    enemies: int = 0
    eye_index: int = 0
    slime_index: int = 0
    trap_index: int = 0
    exit_open: bool = False
    exit_x: int = 0
    exit_y: int = 0


@dataclass(eq=False)
class Player:
    x: int = 0
    y: int = 0
    i: int = 0
    animation: list[int] = field(default_factory=lambda: [0] * 9)
    pv: int = 0
    ms: int = 0
    r: float = 0.0
    is_dead: bool = False
    cell: Cell | None = None


@dataclass(eq=False)
class Eye:
    x: int = 0
    y: int = 0
    i: int = 0
    pv: int = 0
    ms: int = 0
    r: float = 0.0
    is_dead: bool = False
    is_stun: bool = False
    anim: int = 0
    rd_dir: int = 0
    reach: float = 0.0
    focus: bool = False
    cell: Cell | None = None
    frame_move: int = 0
    frame_anim: int = 0


@dataclass(eq=False)
class Slime:
    x: int = 0
    y: int = 0
    i: int = 0
    anim: int = 0
    r: float = 0.0
    is_free: bool = False
    cell: Cell | None = None
    frame: int = 0
    waiting: bool = False


@dataclass(eq=False)
class Trap:
    x: int = 0
    y: int = 0
    curr_frame: int = 0
    tot_frame: int = 0
    i: int = 0
    r: float = 0.0
    anim: int = 0
    detect: bool = False
    cell: Cell | None = None
    frame: int = 0


@dataclass
class Action:
    """State of a mouse-driven action (attack or counter) and its cooldown."""

    curr_frame: int = 0
    tot_frame: int = 0
    curr_frame_c: int = 0
    tot_frame_c: int = 0
    reload: bool = False
    x: int = 0
    y: int = 0
    button: bool = False
    is_action: bool = False


@dataclass
class Movement:
    """Keys currently held and the direction last walked."""

    pressed: set[int] = field(default_factory=set)
    keycode: int = 0
    facing: list[bool] = field(default_factory=lambda: [False] * 4)

    def is_pressed(self, keycode: int) -> bool:
        return keycode in self.pressed


@dataclass
class View:
    w: int = 0
    h: int = 0
    x: int = 0
    y: int = 0
    off_px: int = 0
    off_py: int = 0


@dataclass(eq=False)
class GameState:
    """Everything one running level needs."""

    window_width: int = WINDOW_WIDTH
    window_height: int = WINDOW_HEIGHT
    info: Info = field(default_factory=Info)
    player: Player = field(default_factory=Player)
    eyes: list[list[Eye]] = field(default_factory=list)
    slimes: list[Slime] = field(default_factory=list)
    traps: list[Trap] = field(default_factory=list)
    head: Cell | None = None
    tiles: list[list[list[Image]]] = field(default_factory=list)
    ground: Image | None = None
    plan: Image | None = None
    game: Image | None = None
    movement: Movement = field(default_factory=Movement)
    attack: Action = field(default_factory=Action)
    counter: Action = field(default_factory=Action)
    view: View = field(default_factory=View)
    fog_color: tuple[int, int, int, int] = (0, 0, 0, 0)
    dist_eyes: list[float] = field(default_factory=list)
    dist_slimes: list[float] = field(default_factory=list)
    dist_traps: list[float] = field(default_factory=list)
    dist_fog: float = 0.0
    rd_floor: int = 0
    wall_anim: int = 0
    tick: int = 0
    frame: int = 0
    frame_player: int = 0
    step: int = 0
    level: int = 0
    argv: list[str] = field(default_factory=list)
    vision: float = 0.0

    def cells(self) -> Iterator[Cell]:
        """Walk every map cell in reading order."""
        cell = self.head
        while cell is not None:
            yield cell
            cell = cell.right
            if cell is self.head:
                break