"""Reading ``.ber`` map files into a linked grid of cells and checking them."""

from __future__ import annotations

import os
import random
import sys
from collections import Counter
from dataclasses import dataclass, field

from solong.state import Cell, Eye, GameState, MapError, Slime, Trap

MAP_CHARS = frozenset("01CEPOF\n")
MAP_SUFFIX = ".ber"
ENEMIES_PER_SPAWN = 10
EYE_ANIMATIONS = 6

PLAYER_RADIUS = 31.0
EYE_RADIUS = 18.0
EYE_REACH = 100.0
SLIME_RADIUS = 11.0
TRAP_RADIUS = 64.0

_ENTITY_CHARS = "PECFO"


@dataclass
class ParsedMap:
    """The raw text of a map together with what was counted in it."""

    text: str
    lines: int
    columns: int
    size_map: int
    coins: int
    traps: int
    eye_spawns: int
    rows: list[str] = field(default_factory=list)


def check_arguments(argv: list[str], level: int) -> str:
    """Validate ``argv[level]`` as a readable map file and return its path."""
    if len(argv) < 3:
        raise MapError("expected at least one map file and a texture manifest")
    if not 0 <= level < len(argv):
        raise MapError(f"no map given for level {level}")
    path = argv[level]
    if not path.endswith(MAP_SUFFIX):
        raise MapError(f"map file must end in {MAP_SUFFIX}: {path}")
    try:
        with open(path, "r+b"):
            pass
    except OSError as exc:
        raise MapError(f"file can't be open: {path}") from exc
    if not os.access(path, os.R_OK):
        raise MapError(f"file access: {path}")
    return path


def _split_lines(text: str) -> list[str]:
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def parse_map(text: str) -> ParsedMap:
    """Check the characters and shape of a map and count its contents."""
    lines = _split_lines(text)
    if not lines:
        raise MapError("plan empty")
    columns = len(lines[0]) - 1
    for line in lines:
        if any(ch not in MAP_CHARS for ch in line):
            raise MapError("plan: unexpected character")
    counts = Counter(text)
    if counts["E"] != 1 or counts["P"] != 1:
        raise MapError("plan: exactly one exit and one player are required")
    size_map = len(text) if text.endswith("\n") else len(text) + 1
    line_count = len(lines)
    if columns <= 1 or line_count <= 1 or columns * line_count != size_map - line_count:
        raise MapError("Invalid map")
    stride = columns + 1
    rows = [text[y * stride:y * stride + columns] for y in range(line_count)]
    return ParsedMap(
        text=text,
        lines=line_count,
        columns=columns,
        size_map=size_map,
        coins=counts["C"],
        traps=counts["F"],
        eye_spawns=counts["O"],
        rows=rows,
    )


def read_map(path: str | os.PathLike[str]) -> ParsedMap:
    try:
        with open(path, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        raise MapError(f"file can't be open: {path}") from exc
    return parse_map(raw.decode("latin-1"))


def build_cells(parsed: ParsedMap) -> list[Cell]:
    """Create the cells in reading order, linked right/left and up/down.

    The right link runs on from the end of one row to the start of the
    next, and the first cell's left link points at the last cell.
    """
    grid = [
        [Cell(char, x, y) for x, char in enumerate(row)]
        for y, row in enumerate(parsed.rows)
    ]
    cells = [cell for row in grid for cell in row]
    for previous, current in zip(cells, cells[1:]):
        previous.right = current
        current.left = previous
    for above_row, below_row in zip(grid, grid[1:]):
        for above, below in zip(above_row, below_row):
            above.down = below
            below.up = above
    if cells:
        cells[0].left = cells[-1]
    return cells


def flood_fill(start: Cell, columns: int, lines: int) -> tuple[int, int]:
    """Visit every cell reachable from ``start``; return coins and exits seen.

    Raises ``MapError`` when a walkable cell on the border can be reached.
    """
    coins = exits = 0
    stack = [start]
    while stack:
        cell = stack.pop()
        if cell.visited:
            continue
        on_border = cell.x in (0, columns - 1) or cell.y in (0, lines - 1)
        if on_border and not cell.is_wall():
            raise MapError("map is not closed by walls")
        if cell.char == "C":
            coins += 1
        elif cell.char == "E":
            exits += 1
        cell.visited = 1
        for neighbour in (cell.right, cell.left, cell.up, cell.down):
            if neighbour is not None and not neighbour.is_wall() and not neighbour.visited:
                stack.append(neighbour)
    return coins, exits


def populate_entities(state: GameState, parsed: ParsedMap, cells: list[Cell]) -> None:
    """Create the player, eyes, slimes and traps and place them on their cells."""
    found = Counter(cell.char for cell in cells)
    expected = Counter(parsed.text)
    if any(found[ch] != expected[ch] for ch in _ENTITY_CHARS):
        raise MapError("Invalid map: rows have uneven lengths")

    info = state.info
    info.enemies = ENEMIES_PER_SPAWN
    state.eyes = [
        [Eye(anim=random.randrange(EYE_ANIMATIONS)) for _ in range(info.enemies)]
        for _ in range(parsed.eye_spawns)
    ]
    state.slimes = [Slime() for _ in range(parsed.coins)]
    state.traps = [Trap() for _ in range(parsed.traps)]

    eye_groups = iter(state.eyes)
    slimes = iter(state.slimes)
    traps = iter(state.traps)
    for cell in cells:
        if cell.char == "P":
            player = state.player
            player.cell = cell
            player.x, player.y = cell.x_pxl, cell.y_pxl
            player.r = PLAYER_RADIUS
        elif cell.char == "O":
            for eye in next(eye_groups):
                eye.cell = cell
                eye.x, eye.y = cell.x_pxl, cell.y_pxl
                eye.r = EYE_RADIUS
                eye.reach = EYE_REACH
                eye.frame_move = 0
                eye.frame_anim = 0
        elif cell.char == "C":
            slime = next(slimes)
            slime.cell = cell
            slime.x, slime.y = cell.x_pxl, cell.y_pxl
            slime.frame = 0
            slime.r = SLIME_RADIUS
        elif cell.char == "F":
            trap = next(traps)
            trap.cell = cell
            trap.x, trap.y = cell.x_pxl, cell.y_pxl
            trap.frame = 0
            trap.r = TRAP_RADIUS
    info.eye_index = len(state.eyes)
    info.slime_index = len(state.slimes)
    info.trap_index = len(state.traps)


def load_map(state: GameState, path: str | os.PathLike[str]) -> ParsedMap:
    """Read, link and validate a map into ``state``, then echo it to stdout."""
    parsed = read_map(path)
    info = state.info
    info.map_text = parsed.text
    info.lines = parsed.lines
    info.columns = parsed.columns
    info.size_map = parsed.size_map
    info.coins = parsed.coins
    info.traps = parsed.traps
    info.eye_spawns = parsed.eye_spawns

    cells = build_cells(parsed)
    state.head = cells[0]
    populate_entities(state, parsed, cells)

    coins, exits = flood_fill(state.player.cell, parsed.columns, parsed.lines)
    if coins != parsed.coins or not exits:
        raise MapError("map is not playable: an exit or a collectible is unreachable")
    sys.stdout.write(format_map(state.head, parsed.columns, parsed.lines))
    return parsed


def format_map(head: Cell | None, columns: int, lines: int) -> str:
    """Render the linked grid back to text, one row per line."""
    out: list[str] = []
    row = head
    while row is not None:
        chars: list[str] = []
        col: Cell | None = row
        last = row
        while col is not None:
            chars.append(col.char)
            last = col
            if col.x == columns - 1:
                break
            col = col.right
        out.append("".join(chars) + "\n")
        if last.y == lines - 1:
            break
        row = row.down
    return "".join(out)