"""Texture manifests and the tile set they describe.

A manifest lists one texture path per line behind a one-character marker:
``.`` opens a new image category, ``-`` a new variant, anything else adds a
frame. Keywords in each line decide which counters it feeds.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Iterable

from solong.image import Image, load_image
from solong.state import TextureError

MANIFEST_LINES = 119
CATEGORY_COUNT = 9
FRAME_SLOTS = 31


@dataclass(frozen=True)
class _Category:
    keyword: str
    index: int
    frames: tuple[tuple[str, int], ...]


# "" matches every line, for categories whose frames are counted unconditionally.
_CATEGORIES = (
    _Category("floor", 0, (("", 0),)),
    _Category(
        "wall", 1,
        (("haut", 1), ("bas", 2), ("gauche", 3), ("droite", 4), ("corner", 5)),
    ),
    _Category("deco", 2, (("tree", 6), ("loot", 7))),
    _Category("exit", 3, (("", 8),)),
    _Category("slime", 4, (("jar", 9), ("run", 10))),
    _Category(
        "player", 5,
        (
            ("haut", 11), ("bas", 12), ("gauche", 13), ("droite", 14),
            ("attack_", 15), ("attackr", 16), ("counter_", 17),
            ("counterr", 18), ("dead", 19),
        ),
    ),
    _Category("ennemies", 6, (("gauche", 20), ("droite", 21), ("dead", 22))),
    _Category("trap", 7, (("bas", 23),)),
    _Category(
        "game", 8,
        (
            ("died", 24), ("minimap", 25), ("red", 26), ("bleu", 27),
            ("green", 28), ("hero", 29), ("countdown", 30),
        ),
    ),
)


@dataclass
class TextureManifest:
    """Counters and paths accumulated from manifest lines."""

    image_count: int = 0
    variants: list[int] = field(default_factory=lambda: [0] * CATEGORY_COUNT)
    frames: list[int] = field(default_factory=lambda: [0] * FRAME_SLOTS)
    text: str = ""
    line_count: int = 0

    def add_line(self, line: str) -> None:
        for category in _CATEGORIES:
            if category.keyword not in line:
                continue
            slot = next((s for key, s in category.frames if key in line), None)
            if slot is not None:
                self.frames[slot] += 1
            if line[:1] in ("-", "."):
                self.variants[category.index] += 1
        if line.startswith("."):
            self.image_count += 1
        self.text += line[1:]
        self.line_count += 1

    @property
    def paths(self) -> list[str]:
        return [path for path in self.text.split("\n") if path]


def parse_manifest(lines: Iterable[str]) -> TextureManifest:
    manifest = TextureManifest()
    for line in lines:
        manifest.add_line(line)
    if manifest.line_count == 0:
        raise TextureError("texture manifest is empty")
    if manifest.line_count != MANIFEST_LINES:
        raise TextureError(
            f"texture manifest has {manifest.line_count} lines, "
            f"expected {MANIFEST_LINES}"
        )
    return manifest


def load_manifest(path: str | os.PathLike[str]) -> TextureManifest:
    try:
        with open(path, "rb") as handle:
            lines = [raw.decode("utf-8", errors="replace") for raw in handle]
    except OSError as exc:
        raise TextureError(f"cannot read texture manifest {path}") from exc
    return parse_manifest(lines)


def _load(loader: Callable[[str], Image], path: str) -> Image:
    try:
        return loader(path)
    except (OSError, ValueError) as exc:
        raise TextureError(f"texture path: {path}") from exc


def build_tileset(
    manifest: TextureManifest,
    loader: Callable[[str], Image] = load_image,
) -> list[list[list[Image]]]:
    """Load every texture into ``tiles[category][variant][frame]``."""
    paths = iter(manifest.paths)
    slots = iter(manifest.frames)
    tiles: list[list[list[Image]]] = []
    try:
        for category in range(manifest.image_count):
            variants = []
            for _ in range(manifest.variants[category]):
                count = next(slots)
                variants.append([_load(loader, next(paths)) for _ in range(count)])
            tiles.append(variants)
    except (IndexError, StopIteration) as exc:
        raise TextureError("texture manifest does not describe every tile") from exc
    return tiles