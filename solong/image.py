"""ARGB pixel buffers and the blitting operations used to compose frames."""

from __future__ import annotations

import os
from dataclasses import dataclass

import numpy as np
from PIL import Image as PILImage

from solong.state import TextureError

TRANSPARENT = 0xFF000000
COUNTDOWN_X = 50


@dataclass(eq=False)
class Image:
    """A rectangle of 32-bit ARGB pixels, indexed as ``pixels[y, x]``."""

    pixels: np.ndarray
    path: str | None = None

    def __post_init__(self) -> None:
        self.pixels = np.ascontiguousarray(self.pixels, dtype=np.uint32)
        if self.pixels.ndim != 2:
            raise ValueError("image pixels must be a two-dimensional array")

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def _inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> int:
        if not self._inside(x, y):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return int(self.pixels[y, x])

    def put_pixel(self, x: int, y: int, color: int) -> None:
        """Write one pixel; transparent colours and off-image points are skipped."""
        color &= 0xFFFFFFFF
        if color == TRANSPARENT or not self._inside(x, y):
            return
        self.pixels[y, x] = color

    def clear(self) -> None:
        self.pixels.fill(0)


def new_image(width: int, height: int) -> Image:
    if width < 0 or height < 0:
        raise ValueError("image dimensions must not be negative")
    return Image(np.zeros((height, width), dtype=np.uint32))


def load_image(path: str | os.PathLike[str]) -> Image:
    """Read a texture file; fully transparent pixels become ``TRANSPARENT``."""
    try:
        with PILImage.open(path) as img:
            rgba = np.asarray(img.convert("RGBA")).astype(np.uint32)
    except OSError as exc:
        raise TextureError(f"texture path: {path}") from exc
    red, green, blue, alpha = (rgba[..., k] for k in range(4))
    pixels = (red << 16) | (green << 8) | blue
    pixels[alpha == 0] = TRANSPARENT
    return Image(pixels, path=os.fspath(path))


def _blit(source: np.ndarray, target: Image, x0: int, y0: int) -> None:
    height, width = source.shape
    left, top = max(x0, 0), max(y0, 0)
    right, bottom = min(x0 + width, target.width), min(y0 + height, target.height)
    if right <= left or bottom <= top:
        return
    region = source[top - y0:bottom - y0, left - x0:right - x0]
    mask = region != TRANSPARENT
    target.pixels[top:bottom, left:right][mask] = region[mask]


def copy_to_ground(image: Image, ground: Image, cell) -> None:
    """Draw a tile onto the grid square of ``cell``."""
    _blit(image.pixels, ground, cell.x * image.width, cell.y * image.height)


def copy_countdowns(image: Image, ground: Image, off: int, y_ref: int) -> None:
    """Draw a cooldown bar, shortened by ``off`` pixels."""
    width = min(image.width - off - 12, image.width)
    if width <= 0:
        return
    _blit(image.pixels[:, :width], ground, COUNTDOWN_X, y_ref)


def copy_to_game(image: Image, ground: Image, x_ref: int, y_ref: int) -> None:
    _blit(image.pixels, ground, x_ref, y_ref)


def copy_to_view(image: Image, bg: Image) -> None:
    """Draw ``image`` centred on ``bg``."""
    _blit(
        image.pixels,
        bg,
        bg.width // 2 - image.width // 2,
        bg.height // 2 - image.height // 2,
    )