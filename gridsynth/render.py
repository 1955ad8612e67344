"""Text and image rendering of grids."""

from __future__ import annotations

import colorsys
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np

from .alphabet import EMPTY, WILDCARD, Alphabet
from .grid import Grid

if TYPE_CHECKING:  # pragma: no cover
    from PIL import Image

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _glyph(value: int, alphabet: Optional[Alphabet]) -> str:
    if value == EMPTY.id:
        return "."
    if value == WILDCARD.id:
        return "*"
    if alphabet is None:
        return _DIGITS[value % len(_DIGITS)]
    if alphabet.has_symbol(value):
        name = alphabet.get_symbol(value).name
        return name[0] if name else "?"
    return "?"


def render_text(grid: Grid, alphabet: Optional[Alphabet] = None) -> str:
    """Render one line per row.

    Registered symbols print the first character of their name. Without an
    alphabet, codes print as a base-36 digit.
    """

    return "\n".join("".join(_glyph(value, alphabet) for value in row) for row in grid.rows())


def symbol_color(value: int) -> Tuple[int, int, int]:
    """RGB colour for a symbol code: hue ``value / 16``, saturation 0.8, value 0.6."""

    hue = (value / 16.0) % 1.0
    red, green, blue = colorsys.hsv_to_rgb(hue, 0.8, 0.6)
    return int(round(red * 255)), int(round(green * 255)), int(round(blue * 255))


def grid_to_array(grid: Grid, cell_size: int = 8) -> np.ndarray:
    """Return an ``(height * cell_size, width * cell_size, 3)`` uint8 array."""

    if cell_size <= 0:
        raise ValueError("cell_size must be positive")

    codes = grid.to_numpy()
    palette_values: List[int] = grid.palette()
    colors = np.array([symbol_color(value) for value in palette_values], dtype=np.uint8)
    indices = np.searchsorted(np.array(palette_values, dtype=np.int64), codes)

    pixels = colors[indices]
    return np.repeat(np.repeat(pixels, cell_size, axis=0), cell_size, axis=1)


def grid_to_image(grid: Grid, cell_size: int = 8) -> "Image.Image":
    from PIL import Image

    return Image.fromarray(grid_to_array(grid, cell_size))


def save_png(grid: Grid, path: str | Path, cell_size: int = 8) -> Path:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    grid_to_image(grid, cell_size).save(destination)
    return destination


__all__ = ["render_text", "symbol_color", "grid_to_array", "grid_to_image", "save_png"]
