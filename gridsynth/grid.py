"""Mutable integer grids and the random source shared by transformations.

Cells are stored row-major in a flat Python list (``index = y * width + x``).
NumPy interoperability is provided through :meth:`Grid.to_numpy`.
"""

from __future__ import annotations

import random
from typing import Iterator, List, Sequence, Tuple


class SeededRNG:
    """Wrapper around ``random.Random`` with a minimal convenience API.

    ``seed=None`` draws fresh entropy from the operating system.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def choice(self, seq: Sequence[int]) -> int:
        return self._rng.choice(seq)

    def random(self) -> float:
        return self._rng.random()


def _check_dimensions(width: int, height: int) -> None:
    if isinstance(width, bool) or isinstance(height, bool):
        raise TypeError("width and height must be integers")
    if not isinstance(width, int) or not isinstance(height, int):
        raise TypeError("width and height must be integers")
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive")


def _check_value(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"grid values must be integers, got {type(value).__name__}")


class Grid:
    """Dense rectangular array of integer symbol codes.

    Coordinates are ``(x, y)`` with ``x`` the column. Every accessor checks
    bounds and raises ``IndexError`` rather than wrapping around.
    """

    __slots__ = ("_width", "_height", "_cells")

    def __init__(self, width: int = 10, height: int = 10, default: int = 0) -> None:
        _check_dimensions(width, height)
        _check_value(default)
        self._width = width
        self._height = height
        self._cells: List[int] = [default] * (width * height)

    # ------------------------------------------------------------------ basic
    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def shape(self) -> Tuple[int, int]:
        """Return ``(width, height)``."""

        return self._width, self._height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def _index(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise IndexError(f"cell ({x}, {y}) outside {self._width}x{self._height} grid")
        return y * self._width + x

    def get(self, x: int, y: int) -> int:
        return self._cells[self._index(x, y)]

    def set(self, x: int, y: int, value: int) -> None:
        _check_value(value)
        self._cells[self._index(x, y)] = value

    def __getitem__(self, key: Tuple[int, int]) -> int:
        x, y = key
        return self._cells[self._index(x, y)]

    def __setitem__(self, key: Tuple[int, int], value: int) -> None:
        x, y = key
        _check_value(value)
        self._cells[self._index(x, y)] = value

    def __iter__(self) -> Iterator[int]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.shape == other.shape and self._cells == other._cells

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Grid(width={self._width}, height={self._height}, cells={self._cells!r})"

    # ------------------------------------------------------------ manipulation
    def resize(self, width: int, height: int, default: int = 0) -> None:
        """Reallocate the grid; previous contents are discarded."""

        _check_dimensions(width, height)
        _check_value(default)
        self._width = width
        self._height = height
        self._cells = [default] * (width * height)

    def clear(self, value: int = 0) -> None:
        _check_value(value)
        self._cells[:] = [value] * len(self._cells)

    def copy_from(self, other: "Grid") -> None:
        """Overwrite every cell with ``other``'s; dimensions must match."""

        if other.shape != self.shape:
            raise ValueError(f"cannot copy {other.width}x{other.height} grid into {self._width}x{self._height} grid")
        self._cells[:] = other._cells

    def copy(self) -> "Grid":
        clone = Grid(self._width, self._height)
        clone._cells[:] = self._cells
        return clone

    def raw_cells(self) -> List[int]:
        """Return a row-major copy of the cells."""

        return list(self._cells)

    def rows(self) -> List[List[int]]:
        w = self._width
        return [self._cells[y * w : (y + 1) * w] for y in range(self._height)]

    def palette(self) -> List[int]:
        return sorted(set(self._cells))

    def to_numpy(self):
        """Return the grid as a ``(height, width)`` int64 NumPy array."""

        import numpy as np

        return np.array(self._cells, dtype=np.int64).reshape(self._height, self._width)

    # ----------------------------------------------------------- constructions
    @classmethod
    def from_flat(cls, values: Sequence[int], width: int, height: int | None = None) -> "Grid":
        if width <= 0:
            raise ValueError("width must be positive")
        if height is None:
            if len(values) % width != 0:
                raise ValueError("values length must be divisible by width")
            height = len(values) // width
        if len(values) != width * height:
            raise ValueError(f"expected {width * height} values, got {len(values)}")

        grid = cls(width, height)
        grid._cells[:] = [int(value) for value in values]
        return grid

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Grid":
        if not rows:
            raise ValueError("grid must contain at least one row")

        width = len(rows[0])
        if width == 0:
            raise ValueError("grid must contain at least one column")
        for row in rows:
            if len(row) != width:
                raise ValueError("grid rows must all be the same length")
            for value in row:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise TypeError("grid values must be integers")

        return cls.from_flat([value for row in rows for value in row], width, len(rows))


__all__ = ["Grid", "SeededRNG"]
