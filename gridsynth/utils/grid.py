"""Grid comparison helpers."""

from __future__ import annotations

from gridsynth.grid import Grid


def count_changed_cells(before: Grid, after: Grid) -> int:
    """Return the number of cells that differ between two same-shaped grids."""

    if before.shape != after.shape:
        raise ValueError(f"cannot compare {before.width}x{before.height} grid with {after.width}x{after.height} grid")
    return sum(1 for prev, curr in zip(before, after) if prev != curr)


__all__ = ["count_changed_cells"]
