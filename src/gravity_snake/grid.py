"""Static terrain for a level: dimensions and walls."""

from __future__ import annotations

import enum
from collections.abc import Iterable

import numpy as np

# Grid coordinate as (x, y); y grows downward.
Cell = tuple[int, int]


class CellType(enum.IntEnum):
    """Integer codes stored in the terrain array."""

    EMPTY = 0
    WALL = 1


class Grid:
    """NumPy-backed terrain with fixed dimensions.

    Cells are addressed as ``(x, y)``; the backing array is indexed
    ``cells[y, x]`` so that rows of the array are rows of the map.
    """

    def __init__(self, cols: int, rows: int, walls: Iterable[Cell] = ()) -> None:
        if cols < 1 or rows < 1:
            raise ValueError("Grid dimensions must be at least 1×1.")
        self.cols = cols
        self.rows = rows
        self.cells = np.zeros((rows, cols), dtype=np.int8)
        for x, y in walls:
            if self.in_bounds((x, y)):
                self.cells[y, x] = CellType.WALL
        self.walls: frozenset[Cell] = frozenset(
            (int(x), int(y))
            for y, x in zip(*np.nonzero(self.cells == CellType.WALL), strict=True)
        )

    def in_bounds(self, cell: Cell) -> bool:
        """Check whether a coordinate lies within the grid."""
        x, y = cell
        return 0 <= x < self.cols and 0 <= y < self.rows

    def is_wall(self, cell: Cell) -> bool:
        """Return True for in-bounds wall cells."""
        return self.in_bounds(cell) and self.get(cell) == CellType.WALL

    def get(self, cell: Cell) -> CellType:
        """Return the cell type at the given coordinate."""
        x, y = cell
        return CellType(self.cells[y, x])

    def to_dict(self) -> dict:
        """Serialize terrain to a dictionary."""
        return {
            "cols": self.cols,
            "rows": self.rows,
            "walls": [list(c) for c in sorted(self.walls)],
        }
