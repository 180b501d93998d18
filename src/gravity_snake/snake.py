"""Chain representation and direction handling."""

from __future__ import annotations

import enum
from collections.abc import Iterable

from gravity_snake.grid import Cell


class Direction(enum.Enum):
    """Cardinal movement directions with (dx, dy) values."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    def apply(self, cell: Cell) -> Cell:
        """Return *cell* shifted one step in this direction."""
        dx, dy = self.value
        return cell[0] + dx, cell[1] + dy

    @classmethod
    def parse(cls, name: str) -> Direction:
        """Look up a direction by case-insensitive name (``"up"``, ``"Left"``)."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown direction: {name!r}.") from None


class Snake:
    """A chain of grid cells; ``segments[0]`` is the head.

    The snake only stores positions. Whether a move is legal is decided by
    the step pipeline, which knows about walls, apples and blocks.
    """

    def __init__(self, segments: Iterable[Cell]) -> None:
        self.segments: list[Cell] = [(int(x), int(y)) for x, y in segments]
        if not self.segments:
            raise ValueError("Snake length must be at least 1.")

    @classmethod
    def horizontal(cls, head: Cell, length: int = 3) -> Snake:
        """Build a chain facing right with the body trailing to the left."""
        if length < 1:
            raise ValueError("Snake length must be at least 1.")
        x, y = head
        return cls((x - i, y) for i in range(length))

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def head(self) -> Cell:
        """Return the head coordinate."""
        return self.segments[0]

    @property
    def tail(self) -> Cell:
        return self.segments[-1]

    def facing(self) -> Direction:
        """Infer the direction of travel from the head and the next segment."""
        if len(self.segments) < 2:
            return Direction.RIGHT
        (hx, hy), (nx, ny) = self.segments[0], self.segments[1]
        if ny == hy:
            return Direction.RIGHT if nx < hx else Direction.LEFT
        return Direction.DOWN if ny < hy else Direction.UP

    def occupies(self, cell: Cell) -> bool:
        """Check whether the chain occupies a given cell."""
        return cell in self.segments

    def in_one_column(self) -> bool:
        """True when every segment shares the head's x coordinate."""
        x = self.head[0]
        return all(seg[0] == x for seg in self.segments)

    def planned_body(self, target: Cell, grow: bool) -> list[Cell]:
        """Compute the chain after the head moves to *target*.

        The tail is dropped unless the move grows the chain.
        """
        kept = self.segments if grow else self.segments[:-1]
        return [target, *kept]

    def replace(self, cells: Iterable[Cell]) -> None:
        """Overwrite every segment position."""
        new_segments = list(cells)
        if not new_segments:
            raise ValueError("Snake length must be at least 1.")
        self.segments = new_segments

    def shift_down(self) -> None:
        """Move every segment one row down."""
        self.segments = [(x, y + 1) for x, y in self.segments]

    def to_dict(self) -> dict:
        """Serialize snake state to a dictionary."""
        return {
            "body": [list(seg) for seg in self.segments],
            "length": len(self.segments),
        }
