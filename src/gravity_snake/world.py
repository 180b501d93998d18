"""Authoritative grid-world state for one level attempt."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from gravity_snake.animation import Animator
from gravity_snake.apple import Apples
from gravity_snake.blocks import PushBlocks
from gravity_snake.grid import Cell, Grid
from gravity_snake.parser import ParsedLevel
from gravity_snake.snake import Direction, Snake

_TEXT_SYMBOLS = {
    "wall": "#",
    "apple": "o",
    "block": "B",
    "portal": "P",
    "head": "S",
    "body": "=",
    "empty": ".",
}


class World:
    """Walls, apples, push-blocks, portal and chain of one level.

    The world answers occupancy queries and exposes a handful of narrow
    mutations. It holds no animation or timing state; push-block
    relocation hands its completion token back to the caller.
    """

    def __init__(
        self,
        grid: Grid,
        snake: Snake,
        apples: Apples,
        blocks: PushBlocks,
        portal: Cell | None = None,
    ) -> None:
        self.grid = grid
        self.snake = snake
        self.apples = apples
        self.blocks = blocks
        self.portal = portal
        self.direction: Direction = snake.facing()
        self.last_direction: Direction | None = None

    @classmethod
    def from_level(
        cls,
        level: ParsedLevel,
        animator: Animator | None = None,
        on_apples_change: Callable[[int], None] | None = None,
    ) -> World:
        """Build a fresh world from parser output."""
        return cls(
            grid=Grid(level.cols, level.rows, level.walls),
            snake=Snake(level.initial_snake),
            apples=Apples(level.apples, on_change=on_apples_change),
            blocks=PushBlocks(level.push_blocks, animator=animator),
            portal=level.portal,
        )

    @property
    def rows(self) -> int:
        return self.grid.rows

    @property
    def cols(self) -> int:
        return self.grid.cols

    # --- queries ---

    def in_bounds(self, cell: Cell) -> bool:
        return self.grid.in_bounds(cell)

    def is_wall(self, cell: Cell) -> bool:
        return self.grid.is_wall(cell)

    def is_apple(self, cell: Cell) -> bool:
        return self.apples.has_at(cell)

    def is_block(self, cell: Cell) -> bool:
        return self.blocks.has_at(cell)

    def is_solid(self, cell: Cell, include_chain: bool = False) -> bool:
        """Whether *cell* can hold something up.

        Walls, apples and push-blocks are solid. Chain segments only
        count when *include_chain* is set, which is how push-blocks can
        rest on the snake while the snake cannot rest on itself.
        """
        if not self.in_bounds(cell):
            return False
        if self.is_wall(cell) or self.is_apple(cell) or self.is_block(cell):
            return True
        return include_chain and self.snake.occupies(cell)

    @property
    def portal_active(self) -> bool:
        return self.portal is not None and self.apples.count() == 0

    def is_win_position(self, cell: Cell) -> bool:
        """True when *cell* is the portal and the portal is active."""
        return self.portal_active and cell == self.portal

    # --- mutations ---

    def consume_apple(self, cell: Cell) -> bool:
        return self.apples.eat_at(cell)

    def replace_chain(self, cells: Iterable[Cell]) -> None:
        self.snake.replace(cells)

    # --- serialization ---

    def to_dict(self) -> dict:
        """Serialize world state to a dictionary."""
        return {
            "grid": self.grid.to_dict(),
            "snake": self.snake.to_dict(),
            "apples": self.apples.to_dict(),
            "blocks": self.blocks.to_dict(),
            "portal": list(self.portal) if self.portal is not None else None,
            "portal_active": self.portal_active,
            "direction": self.direction.name.lower(),
            "last_direction": (
                self.last_direction.name.lower()
                if self.last_direction is not None else None
            ),
        }

    def to_text(self) -> list[str]:
        """Render the world back into map rows, for logs and the CLI."""
        out = [
            [_TEXT_SYMBOLS["empty"]] * self.cols for _ in range(self.rows)
        ]

        def put(cell: Cell, key: str) -> None:
            if self.in_bounds(cell):
                out[cell[1]][cell[0]] = _TEXT_SYMBOLS[key]

        for cell in self.grid.walls:
            put(cell, "wall")
        if self.portal is not None:
            put(self.portal, "portal")
        for cell in self.apples.positions():
            put(cell, "apple")
        for cell in self.blocks.positions():
            put(cell, "block")
        for cell in self.snake.segments[1:]:
            put(cell, "body")
        put(self.snake.head, "head")
        return ["".join(row) for row in out]
