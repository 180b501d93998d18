"""Level map parsing.

A level is a list of equal-length text rows::

    #####
    #S1.P
    #.o.#
    #####

``#`` wall, ``o`` apple, ``B`` push-block, ``P`` portal, ``S`` chain head and
``1``-``9`` the chain's followers in ascending order. Any other character is
empty floor.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from gravity_snake.grid import Cell
from gravity_snake.snake import Snake

logger = logging.getLogger(__name__)

WALL = "#"
APPLE = "o"
PUSH_BLOCK = "B"
PORTAL = "P"
START = "S"

# Chain placed when a map has no start marker: a horizontal chain facing
# right, at FALLBACK_HEAD when it fits there, else on the first free run.
FALLBACK_HEAD: Cell = (2, 1)
FALLBACK_LENGTH = 3


class LevelFormatError(ValueError):
    """Raised for maps that cannot describe a level at all."""


@dataclass(frozen=True)
class ParsedLevel:
    """Typed entity sets extracted from a level map."""

    rows: int
    cols: int
    walls: frozenset[Cell]
    apples: frozenset[Cell]
    push_blocks: frozenset[Cell]
    portal: Cell | None = None
    snake: tuple[Cell, ...] | None = None
    fallback_snake: tuple[Cell, ...] | None = None

    @property
    def initial_snake(self) -> tuple[Cell, ...]:
        """The parsed chain, or the placed fallback when the map has none."""
        return self.snake or self.fallback_snake or ()


def _place_fallback(rows: int, cols: int, occupied: set[Cell]) -> tuple[Cell, ...]:
    """Find free floor for the fallback chain; raises if the map has none."""

    def fits(chain: list[Cell]) -> bool:
        return all(
            0 <= x < cols and 0 <= y < rows and (x, y) not in occupied
            for x, y in chain
        )

    heads = [FALLBACK_HEAD]
    heads.extend(
        (x, y) for y in range(rows) for x in range(FALLBACK_LENGTH - 1, cols)
    )
    for head in heads:
        chain = Snake.horizontal(head, FALLBACK_LENGTH).segments
        if fits(chain):
            return tuple(chain)
    raise LevelFormatError(
        f"Level has no start marker and no room for a {FALLBACK_LENGTH}-cell chain.",
    )


def parse_level(lines: Sequence[str]) -> ParsedLevel:
    """Parse a level map into a :class:`ParsedLevel`.

    The width is taken from the first row. Ragged rows are padded with floor
    or truncated rather than rejected.
    """
    rows = len(lines)
    cols = len(lines[0]) if rows else 0
    if rows == 0 or cols == 0:
        raise LevelFormatError("Level map must have at least one non-empty row.")

    walls: set[Cell] = set()
    apples: set[Cell] = set()
    blocks: set[Cell] = set()
    portal: Cell | None = None
    start: Cell | None = None
    followers: list[tuple[int, Cell]] = []

    for y, line in enumerate(lines):
        if len(line) != cols:
            logger.warning(
                "Row %d has width %d, expected %d; normalizing.",
                y, len(line), cols,
            )
        for x, ch in enumerate(line[:cols]):
            cell = (x, y)
            if ch == WALL:
                walls.add(cell)
            elif ch == APPLE:
                apples.add(cell)
            elif ch == PUSH_BLOCK:
                blocks.add(cell)
            elif ch == PORTAL:
                portal = cell
            elif ch == START:
                start = cell
            elif "1" <= ch <= "9":
                followers.append((int(ch), cell))

    snake: tuple[Cell, ...] | None = None
    fallback: tuple[Cell, ...] | None = None
    if start is not None:
        # Stable sort: equal digits keep their reading order.
        followers.sort(key=lambda item: item[0])
        snake = (start, *(cell for _, cell in followers))
    else:
        occupied = walls | apples | blocks
        if portal is not None:
            occupied.add(portal)
        fallback = _place_fallback(rows, cols, occupied)
        logger.warning(
            "Level has no start marker; using fallback chain %s.", list(fallback),
        )

    return ParsedLevel(
        rows=rows,
        cols=cols,
        walls=frozenset(walls),
        apples=frozenset(apples),
        push_blocks=frozenset(blocks),
        portal=portal,
        snake=snake,
        fallback_snake=fallback,
    )
