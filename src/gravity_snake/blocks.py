"""Push-blocks: obstacles the head can shove one cell and that fall."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from gravity_snake.animation import Animator
from gravity_snake.grid import Cell

logger = logging.getLogger(__name__)


class PushBlocks:
    """Positions of every push-block in the level.

    Mutations update the model immediately and hand back the animator's
    completion token so the caller decides what to wait on.
    """

    def __init__(
        self,
        positions: Iterable[Cell] = (),
        animator: Animator | None = None,
    ) -> None:
        self._cells: set[Cell] = set(positions)
        self.animator = animator or Animator()

    def __len__(self) -> int:
        return len(self._cells)

    def positions(self) -> frozenset[Cell]:
        return frozenset(self._cells)

    def has_at(self, cell: Cell) -> bool:
        return cell in self._cells

    def relocate(self, src: Cell, dst: Cell) -> Awaitable[None]:
        """Move the block at *src* to *dst*.

        Returns a token that completes when the slide has finished.
        """
        if src not in self._cells:
            raise KeyError(f"No push-block at {src}.")
        if dst in self._cells:
            raise ValueError(f"Cell {dst} already holds a push-block.")
        self._cells.remove(src)
        self._cells.add(dst)
        return self.animator.relocate_block(src, dst)

    async def resolve_gravity(
        self,
        solid_below: Callable[[Cell], bool],
        in_bounds: Callable[[Cell], bool],
    ) -> int:
        """Drop unsupported blocks one row at a time until all are settled.

        *solid_below* answers whether the cell under a block gives it
        support. Fallers of one round are chosen against the positions at
        the start of that round and dropped together, so a block resting on
        a falling block follows one round later. Blocks whose next row is
        off the map are removed. Returns the number of rounds that moved
        at least one block.
        """
        rounds = 0
        while True:
            fallers: list[Cell] = []
            for cell in sorted(self._cells):
                x, y = cell
                if not in_bounds((x, y + 1)):
                    self._cells.discard(cell)
                    logger.debug("Push-block at %s fell off the map.", cell)
                    await self.animator.remove_block(cell)
                    continue
                if not solid_below(cell):
                    fallers.append(cell)
            if not fallers:
                return rounds

            for cell in fallers:
                self._cells.discard(cell)
            for x, y in fallers:
                self._cells.add((x, y + 1))
            rounds += 1
            await self.animator.drop_blocks(fallers)

    def to_dict(self) -> dict:
        """Serialize block state to a dictionary."""
        return {"positions": [list(p) for p in sorted(self._cells)]}
