"""Apple collection: static placement, consumed by the chain's head."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from gravity_snake.grid import Cell

logger = logging.getLogger(__name__)


class Apples:
    """Set of apple cells for one level attempt.

    Apples never respawn. Each successful :meth:`eat_at` reports the number
    of apples left to *on_change*, which is how the portal learns it has
    been activated.
    """

    def __init__(
        self,
        positions: Iterable[Cell] = (),
        on_change: Callable[[int], None] | None = None,
    ) -> None:
        self._cells: set[Cell] = set(positions)
        self._on_change = on_change

    def count(self) -> int:
        return len(self._cells)

    def positions(self) -> frozenset[Cell]:
        return frozenset(self._cells)

    def has_at(self, cell: Cell) -> bool:
        return cell in self._cells

    def eat_at(self, cell: Cell) -> bool:
        """Remove the apple at *cell*. Returns True if one was removed."""
        if cell not in self._cells:
            return False
        self._cells.remove(cell)
        remaining = len(self._cells)
        logger.debug("Apple eaten at %s, %d remaining.", cell, remaining)
        if self._on_change is not None:
            self._on_change(remaining)
        return True

    def to_dict(self) -> dict:
        """Serialize apple state to a dictionary."""
        return {
            "positions": [list(p) for p in sorted(self._cells)],
            "remaining": len(self._cells),
        }
