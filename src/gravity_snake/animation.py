"""Completion tokens for cosmetic transitions.

Every hook is a coroutine: calling it starts the transition and awaiting
it waits for completion. The step pipeline runs several hooks together
with :func:`asyncio.gather` when they happen at the same time, such as
the chain's translation and a pushed block sliding along with it.

:class:`Animator` completes instantly and is what headless play and the
tests use. :class:`PacedAnimator` waits the durations from an
:class:`~gravity_snake.config.EngineConfig` so a presentation layer can
follow along in real time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from gravity_snake.config import EngineConfig
from gravity_snake.grid import Cell


class Animator:
    """Instant animator. Each hook yields to the event loop once."""

    async def translate_chain(
        self, old: Sequence[Cell], new: Sequence[Cell], grew: bool,
    ) -> None:
        await asyncio.sleep(0)

    async def drop_chain(self, chain: Sequence[Cell]) -> None:
        await asyncio.sleep(0)

    async def bounce(self, chain: Sequence[Cell]) -> None:
        await asyncio.sleep(0)

    async def relocate_block(self, src: Cell, dst: Cell) -> None:
        await asyncio.sleep(0)

    async def drop_blocks(self, cells: Sequence[Cell]) -> None:
        await asyncio.sleep(0)

    async def remove_block(self, cell: Cell) -> None:
        await asyncio.sleep(0)

    async def flash_loss(self) -> None:
        await asyncio.sleep(0)

    async def flash_win(self) -> None:
        await asyncio.sleep(0)

    async def hold(self, seconds: float) -> None:
        """Pause without changing anything on screen."""
        await asyncio.sleep(0)


class PacedAnimator(Animator):
    """Animator whose tokens complete after the configured durations."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    async def translate_chain(
        self, old: Sequence[Cell], new: Sequence[Cell], grew: bool,
    ) -> None:
        await asyncio.sleep(self.config.move_ms / 1000.0)

    async def drop_chain(self, chain: Sequence[Cell]) -> None:
        await asyncio.sleep(self.config.fall_ms / 1000.0)

    async def bounce(self, chain: Sequence[Cell]) -> None:
        # Half a cell up and back down.
        await asyncio.sleep(2 * self.config.bounce_ms / 1000.0)

    async def relocate_block(self, src: Cell, dst: Cell) -> None:
        await asyncio.sleep(self.config.push_ms / 1000.0)

    async def drop_blocks(self, cells: Sequence[Cell]) -> None:
        await asyncio.sleep(self.config.block_fall_ms / 1000.0)

    async def flash_loss(self) -> None:
        await asyncio.sleep(self.config.loss_flash_ms / 1000.0)

    async def flash_win(self) -> None:
        await asyncio.sleep(self.config.win_flash_ms / 1000.0)

    async def hold(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
