"""Support detection and gravity resolution for the chain and push-blocks."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

import numpy as np

from gravity_snake.animation import Animator
from gravity_snake.grid import Cell
from gravity_snake.world import World

logger = logging.getLogger(__name__)


class SupportMode(enum.Enum):
    """How much of the chain must rest on something for it to stay put."""

    ANY = "any"
    # Bridge mode: every segment needs a solid cell underneath.
    ALL = "all"


@dataclass(frozen=True)
class GravityResult:
    """Outcome of one chain gravity resolution."""

    changed: bool = False
    fell_off: bool = False


def support_grid(world: World, include_chain: bool = False) -> np.ndarray:
    """Boolean ``(rows, cols)`` matrix of solid cells, indexed ``[y, x]``.

    Walls, apples and push-blocks are solid; chain segments are added only
    when *include_chain* is set.
    """
    solids = world.grid.cells != 0
    extra: list[Cell] = [*world.apples.positions(), *world.blocks.positions()]
    if include_chain:
        extra.extend(world.snake.segments)
    for x, y in extra:
        if world.in_bounds((x, y)):
            solids[y, x] = True
    return solids


def _solid_at(solids: np.ndarray, x: int, y: int) -> bool:
    rows, cols = solids.shape
    return 0 <= y < rows and 0 <= x < cols and bool(solids[y, x])


def has_support(
    world: World,
    mode: SupportMode = SupportMode.ANY,
    solids: np.ndarray | None = None,
) -> bool:
    """Check whether the chain is held up under *mode*."""
    if solids is None:
        solids = support_grid(world)
    supported = [_solid_at(solids, x, y + 1) for x, y in world.snake.segments]
    if mode is SupportMode.ALL:
        return all(supported)
    return any(supported)


def gravity_step_possible(world: World, solids: np.ndarray) -> bool:
    """True when every segment can move one row down into empty space."""
    rows = solids.shape[0]
    for x, y in world.snake.segments:
        if y + 1 >= rows or not world.in_bounds((x, y + 1)):
            return False
        if solids[y + 1, x]:
            return False
    return True


def _over_bottom_edge(world: World) -> bool:
    return any(y + 1 >= world.rows for _, y in world.snake.segments)


async def resolve_chain_gravity(
    world: World,
    mode: SupportMode = SupportMode.ANY,
    animator: Animator | None = None,
) -> GravityResult:
    """Drop the whole chain one row at a time until *mode* support holds.

    An unsupported chain with any segment on the bottom row falls off the
    map. A chain that cannot drop for another reason stays where it is.
    Each drop awaits ``animator.drop_chain`` before the next support test,
    so the loop runs at most ``world.rows`` times.
    """
    animator = animator or Animator()
    if has_support(world, mode):
        return GravityResult()
    if _over_bottom_edge(world):
        logger.debug("Chain unsupported (%s) at the bottom edge.", mode.value)
        return GravityResult(fell_off=True)

    changed = False
    while True:
        solids = support_grid(world)
        if has_support(world, mode, solids):
            break
        if not gravity_step_possible(world, solids):
            if _over_bottom_edge(world):
                return GravityResult(changed=changed, fell_off=True)
            break
        world.snake.shift_down()
        changed = True
        await animator.drop_chain(world.snake.segments)
    return GravityResult(changed=changed)


async def resolve_block_gravity(world: World) -> int:
    """Settle every push-block; the chain counts as support for blocks."""

    def solid_below(cell: Cell) -> bool:
        x, y = cell
        return world.is_solid((x, y + 1), include_chain=True)

    return await world.blocks.resolve_gravity(solid_below, world.in_bounds)
