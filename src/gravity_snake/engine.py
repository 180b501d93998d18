"""Step pipeline: validates, applies and settles one move at a time."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from gravity_snake.animation import Animator
from gravity_snake.config import EngineConfig
from gravity_snake.gravity import (
    SupportMode,
    resolve_block_gravity,
    resolve_chain_gravity,
)
from gravity_snake.grid import Cell
from gravity_snake.parser import ParsedLevel, parse_level
from gravity_snake.session import LevelResult, SessionStats
from gravity_snake.snake import Direction
from gravity_snake.world import World

logger = logging.getLogger(__name__)


class PipelineState(enum.Enum):
    """Whether the pipeline accepts input."""

    IDLE = "idle"
    RESOLVING = "resolving"
    WON = "won"


class MoveOutcome(enum.Enum):
    """Result of a single :meth:`StepPipeline.request_move` call."""

    MOVED = "moved"
    REJECTED = "rejected"
    BOUNCED = "bounced"
    DROPPED = "dropped"
    IGNORED = "ignored"
    WON = "won"
    LOST = "lost"


class GameEvent(enum.Enum):
    """Signals emitted to subscribers."""

    STEP_COMPLETED = "step_completed"
    APPLES_REMAINING = "apples_remaining"
    LEVEL_WON = "level_won"
    LEVEL_RESTARTED = "level_restarted"


Listener = Callable[[GameEvent, Any], None]


@dataclass(frozen=True)
class MovePlan:
    """A validated move, ready to be committed."""

    direction: Direction
    target: Cell
    grew: bool
    new_chain: tuple[Cell, ...]
    push: tuple[Cell, Cell] | None = None


def plan_move(world: World, direction: Direction) -> MovePlan | None:
    """Validate moving the head one cell in *direction*.

    Returns ``None`` when the move is not allowed: the target is off the
    map, a wall, part of the body that stays put, or a push-block that
    cannot be shoved.
    """
    snake = world.snake
    target = direction.apply(snake.head)
    if not world.in_bounds(target) or world.is_wall(target):
        return None

    grew = world.is_apple(target)
    # The tail vacates its cell unless the chain grows this step.
    body = snake.segments if grew else snake.segments[:-1]
    if target in body:
        return None

    new_chain = tuple(snake.planned_body(target, grew))
    push: tuple[Cell, Cell] | None = None
    if world.is_block(target):
        dest = direction.apply(target)
        if (
            not world.in_bounds(dest)
            or world.is_wall(dest)
            or world.is_apple(dest)
            or world.is_block(dest)
            or dest in new_chain
        ):
            return None
        push = (target, dest)

    return MovePlan(
        direction=direction,
        target=target,
        grew=grew,
        new_chain=new_chain,
        push=push,
    )


class StepPipeline:
    """Turn-based engine for one level.

    Each call to :meth:`request_move` runs a full turn: bounce guard,
    planning, the committed move with its push, the win check, gravity
    for blocks and chain, the bridge pass after a turn, apple
    consumption and a final win check. Input arriving while a turn is
    still resolving is dropped.
    """

    def __init__(
        self,
        level: ParsedLevel | Sequence[str],
        level_key: str = "custom",
        config: EngineConfig | None = None,
        animator: Animator | None = None,
        session: SessionStats | None = None,
    ) -> None:
        self.level = level if isinstance(level, ParsedLevel) else parse_level(level)
        self.level_key = level_key
        self.config = config or EngineConfig()
        self.animator = animator or Animator()
        self.session = session or SessionStats()
        self.state = PipelineState.IDLE
        self.restarts = 0
        self.result: LevelResult | None = None
        self._listeners: dict[GameEvent, list[Listener]] = {
            event: [] for event in GameEvent
        }
        self.world = self._build_world()

    # --- signals ---

    def subscribe(self, event: GameEvent, listener: Listener) -> None:
        """Register *listener* to be called as ``listener(event, payload)``."""
        self._listeners[event].append(listener)

    def unsubscribe(self, event: GameEvent, listener: Listener) -> None:
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)

    def _emit(self, event: GameEvent, payload: Any = None) -> None:
        for listener in list(self._listeners[event]):
            listener(event, payload)

    # --- lifecycle ---

    def _build_world(self) -> World:
        return World.from_level(
            self.level,
            animator=self.animator,
            on_apples_change=self._on_apples_change,
        )

    def _on_apples_change(self, remaining: int) -> None:
        self._emit(GameEvent.APPLES_REMAINING, remaining)

    def restart(self) -> None:
        """Restart the level from its parsed layout.

        Allowed while idle or after a win, never in the middle of a turn.
        """
        if self.state is PipelineState.RESOLVING:
            raise ValueError("Cannot restart while a move is resolving.")
        self._reset()

    def _reset(self) -> None:
        """Rebuild every mutable entity from the parsed level."""
        self.world = self._build_world()
        self.session.reset()
        self.result = None
        self.state = PipelineState.IDLE
        self.restarts += 1
        logger.info("Level %s restarted (restart #%d).", self.level_key, self.restarts)
        self._emit(GameEvent.LEVEL_RESTARTED, self.world.apples.count())

    @property
    def won(self) -> bool:
        return self.state is PipelineState.WON

    # --- input ---

    async def request_move(self, direction: Direction | str) -> MoveOutcome:
        """Run one turn in *direction*.

        Every input source funnels through here. Returns immediately with
        ``DROPPED`` while another turn is resolving and ``IGNORED`` once the
        level is won.
        """
        if isinstance(direction, str):
            direction = Direction.parse(direction)
        if self.state is PipelineState.WON:
            return MoveOutcome.IGNORED
        if self.state is PipelineState.RESOLVING:
            logger.debug("Dropped %s input while resolving.", direction.name)
            return MoveOutcome.DROPPED

        self.state = PipelineState.RESOLVING
        try:
            return await self._run_turn(direction)
        finally:
            if self.state is PipelineState.RESOLVING:
                self.state = PipelineState.IDLE

    async def _run_turn(self, direction: Direction) -> MoveOutcome:
        world = self.world

        if direction is Direction.UP and world.snake.in_one_column():
            await self.animator.bounce(world.snake.segments)
            return MoveOutcome.BOUNCED

        plan = plan_move(world, direction)
        if plan is None:
            logger.debug("Rejected %s move from %s.", direction.name, world.snake.head)
            return MoveOutcome.REJECTED
        world.direction = direction

        old_chain = list(world.snake.segments)
        world.replace_chain(plan.new_chain)
        tokens: list[Awaitable[None]] = [
            self.animator.translate_chain(old_chain, plan.new_chain, plan.grew),
        ]
        if plan.push is not None:
            tokens.append(world.blocks.relocate(*plan.push))
        await asyncio.gather(*tokens)
        self.session.record_step()
        self._emit(GameEvent.STEP_COMPLETED)

        if world.is_win_position(world.snake.head):
            return await self._handle_win(direction)

        if await self._settle(SupportMode.ANY):
            return await self._handle_loss()

        if world.last_direction is not None and direction is not world.last_direction:
            if await self._settle_chain(SupportMode.ALL):
                return await self._handle_loss()

        if plan.grew:
            world.consume_apple(plan.target)
            if await self._settle(SupportMode.ANY):
                return await self._handle_loss()

        if world.is_win_position(world.snake.head):
            return await self._handle_win(direction)

        world.last_direction = direction
        return MoveOutcome.MOVED

    async def _settle(self, mode: SupportMode) -> bool:
        """Blocks first, then the chain. Returns True if the chain fell off."""
        await resolve_block_gravity(self.world)
        return await self._settle_chain(mode)

    async def _settle_chain(self, mode: SupportMode) -> bool:
        result = await resolve_chain_gravity(self.world, mode, self.animator)
        return result.fell_off

    async def _handle_win(self, direction: Direction) -> MoveOutcome:
        self.state = PipelineState.WON
        self.world.last_direction = direction
        self.session.stop_timer()
        await self.animator.flash_win()
        self.result = LevelResult(
            level_key=self.level_key,
            steps=self.session.steps,
            elapsed_ms=self.session.elapsed_ms(),
        )
        logger.info(
            "Level %s won in %d steps (%d ms).",
            self.level_key, self.result.steps, self.result.elapsed_ms,
        )
        self._emit(GameEvent.LEVEL_WON, self.result)
        return MoveOutcome.WON

    async def _handle_loss(self) -> MoveOutcome:
        logger.info(
            "Chain fell off level %s after %d steps.",
            self.level_key, self.session.steps,
        )
        await asyncio.gather(
            self.animator.flash_loss(),
            self.animator.hold(self.config.restart_delay_ms / 1000.0),
        )
        self._reset()
        return MoveOutcome.LOST

    # --- serialization ---

    def get_state(self) -> dict:
        """Return the full, serializable pipeline state."""
        return {
            "level_key": self.level_key,
            "state": self.state.value,
            "restarts": self.restarts,
            "session": self.session.to_dict(),
            "world": self.world.to_dict(),
        }
