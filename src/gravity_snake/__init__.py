"""Gravity Snake: turn-based step engine for a falling-chain puzzle."""

from gravity_snake.animation import Animator, PacedAnimator
from gravity_snake.config import EngineConfig
from gravity_snake.engine import GameEvent, MoveOutcome, PipelineState, StepPipeline
from gravity_snake.parser import LevelFormatError, ParsedLevel, parse_level
from gravity_snake.snake import Direction, Snake
from gravity_snake.world import World

__all__ = [
    "Animator",
    "Direction",
    "EngineConfig",
    "GameEvent",
    "LevelFormatError",
    "MoveOutcome",
    "PacedAnimator",
    "ParsedLevel",
    "PipelineState",
    "Snake",
    "StepPipeline",
    "World",
    "parse_level",
]
