"""Command-line front end: inspect levels and replay move sequences."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from gravity_snake.animation import Animator, PacedAnimator
from gravity_snake.config import EngineConfig
from gravity_snake.engine import MoveOutcome, StepPipeline
from gravity_snake.levels import BUILTIN_LEVELS, LevelDef, get_level, load_levels
from gravity_snake.snake import Direction

logger = logging.getLogger(__name__)

# Single-letter move codes accepted by ``play --moves``.
_MOVE_CODES: dict[str, Direction] = {
    "U": Direction.UP,
    "D": Direction.DOWN,
    "L": Direction.LEFT,
    "R": Direction.RIGHT,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gravity-snake",
        description="Gravity snake puzzle engine: level tools and headless play.",
    )
    parser.add_argument(
        "--levels-file", type=str, default=None,
        help="JSON level file to use instead of the built-in levels.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    sub.add_parser("levels", help="List available level keys.")

    show_p = sub.add_parser("show", help="Print a parsed level.")
    show_p.add_argument("level", help="Level key.")

    play_p = sub.add_parser("play", help="Replay a move sequence on a level.")
    play_p.add_argument("level", help="Level key.")
    play_p.add_argument(
        "--moves", type=str, required=True,
        help="Moves as letters U/D/L/R, e.g. 'RRUR'.",
    )
    play_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON engine config file.",
    )
    play_p.add_argument(
        "--paced", action="store_true",
        help="Wait out animation durations instead of resolving instantly.",
    )
    play_p.add_argument(
        "--json", action="store_true", dest="as_json",
        help="Print the final state as JSON.",
    )

    return parser


def parse_moves(text: str) -> list[Direction]:
    """Turn ``"RRu d"`` into directions; whitespace is ignored."""
    moves = []
    for ch in text.upper():
        if ch.isspace():
            continue
        if ch not in _MOVE_CODES:
            raise ValueError(f"Unknown move code: {ch!r}.")
        moves.append(_MOVE_CODES[ch])
    return moves


def _levels(args: argparse.Namespace) -> tuple[LevelDef, ...]:
    if args.levels_file:
        return load_levels(args.levels_file)
    return BUILTIN_LEVELS


def _run_levels(args: argparse.Namespace) -> int:
    for level in _levels(args):
        print(level.key)  # noqa: T201
    return 0


def _run_show(args: argparse.Namespace) -> int:
    level = get_level(args.level, _levels(args))
    parsed = level.parse()
    print(f"{level.key}: {parsed.cols}x{parsed.rows}")  # noqa: T201
    print(  # noqa: T201
        f"apples={len(parsed.apples)} blocks={len(parsed.push_blocks)} "
        f"portal={parsed.portal} snake={list(parsed.initial_snake)}"
    )
    for row in level.map:
        print(row)  # noqa: T201
    return 0


async def _replay(pipeline: StepPipeline, moves: list[Direction]) -> list[MoveOutcome]:
    outcomes = []
    for move in moves:
        outcome = await pipeline.request_move(move)
        logger.info("%s -> %s", move.name, outcome.value)
        outcomes.append(outcome)
        if outcome is MoveOutcome.WON:
            break
    return outcomes


def _run_play(args: argparse.Namespace) -> int:
    level = get_level(args.level, _levels(args))
    config = EngineConfig.load(args.config) if args.config else EngineConfig()
    animator: Animator = PacedAnimator(config) if args.paced else Animator()
    pipeline = StepPipeline(
        level.parse(), level_key=level.key, config=config, animator=animator,
    )
    outcomes = asyncio.run(_replay(pipeline, parse_moves(args.moves)))

    if args.as_json:
        state = pipeline.get_state()
        state["outcomes"] = [o.value for o in outcomes]
        print(json.dumps(state, indent=2))  # noqa: T201
    else:
        for row in pipeline.world.to_text():
            print(row)  # noqa: T201
        print(  # noqa: T201
            f"state={pipeline.state.value} steps={pipeline.session.steps} "
            f"restarts={pipeline.restarts}"
        )
    return 0 if pipeline.won else 2


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``gravity-snake`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "levels": _run_levels,
        "show": _run_show,
        "play": _run_play,
    }
    try:
        return handlers[args.command](args)
    except (KeyError, ValueError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
