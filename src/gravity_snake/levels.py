"""Built-in level catalogue and JSON level files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from gravity_snake.parser import ParsedLevel, parse_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelDef:
    """A named level map."""

    key: str
    map: tuple[str, ...]

    def parse(self) -> ParsedLevel:
        return parse_level(self.map)

    def to_dict(self) -> dict:
        return {"key": self.key, "map": list(self.map)}


BUILTIN_LEVELS: tuple[LevelDef, ...] = (
    LevelDef(
        key="first-steps",
        map=(
            ".......",
            ".......",
            "21S.o.P",
            "#######",
        ),
    ),
    LevelDef(
        key="mind-the-gap",
        map=(
            "........",
            "21S.o..P",
            "###.####",
        ),
    ),
    LevelDef(
        key="stepping-stone",
        map=(
            ".........",
            "........P",
            ".........",
            "21S.B..o.",
            "######.##",
            "######.##",
        ),
    ),
)


def builtin_keys() -> list[str]:
    return [level.key for level in BUILTIN_LEVELS]


def get_level(key: str, levels: tuple[LevelDef, ...] = BUILTIN_LEVELS) -> LevelDef:
    """Look a level up by key; raises ``KeyError`` when missing."""
    for level in levels:
        if level.key == key:
            return level
    raise KeyError(f"Level {key!r} not found.")


def load_levels(path: str | Path) -> tuple[LevelDef, ...]:
    """Read a JSON list of ``{"key": ..., "map": [...]}`` objects."""
    raw = json.loads(Path(path).read_text())
    if not isinstance(raw, list):
        raise ValueError("Level file must contain a JSON list.")
    levels = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict) or "map" not in entry:
            raise ValueError(f"Level entry {i} has no map.")
        levels.append(
            LevelDef(key=str(entry.get("key", f"level-{i}")), map=tuple(entry["map"])),
        )
    logger.info("Loaded %d levels from %s", len(levels), path)
    return tuple(levels)


def save_levels(levels: tuple[LevelDef, ...] | list[LevelDef], path: str | Path) -> None:
    """Write levels in the format :func:`load_levels` reads."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps([level.to_dict() for level in levels], indent=2))
    logger.info("Saved %d levels to %s", len(levels), p)
