"""Pacing configuration for animated play."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Durations (milliseconds) of the cosmetic transitions a step waits on.

    None of these values affect the outcome of a move; they only decide how
    long the pipeline stays in the resolving state when a paced animator is
    attached.
    """

    move_ms: int = 140
    fall_ms: int = 100
    block_fall_ms: int = 100
    min_push_ms: int = 40
    bounce_ms: int = 84
    loss_flash_ms: int = 220
    win_flash_ms: int = 200
    # Delay between the loss flash and the level restart.
    restart_delay_ms: int = 250

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"{f.name} must be >= 0.")

    @property
    def push_ms(self) -> int:
        return max(self.min_push_ms, self.move_ms)

    def to_dict(self) -> dict:
        """Serialize to a plain dict."""
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> EngineConfig:
        """Load config from a JSON file; unknown keys raise ``ValueError``."""
        raw = json.loads(Path(path).read_text())
        if not isinstance(raw, dict):
            raise ValueError("Config file must contain a JSON object.")
        unknown = sorted(set(raw) - {f.name for f in fields(cls)})
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}.")
        return cls(**raw)
