"""Per-attempt counters: steps taken and elapsed time."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class LevelResult:
    """What a finished level hands to the results view."""

    level_key: str
    steps: int
    elapsed_ms: int


@dataclass
class SessionStats:
    """Step counter and timer for the current level attempt.

    Owned by the step pipeline and reset whenever the level restarts.
    """

    clock: Callable[[], float] = time.monotonic
    steps: int = 0
    started_at: float = field(init=False)
    _stopped_elapsed: float | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.started_at = self.clock()

    def reset(self) -> None:
        """Zero the step counter and restart the timer."""
        self.steps = 0
        self.started_at = self.clock()
        self._stopped_elapsed = None

    def record_step(self) -> int:
        self.steps += 1
        return self.steps

    @property
    def stopped(self) -> bool:
        return self._stopped_elapsed is not None

    def stop_timer(self) -> None:
        """Freeze the elapsed time. Later calls keep the first value."""
        if self._stopped_elapsed is None:
            self._stopped_elapsed = max(0.0, self.clock() - self.started_at)

    def elapsed_ms(self) -> int:
        if self._stopped_elapsed is not None:
            return int(self._stopped_elapsed * 1000)
        return int(max(0.0, self.clock() - self.started_at) * 1000)

    def to_dict(self) -> dict:
        return {
            "steps": self.steps,
            "elapsed_ms": self.elapsed_ms(),
            "timer_stopped": self.stopped,
        }
