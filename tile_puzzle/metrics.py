"""Timing, check results and per-session counters."""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional


def format_elapsed(ms: float) -> str:
    """Format milliseconds as ``MM:SS`` or ``H:MM:SS``."""
    s = int(ms // 1000)
    m, sec = divmod(s, 60)
    h, m = divmod(m, 60)
    if h > 0:
        return f"{h}:{m:02d}:{sec:02d}"
    return f"{m:02d}:{sec:02d}"


class Stopwatch:
    """
    Elapsed-time measurement from a monotonic start timestamp.

    Elapsed time is recomputed from the start stamp on every read, so
    nothing accumulates between reads.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._started_at: Optional[float] = None
        self._stopped_ms: float = 0.0

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        if self.running:
            return
        self._started_at = self._clock()
        self._stopped_ms = 0.0

    def stop(self) -> float:
        """Stop and freeze the elapsed time; returns it in milliseconds."""
        if self._started_at is not None:
            self._stopped_ms = (self._clock() - self._started_at) * 1000
            self._started_at = None
        return self._stopped_ms

    def reset(self) -> None:
        self._started_at = None
        self._stopped_ms = 0.0

    @property
    def elapsed_ms(self) -> int:
        if self._started_at is not None:
            return int((self._clock() - self._started_at) * 1000)
        return int(self._stopped_ms)


@dataclass
class CheckResult:
    """Result of checking the board."""

    correct: int
    total: int
    solved: bool
    elapsed_ms: int = 0
    points_awarded: int = 0
    rank: Optional[int] = None
    leaderboard_total: Optional[int] = None

    @property
    def accuracy(self) -> float:
        """Correct cells as percentage."""
        return (self.correct / self.total) * 100 if self.total > 0 else 0

    def message(self) -> str:
        """Short status line for the player."""
        if not self.solved:
            return f"Scored {self.correct}/{self.total}"
        text = f"Solved in {format_elapsed(self.elapsed_ms)}!"
        if self.points_awarded:
            text += f" +{self.points_awarded} point"
        if self.rank is not None:
            text += f" Rank {self.rank} of {self.leaderboard_total}."
        return text

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "correct": self.correct,
            "total": self.total,
            "solved": self.solved,
            "accuracy": self.accuracy,
            "elapsed_ms": self.elapsed_ms,
            "points_awarded": self.points_awarded,
            "rank": self.rank,
            "leaderboard_total": self.leaderboard_total,
        }


@dataclass
class SessionMetrics:
    """Counters for one loaded puzzle."""

    placements: int = 0
    rejected: int = 0
    evictions: int = 0
    checks: int = 0
    best_correct: int = 0
    auto_solved: bool = False
    checks_history: list[CheckResult] = field(default_factory=list)

    def record_placement(self, evicted: bool) -> None:
        self.placements += 1
        if evicted:
            self.evictions += 1

    def record_rejection(self) -> None:
        self.rejected += 1

    def record_check(self, result: CheckResult) -> None:
        self.checks += 1
        self.best_correct = max(self.best_correct, result.correct)
        self.checks_history.append(result)

    def get_summary(self) -> dict:
        """Get a summary of current metrics."""
        return {
            "placements": self.placements,
            "rejected": self.rejected,
            "evictions": self.evictions,
            "checks": self.checks,
            "best_correct": self.best_correct,
            "auto_solved": self.auto_solved,
        }

    def save(self, path: str | Path) -> None:
        """Save the summary and check history to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.get_summary()
        data["checks_history"] = [c.to_dict() for c in self.checks_history]
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
