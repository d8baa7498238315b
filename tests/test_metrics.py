"""Tests for timing helpers and session metrics."""

import json
import tempfile
from pathlib import Path

import pytest

from tile_puzzle.metrics import CheckResult, SessionMetrics, Stopwatch, format_elapsed


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.mark.parametrize(
    "ms,expected",
    [(0, "00:00"), (999, "00:00"), (61_000, "01:01"), (3_599_000, "59:59"), (3_661_000, "1:01:01")],
)
def test_format_elapsed(ms, expected):
    """Test MM:SS and H:MM:SS formatting."""
    assert format_elapsed(ms) == expected


class TestStopwatch:
    """Tests for Stopwatch."""

    def test_not_started(self):
        assert Stopwatch(FakeClock()).elapsed_ms == 0

    def test_running(self):
        """Test that elapsed time follows the clock."""
        clock = FakeClock()
        watch = Stopwatch(clock)
        watch.start()
        clock.advance(2.5)

        assert watch.running
        assert watch.elapsed_ms == 2500

    def test_stop_freezes(self):
        """Test that a stopped watch no longer advances."""
        clock = FakeClock()
        watch = Stopwatch(clock)
        watch.start()
        clock.advance(3)

        assert watch.stop() == 3000
        clock.advance(10)
        assert watch.elapsed_ms == 3000
        assert not watch.running

    def test_start_twice_keeps_origin(self):
        """Test that restarting a running watch is a no-op."""
        clock = FakeClock()
        watch = Stopwatch(clock)
        watch.start()
        clock.advance(1)
        watch.start()
        clock.advance(1)

        assert watch.elapsed_ms == 2000

    def test_reset(self):
        clock = FakeClock()
        watch = Stopwatch(clock)
        watch.start()
        clock.advance(5)
        watch.reset()

        assert watch.elapsed_ms == 0
        assert not watch.running


class TestCheckResult:
    """Tests for CheckResult messages."""

    def test_unsolved_message(self):
        assert CheckResult(3, 4, False).message() == "Scored 3/4"

    def test_solved_message(self):
        """Test the solve line with reward and rank."""
        result = CheckResult(4, 4, True, elapsed_ms=65_000, points_awarded=1, rank=2, leaderboard_total=7)

        assert result.message() == "Solved in 01:05! +1 point Rank 2 of 7."

    def test_solved_without_reward(self):
        """Test the solve line after an auto-solve."""
        assert CheckResult(4, 4, True, elapsed_ms=0).message() == "Solved in 00:00!"


class TestSessionMetrics:
    """Tests for SessionMetrics."""

    def test_counters(self):
        """Test placement, rejection and check counters."""
        metrics = SessionMetrics()
        metrics.record_placement(evicted=False)
        metrics.record_placement(evicted=True)
        metrics.record_rejection()
        metrics.record_check(CheckResult(2, 4, False))
        metrics.record_check(CheckResult(1, 4, False))

        summary = metrics.get_summary()

        assert summary["placements"] == 2
        assert summary["evictions"] == 1
        assert summary["rejected"] == 1
        assert summary["checks"] == 2
        assert summary["best_correct"] == 2

    def test_save(self):
        """Test writing metrics to JSON."""
        metrics = SessionMetrics()
        metrics.record_check(CheckResult(4, 4, True, elapsed_ms=1000))

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "out" / "metrics.json"
            metrics.save(path)
            data = json.loads(path.read_text())

        assert data["checks"] == 1
        assert data["checks_history"][0]["solved"] is True
