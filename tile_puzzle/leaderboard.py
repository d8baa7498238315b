"""Per-puzzle leaderboards of solve times."""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

from .storage import KeyValueStore, leaderboard_key

logger = logging.getLogger(__name__)

DEFAULT_CAP = 100


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class LeaderboardEntry:
    """One timed solve."""

    player_name: str
    elapsed_ms: int
    timestamp: int  # epoch milliseconds
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.player_name,
            "ms": self.elapsed_ms,
            "when": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeaderboardEntry":
        """Load from dictionary; entries saved without an id get a fresh one."""
        return cls(
            player_name=str(data.get("name", "")),
            elapsed_ms=int(data["ms"]),
            timestamp=int(data.get("when", 0)),
            id=str(data.get("id") or uuid.uuid4().hex),
        )


@dataclass(frozen=True)
class RankResult:
    """Where a new entry landed."""

    rank: Optional[int]  # 1-based; None if it fell outside the cap
    total: int
    entry_id: str


class Leaderboard:
    """
    Ranked solve times kept in a key-value store.

    Lists are keyed by puzzle id (``custom`` for uploads) and board
    dimensions, sorted ascending by time with ties in insertion order,
    and capped. The read-modify-write is not transactional: two writers
    racing on one key can lose an entry.
    """

    def __init__(
        self,
        store: KeyValueStore,
        cap: int = DEFAULT_CAP,
        clock: Callable[[], int] = _now_ms,
    ):
        self.store = store
        self.cap = cap
        self.clock = clock

    def load(self, puzzle_id: Optional[str], rows: int, cols: int) -> list[LeaderboardEntry]:
        """Read a list; a missing or corrupt payload reads as empty."""
        key = leaderboard_key(puzzle_id, rows, cols)
        raw = self.store.get_json(key, default=[])
        if not isinstance(raw, list):
            logger.warning(f"Leaderboard {key} is not a list; starting fresh")
            return []

        entries = []
        for item in raw:
            try:
                entries.append(LeaderboardEntry.from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed leaderboard entry in {key}: {e}")
        return entries

    def _save(self, puzzle_id: Optional[str], rows: int, cols: int, entries: list[LeaderboardEntry]) -> None:
        key = leaderboard_key(puzzle_id, rows, cols)
        self.store.set_json(key, [e.to_dict() for e in entries])

    def record(
        self,
        puzzle_id: Optional[str],
        rows: int,
        cols: int,
        elapsed_ms: int,
        player_name: str,
        timestamp: Optional[int] = None,
    ) -> RankResult:
        """
        Insert a solve time and report its rank.

        Args:
            puzzle_id: Catalog puzzle id, or None for an uploaded archive
            rows: Board rows
            cols: Board columns
            elapsed_ms: Solve time in milliseconds
            player_name: Who solved it
            timestamp: Epoch milliseconds; defaults to now

        Returns:
            RankResult with the entry's 1-based rank and the list length
        """
        entry = LeaderboardEntry(
            player_name=player_name,
            elapsed_ms=int(elapsed_ms),
            timestamp=self.clock() if timestamp is None else timestamp,
        )

        entries = self.load(puzzle_id, rows, cols)
        entries.append(entry)
        # list.sort is stable, so equal times keep insertion order
        entries.sort(key=lambda e: e.elapsed_ms)
        del entries[self.cap:]
        self._save(puzzle_id, rows, cols, entries)

        rank = next((i + 1 for i, e in enumerate(entries) if e.id == entry.id), None)
        logger.info(
            f"Leaderboard {leaderboard_key(puzzle_id, rows, cols)}: "
            f"{player_name} {elapsed_ms}ms, rank {rank} of {len(entries)}"
        )
        return RankResult(rank=rank, total=len(entries), entry_id=entry.id)

    def top(self, puzzle_id: Optional[str], rows: int, cols: int, limit: int = 20) -> list[LeaderboardEntry]:
        """Get the leading entries of a list."""
        return self.load(puzzle_id, rows, cols)[:limit]
