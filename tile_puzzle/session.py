"""Puzzle session: loading, placing, checking and auto-solving."""

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .archive import read_tiles
from .board import Board, CellStatus, PlacementMode, PlacementResult
from .catalog import ArchiveFetcher, PuzzleDescriptor
from .config import GameConfig
from .coordinates import deduplicate
from .errors import (
    IncorrectPlacementError,
    InsufficientPointsError,
    SessionStateError,
)
from .grid_inference import GridEstimate, infer_grid
from .leaderboard import Leaderboard
from .metrics import CheckResult, SessionMetrics, Stopwatch
from .scoring import score_board, solved_layout
from .storage import JsonFileStore, KeyValueStore, MemoryStore, PointsWallet
from .tiles import Tile

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"
    IN_PROGRESS = "in_progress"
    SOLVED = "solved"


@dataclass(frozen=True)
class LoadReport:
    """What a successful archive load produced."""

    tile_count: int
    indexed_count: int
    rows: int
    cols: int
    estimate: GridEstimate
    dropped: int = 0

    def message(self) -> str:
        text = f"Loaded {self.rows}×{self.cols} puzzle with {self.tile_count} tiles."
        if self.estimate.source == "fallback":
            text += " Grid guessed from tile count; adjust rows/cols if needed."
        return text


@dataclass(frozen=True)
class _PreparedLoad:
    tiles: list[Tile]
    report: LoadReport


class PuzzleSession:
    """
    One player's puzzle session.

    State machine: UNLOADED -> LOADED on archive load -> IN_PROGRESS on
    the first successful placement -> SOLVED on a check that finds every
    cell correct. build/clear/reset return to LOADED with a fresh board
    and a reset stopwatch.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store: Optional[KeyValueStore] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the session.

        Args:
            config: Session configuration; defaults to GameConfig()
            store: Persistence port for points and leaderboards; defaults
                to a JsonFileStore at config.store_path, else in-memory
            clock: Monotonic clock in seconds, for the stopwatch
        """
        self.config = config or GameConfig()
        if store is None:
            store = JsonFileStore(self.config.store_path) if self.config.store_path else MemoryStore()
        self.store = store

        self.player_name = self.config.player_name
        self.wallet = PointsWallet(store, self.player_name, self.config.starting_points)
        self.leaderboard = Leaderboard(store, cap=self.config.leaderboard_cap)
        self.stopwatch = Stopwatch(clock)
        self.mode: PlacementMode = "assisted" if self.config.assisted else "free"

        self.state = SessionState.UNLOADED
        self.tiles: list[Tile] = []
        self.board: Optional[Board] = None
        self.puzzle: Optional[PuzzleDescriptor] = None
        self.last_load: Optional[LoadReport] = None
        self.metrics = SessionMetrics()

        self._load_seq = 0

    # ------------------------------------------------------------------
    # Properties

    @property
    def points(self) -> int:
        return self.wallet.balance

    @property
    def elapsed_ms(self) -> int:
        return self.stopwatch.elapsed_ms

    @property
    def rows(self) -> int:
        return self.board.rows if self.board is not None else 0

    @property
    def cols(self) -> int:
        return self.board.cols if self.board is not None else 0

    @property
    def palette(self) -> list[str]:
        return self.board.palette if self.board is not None else []

    def tile(self, tile_id: Optional[str]) -> Optional[Tile]:
        return self.board.tile(tile_id) if self.board is not None else None

    def _require_board(self) -> Board:
        if self.board is None or self.state == SessionState.UNLOADED:
            raise SessionStateError("No puzzle loaded.")
        return self.board

    # ------------------------------------------------------------------
    # Loading

    def _next_ticket(self) -> int:
        self._load_seq += 1
        return self._load_seq

    def _is_current(self, ticket: int) -> bool:
        return ticket == self._load_seq

    def _prepare(
        self,
        blob: bytes,
        archive_name: str,
        puzzle: Optional[PuzzleDescriptor],
    ) -> _PreparedLoad:
        """Run the ingestion pipeline without touching session state."""
        tiles = read_tiles(blob)
        estimate = infer_grid(
            tiles,
            archive_name,
            index_threshold=self.config.index_threshold,
            filename_tolerance=self.config.filename_tolerance,
        )
        bounds = puzzle.bounds if puzzle is not None and puzzle.bounds else (estimate.rows, estimate.cols)
        kept = deduplicate(tiles, bounds=bounds)

        report = LoadReport(
            tile_count=len(kept),
            indexed_count=sum(1 for t in kept if t.position is not None),
            rows=bounds[0],
            cols=bounds[1],
            estimate=estimate,
            dropped=len(tiles) - len(kept),
        )
        return _PreparedLoad(tiles=kept, report=report)

    def _apply(self, prepared: _PreparedLoad, puzzle: Optional[PuzzleDescriptor]) -> LoadReport:
        report = prepared.report
        self.tiles = prepared.tiles
        self.puzzle = puzzle
        self.last_load = report
        self.board = Board(self.tiles, report.rows, report.cols)
        self._enter_loaded()
        self.metrics = SessionMetrics()

        logger.info(
            f"{report.message()} ({report.indexed_count} indexed, "
            f"grid from {report.estimate.source}, {report.dropped} dropped)"
        )
        return report

    def load_archive(
        self,
        blob: bytes,
        archive_name: str = "",
        puzzle: Optional[PuzzleDescriptor] = None,
    ) -> LoadReport:
        """
        Load a tile archive, replacing the current tile set and board.

        Args:
            blob: Raw ZIP bytes
            archive_name: File name of the archive, used for AxB hints
            puzzle: Catalog entry the archive belongs to; None for uploads

        Raises:
            ArchiveReadError: Unreadable archive; session unchanged
            EmptyArchiveError: No tiles found; session unchanged
        """
        self._next_ticket()
        prepared = self._prepare(blob, archive_name, puzzle)
        return self._apply(prepared, puzzle)

    async def load_archive_async(
        self,
        blob: bytes,
        archive_name: str = "",
        puzzle: Optional[PuzzleDescriptor] = None,
    ) -> Optional[LoadReport]:
        """
        Load an archive with decompression in a worker thread.

        A later load supersedes this one: if another load started while
        this one was decompressing, the result is discarded and None is
        returned.
        """
        ticket = self._next_ticket()
        try:
            prepared = await asyncio.to_thread(self._prepare, blob, archive_name, puzzle)
        except Exception:
            if not self._is_current(ticket):
                logger.warning(f"Superseded load #{ticket} failed; ignoring its error")
                return None
            raise

        if not self._is_current(ticket):
            logger.warning(f"Discarding superseded load #{ticket}")
            return None
        return self._apply(prepared, puzzle)

    def load_puzzle(self, puzzle: PuzzleDescriptor, fetcher: ArchiveFetcher) -> LoadReport:
        """Fetch and load a catalog puzzle."""
        blob = fetcher.fetch(puzzle.archive_path)
        return self.load_archive(blob, puzzle.archive_name, puzzle)

    async def load_puzzle_async(self, puzzle: PuzzleDescriptor, fetcher: ArchiveFetcher) -> Optional[LoadReport]:
        """Fetch and load a catalog puzzle; None if superseded meanwhile."""
        ticket = self._next_ticket()
        try:
            blob = await asyncio.to_thread(fetcher.fetch, puzzle.archive_path)
        except Exception:
            if not self._is_current(ticket):
                logger.warning(f"Superseded fetch #{ticket} failed; ignoring its error")
                return None
            raise

        if not self._is_current(ticket):
            logger.warning(f"Discarding superseded fetch #{ticket}")
            return None
        return await self.load_archive_async(blob, puzzle.archive_name, puzzle)

    # ------------------------------------------------------------------
    # Board lifecycle

    def _enter_loaded(self) -> None:
        self.state = SessionState.LOADED
        self.stopwatch.reset()

    def build(self, rows: int, cols: int) -> None:
        """Build a fresh rows x cols board; the palette is shuffled."""
        self._require_board()
        palette = [t.id for t in self.tiles]
        random.Random(self.config.shuffle_seed).shuffle(palette)
        self.board = Board(self.tiles, rows, cols, palette_order=palette)
        self._enter_loaded()
        logger.info(f"Built {rows}x{cols} board")

    def clear(self) -> None:
        """Rebuild the board at its current size."""
        board = self._require_board()
        self.build(board.rows, board.cols)

    def reset(self) -> None:
        """Fresh board at the current size, palette in load order."""
        board = self._require_board()
        self.board = Board(self.tiles, board.rows, board.cols)
        self._enter_loaded()

    def set_mode(self, mode: PlacementMode) -> None:
        if mode not in ("assisted", "free"):
            raise ValueError(f"Invalid placement mode: {mode}. Must be 'assisted' or 'free'")
        self.mode = mode

    def shuffle_palette(self, seed: Optional[int] = None) -> None:
        self._require_board().shuffle_palette(seed)

    # ------------------------------------------------------------------
    # Placement

    def select(self, tile_id: Optional[str]) -> None:
        self._require_board().select(tile_id)

    def place(self, tile_id: str, row: int, col: int) -> PlacementResult:
        """
        Place a tile under the current mode.

        The first successful placement starts the stopwatch.

        Raises:
            UnknownTileError, CellOutOfRangeError, IncorrectPlacementError:
                the board is left unchanged
        """
        board = self._require_board()
        try:
            result = board.place(tile_id, row, col, self.mode)
        except IncorrectPlacementError:
            self.metrics.record_rejection()
            raise

        self.metrics.record_placement(result.evicted is not None)
        if self.state == SessionState.LOADED:
            self.state = SessionState.IN_PROGRESS
            self.stopwatch.start()
        return result

    def place_selected(self, row: int, col: int) -> PlacementResult:
        board = self._require_board()
        if board.selected is None:
            raise SessionStateError("No tile selected.")
        return self.place(board.selected, row, col)

    def cell_status(self, row: int, col: int) -> CellStatus:
        return self._require_board().cell_status(row, col)

    # ------------------------------------------------------------------
    # Checking and auto-solve

    def check(self) -> CheckResult:
        """
        Verify the board.

        A first solve stops the stopwatch, moves to SOLVED, awards the
        solve reward and records the time on the leaderboard, whether the
        board was completed by hand or by auto-solve.

        Raises:
            MissingIndicesError: Some tile has no coordinates; nothing changes
        """
        board = self._require_board()
        score = score_board(board)

        result = CheckResult(
            correct=score.correct,
            total=score.total,
            solved=score.solved,
            elapsed_ms=self.elapsed_ms,
        )

        if score.solved and self.state != SessionState.SOLVED:
            result.elapsed_ms = int(self.stopwatch.stop())
            self.state = SessionState.SOLVED
            self.wallet.award(self.config.solve_reward)
            result.points_awarded = self.config.solve_reward
            rank = self.leaderboard.record(
                self.puzzle.id if self.puzzle else None,
                board.rows,
                board.cols,
                result.elapsed_ms,
                self.player_name,
            )
            result.rank = rank.rank
            result.leaderboard_total = rank.total
            logger.info(result.message())

        self.metrics.record_check(result)
        return result

    def auto_solve(self) -> None:
        """
        Spend points to fill the board with the solved layout.

        Raises:
            InsufficientPointsError: Balance below the cost; nothing changes
        """
        board = self._require_board()
        cost = self.config.auto_solve_cost
        balance = self.wallet.balance
        if balance < cost:
            raise InsufficientPointsError(balance, cost)

        layout = solved_layout(self.tiles, board.rows, board.cols)
        board.fill(layout)
        self.wallet.spend(cost)
        self.stopwatch.stop()
        self.metrics.auto_solved = True
        logger.info(f"Auto-solved (-{cost} points)")
