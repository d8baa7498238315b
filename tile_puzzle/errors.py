"""Exceptions raised by the puzzle engine.

Every error here is local and recoverable: the operation that raised it
has left the session, board and stores untouched.
"""

from typing import Optional


class PuzzleError(Exception):
    """Base class for all puzzle engine errors."""


class ArchiveReadError(PuzzleError):
    """The archive could not be opened or decompressed."""


class EmptyArchiveError(PuzzleError):
    """The archive was readable but held no qualifying image entries."""

    def __init__(self, message: str = "No tiles found in archive."):
        super().__init__(message)


class ArchiveFetchError(PuzzleError):
    """Fetching the archive failed (bad response, missing file, empty body)."""


class MissingIndicesError(PuzzleError):
    """Verification requires every tile to carry grid coordinates."""

    def __init__(self, missing: int):
        self.missing = missing
        super().__init__(f"Cannot verify: {missing} tile(s) lack row/col indices.")


class InsufficientPointsError(PuzzleError):
    """The player's balance is below the cost of the requested action."""

    def __init__(self, balance: int, cost: int):
        self.balance = balance
        self.cost = cost
        super().__init__(f"Need {cost} points to auto-solve (have {balance}).")


class IncorrectPlacementError(PuzzleError):
    """Assisted mode rejected a tile dropped on the wrong cell."""

    def __init__(self, tile_id: str, row: int, col: int):
        self.tile_id = tile_id
        self.row = row
        self.col = col
        super().__init__(f"Incorrect placement for ({row},{col}).")


class UnknownTileError(PuzzleError):
    """The tile id is not part of the active tile set."""

    def __init__(self, tile_id: Optional[str]):
        self.tile_id = tile_id
        super().__init__(f"Unknown tile: {tile_id!r}")


class CellOutOfRangeError(PuzzleError):
    """The target cell lies outside the board."""

    def __init__(self, row: int, col: int, rows: int, cols: int):
        self.row = row
        self.col = col
        super().__init__(f"Cell ({row},{col}) is outside the {rows}x{cols} board.")


class SessionStateError(PuzzleError):
    """The operation is not valid in the session's current state."""
