"""Board verification and the auto-solve layout."""

import logging
from dataclasses import dataclass
from typing import Optional

from .board import Board
from .errors import MissingIndicesError
from .tiles import Tile, natural_sorted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Score:
    """Result of verifying a board."""

    correct: int
    total: int

    @property
    def solved(self) -> bool:
        return self.total > 0 and self.correct == self.total

    @property
    def accuracy(self) -> float:
        """Correct cells as percentage."""
        return (self.correct / self.total) * 100 if self.total > 0 else 0

    def __str__(self) -> str:
        return f"{self.correct}/{self.total}"


def score_board(board: Board) -> Score:
    """
    Count cells whose occupant was designed for that cell.

    Raises:
        MissingIndicesError: If any active tile lacks a position; the
            board is not inspected
    """
    missing = sum(1 for t in board.tiles.values() if t.position is None)
    if missing:
        raise MissingIndicesError(missing)

    correct = 0
    for r in range(board.rows):
        for c in range(board.cols):
            tile = board.tile(board.cell(r, c))
            if tile is not None and tile.position == (r, c):
                correct += 1
    return Score(correct=correct, total=board.total_cells)


def solved_layout(tiles: list[Tile], rows: int, cols: int) -> list[list[Optional[str]]]:
    """
    Build the layout auto-solve puts on the board.

    Tiles with a position inside the board go to that cell. The rest
    fill the remaining empty cells row-major in natural name order.
    Tiles that do not fit are left out of the layout.
    """
    layout: list[list[Optional[str]]] = [[None] * cols for _ in range(rows)]
    unplaced: list[Tile] = []

    for tile in tiles:
        pos = tile.position
        if pos is not None and pos.row < rows and pos.col < cols and layout[pos.row][pos.col] is None:
            layout[pos.row][pos.col] = tile.id
        else:
            unplaced.append(tile)

    remaining = iter(natural_sorted(unplaced))
    for r in range(rows):
        for c in range(cols):
            if layout[r][c] is None:
                tile = next(remaining, None)
                if tile is None:
                    return layout
                layout[r][c] = tile.id

    leftover = sum(1 for _ in remaining)
    if leftover:
        logger.warning(f"{leftover} tile(s) do not fit a {rows}x{cols} board")
    return layout
