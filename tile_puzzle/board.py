"""Board and palette state with placement rules."""

import logging
import random
from dataclasses import dataclass, replace
from typing import Iterable, Literal, Optional

from .errors import CellOutOfRangeError, IncorrectPlacementError, UnknownTileError
from .tiles import GridPosition, Tile

logger = logging.getLogger(__name__)

PlacementMode = Literal["assisted", "free"]
CellStatus = Literal["correct", "wrong", ""]


@dataclass(frozen=True)
class BoardState:
    """
    Immutable snapshot of the board, the palette and the pending selection.

    A Board only ever swaps one snapshot for the next, so the cells and
    the palette can never be observed disagreeing with each other.
    """

    cells: tuple[tuple[Optional[str], ...], ...]
    palette: tuple[str, ...]
    selected: Optional[str] = None


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of a successful placement."""

    tile_id: str
    row: int
    col: int
    evicted: Optional[str] = None


def empty_cells(rows: int, cols: int) -> tuple[tuple[Optional[str], ...], ...]:
    return tuple(tuple(None for _ in range(cols)) for _ in range(rows))


class Board:
    """A rows x cols grid of tile ids plus the palette of unplaced tiles."""

    def __init__(
        self,
        tiles: Iterable[Tile],
        rows: int,
        cols: int,
        palette_order: Optional[list[str]] = None,
    ):
        """
        Create an empty board with every tile in the palette.

        Args:
            tiles: The active tile set
            rows: Number of board rows
            cols: Number of board columns
            palette_order: Optional palette ordering of tile ids; defaults
                to the tile set's order
        """
        if rows < 0 or cols < 0:
            raise ValueError(f"Board dimensions must be non-negative. Got: {rows}x{cols}")

        self.rows = rows
        self.cols = cols
        self._tiles: dict[str, Tile] = {t.id: t for t in tiles}
        palette = palette_order if palette_order is not None else list(self._tiles)
        self._state = BoardState(cells=empty_cells(rows, cols), palette=tuple(palette))

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def tiles(self) -> dict[str, Tile]:
        return dict(self._tiles)

    @property
    def palette(self) -> list[str]:
        return list(self._state.palette)

    @property
    def selected(self) -> Optional[str]:
        return self._state.selected

    @property
    def total_cells(self) -> int:
        return self.rows * self.cols

    def tile(self, tile_id: Optional[str]) -> Optional[Tile]:
        """Look up an active tile by id."""
        if tile_id is None:
            return None
        return self._tiles.get(tile_id)

    def cell(self, row: int, col: int) -> Optional[str]:
        """Get the tile id at a cell, or None if empty."""
        self._check_cell(row, col)
        return self._state.cells[row][col]

    def grid(self) -> list[list[Optional[str]]]:
        """Get a mutable copy of the board cells."""
        return [list(r) for r in self._state.cells]

    def location_of(self, tile_id: str) -> Optional[GridPosition]:
        """Find the cell a tile is placed on, if any."""
        for r, row_cells in enumerate(self._state.cells):
            for c, occupant in enumerate(row_cells):
                if occupant == tile_id:
                    return GridPosition(r, c)
        return None

    def placed_count(self) -> int:
        return sum(1 for row_cells in self._state.cells for cell in row_cells if cell is not None)

    def is_full(self) -> bool:
        return self.placed_count() == self.total_cells

    def _check_cell(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise CellOutOfRangeError(row, col, self.rows, self.cols)

    def _require_tile(self, tile_id: Optional[str]) -> Tile:
        tile = self.tile(tile_id)
        if tile is None:
            raise UnknownTileError(tile_id)
        return tile

    def check_placement(self, tile_id: str, row: int, col: int, mode: PlacementMode) -> Tile:
        """
        Validate a placement without applying it.

        Raises:
            UnknownTileError: If the tile is not in the active set
            CellOutOfRangeError: If the cell is outside the board
            IncorrectPlacementError: In assisted mode, if the tile's known
                position differs from the target cell
        """
        tile = self._require_tile(tile_id)
        self._check_cell(row, col)

        if mode == "assisted" and tile.position is not None:
            if tile.position != (row, col):
                raise IncorrectPlacementError(tile_id, row, col)
        return tile

    def place(self, tile_id: str, row: int, col: int, mode: PlacementMode = "assisted") -> PlacementResult:
        """
        Place a tile on a cell.

        Any tile already on the cell goes back to the end of the palette.
        A tile moved from another cell leaves that cell empty. The placed
        tile leaves the palette and the selection is cleared. All of this
        lands as one new BoardState.

        Args:
            tile_id: Id of the tile to place
            row: Target row (0-indexed)
            col: Target column (0-indexed)
            mode: "assisted" rejects provably wrong cells, "free" allows any

        Returns:
            PlacementResult naming the evicted tile, if any
        """
        self.check_placement(tile_id, row, col, mode)

        current = self._state
        cells = [list(r) for r in current.cells]
        evicted = cells[row][col]
        if evicted == tile_id:
            evicted = None

        previous = self.location_of(tile_id)
        if previous is not None:
            cells[previous.row][previous.col] = None
        cells[row][col] = tile_id

        palette = [tid for tid in current.palette if tid != tile_id]
        if evicted is not None:
            palette.append(evicted)

        self._state = BoardState(
            cells=tuple(tuple(r) for r in cells),
            palette=tuple(palette),
            selected=None,
        )
        logger.debug(f"Placed {tile_id} at ({row},{col})" + (f", evicted {evicted}" if evicted else ""))
        return PlacementResult(tile_id=tile_id, row=row, col=col, evicted=evicted)

    def select(self, tile_id: Optional[str]) -> None:
        """Set (or clear, with None) the pending selection."""
        if tile_id is not None:
            self._require_tile(tile_id)
        self._state = replace(self._state, selected=tile_id)

    def place_selected(self, row: int, col: int, mode: PlacementMode = "assisted") -> PlacementResult:
        """Place the currently selected tile."""
        if self._state.selected is None:
            raise UnknownTileError(None)
        return self.place(self._state.selected, row, col, mode)

    def shuffle_palette(self, seed: Optional[int] = None) -> None:
        """Shuffle the palette order; board cells are untouched."""
        palette = list(self._state.palette)
        random.Random(seed).shuffle(palette)
        self._state = replace(self._state, palette=tuple(palette))

    def fill(self, layout: list[list[Optional[str]]]) -> None:
        """
        Replace the whole board with a layout.

        Tiles not present in the layout stay in the palette, in their
        current palette order.
        """
        if len(layout) != self.rows or any(len(r) != self.cols for r in layout):
            raise ValueError(f"Layout does not match the {self.rows}x{self.cols} board")

        placed = {tid for r in layout for tid in r if tid is not None}
        for tid in placed:
            self._require_tile(tid)

        leftover = [tid for tid in self._state.palette if tid not in placed]
        for row_cells in self._state.cells:
            leftover += [tid for tid in row_cells if tid is not None and tid not in placed]

        self._state = BoardState(
            cells=tuple(tuple(r) for r in layout),
            palette=tuple(leftover),
            selected=None,
        )

    def cell_status(self, row: int, col: int) -> CellStatus:
        """
        Classify a cell for display.

        Returns:
            "correct" or "wrong" for a tile with a known position,
            "" for an empty cell or a tile without a position
        """
        tile = self.tile(self.cell(row, col))
        if tile is None or tile.position is None:
            return ""
        return "correct" if tile.position == (row, col) else "wrong"
