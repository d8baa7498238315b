"""Tests for the board and palette."""

import pytest

from tile_puzzle.board import Board
from tile_puzzle.errors import CellOutOfRangeError, IncorrectPlacementError, UnknownTileError
from tile_puzzle.tiles import GridPosition, Tile


@pytest.fixture
def tiles():
    """Four indexed tiles for a 2x2 board."""
    return [
        Tile(id=f"r{r}c{c}", name=f"r{r}c{c}.png", position=GridPosition(r, c))
        for r in range(2)
        for c in range(2)
    ]


@pytest.fixture
def board(tiles):
    return Board(tiles, 2, 2)


class TestBoardBasics:
    """Tests for board construction and lookups."""

    def test_starts_empty(self, board):
        """Test that every tile starts in the palette."""
        assert board.palette == ["r0c0", "r0c1", "r1c0", "r1c1"]
        assert board.grid() == [[None, None], [None, None]]
        assert board.placed_count() == 0
        assert not board.is_full()

    def test_palette_order(self, tiles):
        """Test a custom palette order."""
        board = Board(tiles, 2, 2, palette_order=["r1c1", "r0c0", "r1c0", "r0c1"])

        assert board.palette == ["r1c1", "r0c0", "r1c0", "r0c1"]

    def test_negative_dimensions(self, tiles):
        """Test that negative dimensions are rejected."""
        with pytest.raises(ValueError):
            Board(tiles, -1, 2)

    def test_cell_out_of_range(self, board):
        """Test reading a cell outside the board."""
        with pytest.raises(CellOutOfRangeError):
            board.cell(2, 0)


class TestPlace:
    """Tests for Board.place."""

    def test_place_into_empty_cell(self, board):
        """Test a plain placement."""
        result = board.place("r0c1", 0, 1)

        assert result.evicted is None
        assert board.cell(0, 1) == "r0c1"
        assert "r0c1" not in board.palette

    def test_assisted_rejects_wrong_cell(self, board):
        """Test that assisted mode leaves the board unchanged on a wrong drop."""
        before = board.state

        with pytest.raises(IncorrectPlacementError) as exc_info:
            board.place("r0c0", 1, 1, mode="assisted")

        assert str(exc_info.value) == "Incorrect placement for (1,1)."
        assert board.state == before

    def test_assisted_accepts_unindexed_tile(self):
        """Test that assisted mode cannot reject a tile without a position."""
        board = Board([Tile(id="sky", name="sky.png")], 1, 2)

        board.place("sky", 0, 1, mode="assisted")

        assert board.cell(0, 1) == "sky"

    def test_free_mode_allows_wrong_cell(self, board):
        """Test that free mode places anywhere."""
        board.place("r0c0", 1, 1, mode="free")

        assert board.cell(1, 1) == "r0c0"
        assert board.cell_status(1, 1) == "wrong"

    def test_eviction(self, board):
        """Test that the previous occupant goes to the end of the palette."""
        board.place("r0c0", 1, 1, mode="free")

        result = board.place("r1c1", 1, 1)

        assert result.evicted == "r0c0"
        assert board.cell(1, 1) == "r1c1"
        assert board.palette == ["r0c1", "r1c0", "r0c0"]

    def test_every_tile_in_exactly_one_place(self, board):
        """Test that tiles are conserved across placements and evictions."""
        board.place("r0c0", 1, 1, mode="free")
        board.place("r1c1", 1, 1)
        board.place("r0c0", 0, 0)
        board.place("r0c1", 0, 0, mode="free")

        placed = [tid for row in board.grid() for tid in row if tid is not None]
        assert sorted(placed + board.palette) == ["r0c0", "r0c1", "r1c0", "r1c1"]

    def test_moving_a_placed_tile_vacates_its_cell(self, board):
        """Test moving a tile from one cell to another."""
        board.place("r0c0", 1, 1, mode="free")

        board.place("r0c0", 0, 0)

        assert board.cell(1, 1) is None
        assert board.cell(0, 0) == "r0c0"
        assert board.location_of("r0c0") == (0, 0)

    def test_place_same_tile_on_same_cell(self, board):
        """Test that re-placing a tile on its own cell evicts nothing."""
        board.place("r0c0", 0, 0)

        result = board.place("r0c0", 0, 0)

        assert result.evicted is None
        assert len(board.palette) == 3

    def test_unknown_tile(self, board):
        """Test placing a tile that is not in the set."""
        with pytest.raises(UnknownTileError):
            board.place("nope", 0, 0)

    def test_out_of_range(self, board):
        """Test placing outside the board."""
        before = board.state
        with pytest.raises(CellOutOfRangeError):
            board.place("r0c0", 0, 5, mode="free")
        assert board.state == before

    def test_full_board(self, board):
        """Test is_full after placing every tile."""
        for r in range(2):
            for c in range(2):
                board.place(f"r{r}c{c}", r, c)

        assert board.is_full()
        assert board.palette == []


class TestSelection:
    """Tests for selecting and placing the selected tile."""

    def test_select_and_place(self, board):
        """Test the select-then-click flow."""
        board.select("r1c0")
        assert board.selected == "r1c0"

        board.place_selected(1, 0)

        assert board.cell(1, 0) == "r1c0"
        assert board.selected is None

    def test_select_unknown(self, board):
        """Test selecting a tile that is not in the set."""
        with pytest.raises(UnknownTileError):
            board.select("nope")

    def test_place_without_selection(self, board):
        """Test placing with nothing selected."""
        with pytest.raises(UnknownTileError):
            board.place_selected(0, 0)

    def test_clear_selection(self, board):
        """Test deselecting."""
        board.select("r0c0")
        board.select(None)
        assert board.selected is None

    def test_rejected_placement_keeps_selection(self, board):
        """Test that a rejected drop leaves the selection in place."""
        board.select("r0c0")
        with pytest.raises(IncorrectPlacementError):
            board.place_selected(1, 1)
        assert board.selected == "r0c0"


class TestShuffleAndFill:
    """Tests for palette shuffling and whole-board fills."""

    def test_shuffle_is_seeded(self, tiles):
        """Test that a seed gives a repeatable order."""
        a = Board(tiles, 2, 2)
        b = Board(tiles, 2, 2)

        a.shuffle_palette(seed=7)
        b.shuffle_palette(seed=7)

        assert a.palette == b.palette
        assert sorted(a.palette) == ["r0c0", "r0c1", "r1c0", "r1c1"]

    def test_shuffle_leaves_cells(self, board):
        """Test that shuffling never touches the board."""
        board.place("r0c0", 0, 0)
        board.shuffle_palette(seed=1)
        assert board.cell(0, 0) == "r0c0"

    def test_fill(self, board):
        """Test replacing the board with a layout."""
        board.place("r0c0", 1, 1, mode="free")

        board.fill([["r0c0", "r0c1"], ["r1c0", None]])

        assert board.grid() == [["r0c0", "r0c1"], ["r1c0", None]]
        assert board.palette == ["r1c1"]

    def test_fill_wrong_shape(self, board):
        """Test that a layout of the wrong shape is rejected."""
        with pytest.raises(ValueError):
            board.fill([["r0c0", "r0c1"]])

    def test_fill_unknown_tile(self, board):
        """Test that a layout with an unknown tile is rejected."""
        before = board.state
        with pytest.raises(UnknownTileError):
            board.fill([["nope", None], [None, None]])
        assert board.state == before


class TestCellStatus:
    """Tests for cell_status."""

    def test_statuses(self):
        """Test correct, wrong and neutral cells."""
        tiles = [
            Tile(id="a", name="r0c0.png", position=GridPosition(0, 0)),
            Tile(id="b", name="r0c1.png", position=GridPosition(0, 1)),
            Tile(id="sky", name="sky.png"),
        ]
        board = Board(tiles, 2, 2)
        board.place("a", 0, 0)
        board.place("b", 1, 0, mode="free")
        board.place("sky", 1, 1)

        assert board.cell_status(0, 0) == "correct"
        assert board.cell_status(1, 0) == "wrong"
        assert board.cell_status(1, 1) == ""
        assert board.cell_status(0, 1) == ""
