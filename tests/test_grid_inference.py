"""Tests for grid inference."""

import pytest

from tile_puzzle.grid_inference import GridEstimate, dimensions_from_name, infer_grid, near_square
from tile_puzzle.tiles import GridPosition, Tile


def indexed(*positions) -> list[Tile]:
    return [Tile(id=f"r{r}c{c}", name=f"r{r}c{c}.png", position=GridPosition(r, c)) for r, c in positions]


def plain(count: int) -> list[Tile]:
    return [Tile(id=f"tile{i}", name=f"tile{i}.png") for i in range(count)]


class TestNearSquare:
    """Tests for near_square."""

    @pytest.mark.parametrize(
        "count,expected",
        [(0, (0, 0)), (1, (1, 1)), (2, (1, 2)), (7, (2, 4)), (9, (3, 3)), (10, (3, 4)), (13, (3, 5))],
    )
    def test_dimensions(self, count, expected):
        """Test the near-square shape for several counts."""
        assert near_square(count) == expected

    @pytest.mark.parametrize("count", range(1, 60))
    def test_holds_all_tiles(self, count):
        """Test that the grid always has room and rows never exceed cols."""
        rows, cols = near_square(count)
        assert rows * cols >= count
        assert rows <= cols


class TestDimensionsFromName:
    """Tests for dimensions_from_name."""

    def test_token(self):
        """Test a plain AxB token."""
        assert dimensions_from_name("castle_5x8.zip") == (5, 8)
        assert dimensions_from_name("CASTLE_5X8.ZIP") == (5, 8)

    def test_no_token(self):
        """Test names without a token."""
        assert dimensions_from_name("castle.zip") is None
        assert dimensions_from_name("") is None

    def test_zero_dimension(self):
        """Test that zero dimensions are ignored."""
        assert dimensions_from_name("broken_0x4.zip") is None

    def test_only_base_name(self):
        """Test that folders do not contribute a token."""
        assert dimensions_from_name("sets_3x3/castle.zip") is None


class TestInferGrid:
    """Tests for infer_grid."""

    def test_from_indices(self):
        """Test that fully indexed tiles give max+1 dimensions."""
        estimate = infer_grid(indexed((0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)))

        assert estimate == GridEstimate(2, 3, "indices")

    def test_index_threshold_inclusive(self):
        """Test that exactly 60% indexed tiles still use indices."""
        tiles = indexed((0, 0), (1, 3), (2, 1)) + plain(2)

        estimate = infer_grid(tiles, archive_name="set_9x9.zip")

        assert (estimate.rows, estimate.cols, estimate.source) == (3, 4, "indices")

    def test_below_threshold_falls_through(self):
        """Test that too few indexed tiles skip tier one."""
        tiles = indexed((0, 0), (5, 5)) + plain(3)

        estimate = infer_grid(tiles)

        assert estimate.source == "fallback"
        assert (estimate.rows, estimate.cols) == near_square(5)

    def test_from_archive_name(self):
        """Test the archive name tier."""
        estimate = infer_grid(plain(12), archive_name="castle_3x4.zip")

        assert estimate == GridEstimate(3, 4, "filename")

    def test_archive_name_within_tolerance(self):
        """Test that a count within 10% of the name's product is accepted."""
        estimate = infer_grid(plain(11), archive_name="castle_3x4.zip")

        assert estimate.source == "filename"

    def test_archive_name_outside_tolerance(self):
        """Test that a count outside 10% falls back."""
        estimate = infer_grid(plain(10), archive_name="castle_3x4.zip")

        assert estimate.source == "fallback"
        assert (estimate.rows, estimate.cols) == (3, 4)

    def test_fallback(self):
        """Test the near-square fallback."""
        estimate = infer_grid(plain(7), archive_name="castle.zip")

        assert estimate == GridEstimate(2, 4, "fallback")
        assert estimate.cells >= 7

    def test_empty(self):
        """Test an empty tile set."""
        assert infer_grid([]) == GridEstimate(0, 0, "fallback")

    def test_describe(self):
        """Test the human-readable notes."""
        assert "archive name" in GridEstimate(3, 4, "filename").describe()
        assert "adjust" in GridEstimate(3, 4, "fallback").describe()
