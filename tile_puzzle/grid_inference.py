"""Inferring board dimensions from a tile set."""

import logging
import math
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Literal, Optional

from .tiles import Tile

logger = logging.getLogger(__name__)

GridSource = Literal["indices", "filename", "fallback"]

DEFAULT_INDEX_THRESHOLD = 0.6
DEFAULT_FILENAME_TOLERANCE = 0.1

_DIMENSION_TOKEN = re.compile(r"(\d+)[xX](\d+)")


@dataclass(frozen=True)
class GridEstimate:
    """Inferred board dimensions and where they came from."""

    rows: int
    cols: int
    source: GridSource

    @property
    def cells(self) -> int:
        return self.rows * self.cols

    def describe(self) -> str:
        """Human-readable note on how the grid was chosen."""
        if self.source == "indices":
            return f"{self.rows}x{self.cols} from tile filenames"
        if self.source == "filename":
            return f"{self.rows}x{self.cols} from archive name"
        return f"{self.rows}x{self.cols} guessed from tile count; adjust if needed"


def dimensions_from_name(archive_name: str) -> Optional[tuple[int, int]]:
    """Find an ``AxB`` token (e.g. ``castle_5x8.zip``) in an archive name."""
    base = PurePosixPath(archive_name.replace("\\", "/")).name
    match = _DIMENSION_TOKEN.search(base)
    if not match:
        return None
    rows, cols = int(match.group(1)), int(match.group(2))
    if rows <= 0 or cols <= 0:
        return None
    return rows, cols


def near_square(count: int) -> tuple[int, int]:
    """Smallest near-square grid holding ``count`` tiles, rows <= cols."""
    if count <= 0:
        return 0, 0
    rows = math.isqrt(count)
    return rows, math.ceil(count / rows)


def infer_grid(
    tiles: list[Tile],
    archive_name: str = "",
    index_threshold: float = DEFAULT_INDEX_THRESHOLD,
    filename_tolerance: float = DEFAULT_FILENAME_TOLERANCE,
) -> GridEstimate:
    """
    Infer (rows, cols) for a tile set.

    Tries, in order:
        1. tile coordinates, when at least ``index_threshold`` of tiles
           carry them: max(row)+1 by max(col)+1
        2. an ``AxB`` token in the archive name whose product is within
           ``filename_tolerance`` of the tile count
        3. a near-square grid from the tile count

    Args:
        tiles: Normalized, deduplicated tiles
        archive_name: File name of the archive the tiles came from
        index_threshold: Minimum fraction of indexed tiles for tier 1
        filename_tolerance: Allowed relative mismatch for tier 2

    Returns:
        GridEstimate with the dimensions and the tier that produced them
    """
    n = len(tiles)
    positions = [t.position for t in tiles if t.position is not None]

    if n > 0 and positions and len(positions) / n >= index_threshold:
        rows = max(p.row for p in positions) + 1
        cols = max(p.col for p in positions) + 1
        return GridEstimate(rows, cols, "indices")

    dims = dimensions_from_name(archive_name) if archive_name else None
    if dims is not None and n > 0:
        rows, cols = dims
        if abs(rows * cols - n) <= filename_tolerance * n:
            return GridEstimate(rows, cols, "filename")
        logger.debug(f"Ignoring {rows}x{cols} from archive name: {n} tiles do not fit")

    rows, cols = near_square(n)
    return GridEstimate(rows, cols, "fallback")
