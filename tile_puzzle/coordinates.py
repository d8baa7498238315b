"""Recovering, normalizing and deduplicating tile grid coordinates."""

import logging
import re
from pathlib import PurePosixPath
from typing import Optional

from .tiles import GridPosition, Tile

logger = logging.getLogger(__name__)

# Ordered grammar, first match wins. Matched against the base name
# without folders or extension.
COORDINATE_PATTERNS: list[re.Pattern] = [
    # r3c5, r3_c5, tile_r3-c5
    re.compile(r"(?<![a-z])r(\d+)[_-]?c(\d+)(?!\d)", re.IGNORECASE),
    # row3col5, row_3_col_5
    re.compile(r"(?<![a-z])row[_-]?(\d+)[_-]?col[_-]?(\d+)(?!\d)", re.IGNORECASE),
    # (3,5)
    re.compile(r"\(\s*(\d+)\s*,\s*(\d+)\s*\)"),
    # 3x5, 3_5, 3-5
    re.compile(r"(?<!\d)(\d+)[x_-](\d+)(?!\d)", re.IGNORECASE),
]


def _stem(filename: str) -> str:
    base = PurePosixPath(filename.replace("\\", "/")).name
    dot = base.rfind(".")
    return base[:dot] if dot > 0 else base


def parse_coordinates(filename: str) -> Optional[GridPosition]:
    """
    Extract a (row, col) pair from a tile filename.

    Args:
        filename: Entry name, optionally with folders and extension

    Returns:
        The parsed position as written in the name (not yet normalized),
        or None if no pattern matches
    """
    stem = _stem(filename)
    for pattern in COORDINATE_PATTERNS:
        match = pattern.search(stem)
        if match:
            return GridPosition(int(match.group(1)), int(match.group(2)))
    return None


def normalize_indices(tiles: list[Tile]) -> list[Tile]:
    """
    Shift 1-based coordinates to 0-based.

    The shift applies when no indexed tile sits on row 0 or column 0 and
    the smallest row or the smallest column is exactly 1. Sets that are
    already 0-based come back unchanged.
    """
    indexed = [t.position for t in tiles if t.position is not None]
    if not indexed:
        return list(tiles)

    min_row = min(p.row for p in indexed)
    min_col = min(p.col for p in indexed)
    has_zero = any(p.row == 0 or p.col == 0 for p in indexed)

    if has_zero or not (min_row == 1 or min_col == 1):
        return list(tiles)

    logger.debug(f"Shifting {len(indexed)} 1-based tile coordinates to 0-based")
    shifted = []
    for tile in tiles:
        if tile.position is None:
            shifted.append(tile)
        else:
            shifted.append(
                tile.with_position(GridPosition(tile.position.row - 1, tile.position.col - 1))
            )
    return shifted


def deduplicate(
    tiles: list[Tile],
    bounds: Optional[tuple[int, int]] = None,
) -> list[Tile]:
    """
    Resolve conflicting coordinate claims.

    Walks tiles in extraction order and keeps the first tile claiming
    each position. Later claimants and tiles with negative coordinates
    are dropped. Tiles without a position are always kept.

    Args:
        tiles: Tiles in extraction order
        bounds: Optional known (rows, cols). Indexed tiles outside the
            grid are dropped and the result is capped at rows*cols tiles.
            Indexed tiles inside the grid are never dropped by the cap;
            tiles without a position fill the remaining cells.

    Returns:
        The retained tiles, order preserved
    """
    seen: set[GridPosition] = set()
    kept: list[Tile] = []
    dropped = 0

    for tile in tiles:
        pos = tile.position
        if pos is not None:
            if pos.row < 0 or pos.col < 0 or pos in seen:
                dropped += 1
                continue
            if bounds is not None and (pos.row >= bounds[0] or pos.col >= bounds[1]):
                dropped += 1
                continue
            seen.add(pos)
        kept.append(tile)

    if bounds is not None:
        capacity = bounds[0] * bounds[1]
        if len(kept) > capacity:
            # In-grid indexed tiles are unique, so they always fit; unindexed
            # tiles take the remaining cells in extraction order
            room = capacity - len(seen)
            trimmed = []
            for tile in kept:
                if tile.position is None:
                    if room <= 0:
                        continue
                    room -= 1
                trimmed.append(tile)
            dropped += len(kept) - len(trimmed)
            kept = trimmed

    if dropped:
        logger.debug(f"Dropped {dropped} duplicate or out-of-bounds tile(s)")
    return kept
