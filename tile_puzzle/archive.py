"""Reading tile images out of ZIP archives."""

import io
import logging
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Optional

from .coordinates import deduplicate, normalize_indices, parse_coordinates
from .errors import ArchiveReadError, EmptyArchiveError
from .tiles import Tile, natural_key

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif"}
JUNK_FOLDERS = {"__macosx"}
JUNK_NAMES = {"thumbs.db", "desktop.ini", "ehthumbs.db"}
JUNK_STEMS = {"readme", "license", "licence"}


@dataclass
class ArchiveEntry:
    """One qualifying image entry of an archive."""

    path: str
    data: bytes = field(repr=False)

    @property
    def name(self) -> str:
        """Base name with folders stripped."""
        return PurePosixPath(self.path).name


def is_junk(path: str) -> bool:
    """Check whether an entry is OS metadata or documentation rather than a tile."""
    parts = [p.lower() for p in PurePosixPath(path.replace("\\", "/")).parts]
    if not parts:
        return True
    if any(p in JUNK_FOLDERS for p in parts[:-1]):
        return True

    base = parts[-1]
    # Hidden files, AppleDouble resource forks (._name), .DS_Store
    if base.startswith("."):
        return True
    if base in JUNK_NAMES:
        return True
    # README, LICENSE.txt, readme.md; not license_plate_r0c0.png
    return base.split(".", 1)[0] in JUNK_STEMS


def is_image_name(path: str) -> bool:
    """Check the entry's extension against the accepted image types."""
    return PurePosixPath(path).suffix.lower() in IMAGE_EXTENSIONS


def extract_entries(blob: bytes) -> list[ArchiveEntry]:
    """
    Read every qualifying image entry from a ZIP archive.

    Directory entries, junk files, empty entries and non-image
    extensions are skipped. Entries come back in natural name order.

    Args:
        blob: Raw archive bytes

    Returns:
        Image entries, naturally ordered by base name then full path

    Raises:
        ArchiveReadError: If the archive cannot be opened or decompressed
        EmptyArchiveError: If no entry qualifies
    """
    entries: list[ArchiveEntry] = []
    try:
        with zipfile.ZipFile(io.BytesIO(blob)) as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                if is_junk(info.filename) or not is_image_name(info.filename):
                    continue
                if info.file_size == 0:
                    continue
                data = zf.read(info)
                if not data:
                    continue
                entries.append(ArchiveEntry(path=info.filename, data=data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError, OSError) as e:
        raise ArchiveReadError(f"Failed to read archive: {e}") from e
    except (NotImplementedError, RuntimeError) as e:
        # Unsupported compression method or encrypted entry
        raise ArchiveReadError(f"Failed to read archive: {e}") from e

    if not entries:
        raise EmptyArchiveError()

    entries.sort(key=lambda e: (natural_key(e.name), natural_key(e.path)))
    return entries


def _unique_id(path: str, taken: set[str]) -> str:
    candidate = path
    n = 2
    while candidate in taken:
        candidate = f"{path}~{n}"
        n += 1
    taken.add(candidate)
    return candidate


def tiles_from_entries(entries: list[ArchiveEntry]) -> list[Tile]:
    """Turn archive entries into tiles, parsing each name for coordinates."""
    taken: set[str] = set()
    return [
        Tile(
            id=_unique_id(entry.path, taken),
            name=entry.name,
            image=entry.data,
            position=parse_coordinates(entry.name),
        )
        for entry in entries
    ]


def read_tiles(blob: bytes, bounds: Optional[tuple[int, int]] = None) -> list[Tile]:
    """
    Run the full ingestion pipeline: extract, parse, normalize, deduplicate.

    Args:
        blob: Raw archive bytes
        bounds: Optional known (rows, cols) to drop out-of-range tiles

    Returns:
        The final tile set in extraction order
    """
    entries = extract_entries(blob)
    tiles = normalize_indices(tiles_from_entries(entries))
    tiles = deduplicate(tiles, bounds=bounds)

    indexed = sum(1 for t in tiles if t.position is not None)
    logger.debug(f"Read {len(tiles)} tiles ({indexed} with coordinates) from {len(entries)} entries")
    return tiles
