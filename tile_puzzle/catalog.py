"""Puzzle catalog and archive fetching."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests

from .errors import ArchiveFetchError

logger = logging.getLogger(__name__)


def is_url(path: str) -> bool:
    return path.lower().startswith(("http://", "https://"))


@dataclass(frozen=True)
class PuzzleDescriptor:
    """A catalog entry. The engine only reads these."""

    id: str
    name: str
    difficulty: str
    archive_path: str
    preview_path: str = ""
    rows: Optional[int] = None
    cols: Optional[int] = None

    @property
    def bounds(self) -> Optional[tuple[int, int]]:
        """Known (rows, cols) if the catalog gives both."""
        if self.rows and self.cols:
            return self.rows, self.cols
        return None

    @property
    def archive_name(self) -> str:
        return f"{self.id}.zip"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "difficulty": self.difficulty,
            "rows": self.rows,
            "cols": self.cols,
            "archivePath": self.archive_path,
            "previewPath": self.preview_path,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PuzzleDescriptor":
        """
        Create from a catalog record.

        Accepts ``archivePath``, ``zipPath`` or ``archive_path`` for the
        archive, and ``previewPath`` or ``preview`` for the preview image.
        """
        puzzle_id = str(data["id"])
        archive_path = data.get("archivePath") or data.get("zipPath") or data.get("archive_path")
        if not archive_path:
            raise ValueError(f"Puzzle {puzzle_id} has no archive path")

        preview = (
            data.get("previewPath")
            or data.get("preview")
            or data.get("preview_path")
            or f"/puzzles/previews/{puzzle_id}.jpg"
        )
        rows = data.get("rows")
        cols = data.get("cols")
        return cls(
            id=puzzle_id,
            name=str(data.get("name") or puzzle_id),
            difficulty=str(data.get("difficulty") or ""),
            archive_path=str(archive_path),
            preview_path=str(preview),
            rows=int(rows) if rows else None,
            cols=int(cols) if cols else None,
        )


def filter_by_difficulty(puzzles: list[PuzzleDescriptor], difficulty: str) -> list[PuzzleDescriptor]:
    """Puzzles of one difficulty, case-insensitive; ``custom`` lists them all."""
    difficulty = difficulty.lower()
    if difficulty == "custom":
        return list(puzzles)
    return [p for p in puzzles if p.difficulty.lower() == difficulty]


class Catalog(ABC):
    """Read-only source of puzzle descriptors."""

    @abstractmethod
    def list_puzzles(self) -> list[PuzzleDescriptor]:
        pass

    def get(self, puzzle_id: str) -> Optional[PuzzleDescriptor]:
        return next((p for p in self.list_puzzles() if p.id == puzzle_id), None)


class StaticCatalog(Catalog):
    """Catalog over a fixed list."""

    def __init__(self, puzzles: list[PuzzleDescriptor]):
        self._puzzles = list(puzzles)

    def list_puzzles(self) -> list[PuzzleDescriptor]:
        return list(self._puzzles)


class JsonCatalog(Catalog):
    """
    Catalog read from a JSON list, on disk or over HTTP.

    A catalog that cannot be read lists no puzzles; the failure is
    logged rather than raised.
    """

    def __init__(self, source: str | Path, timeout: float = 30.0):
        self.source = str(source)
        self.timeout = timeout

    def _read(self):
        if is_url(self.source):
            response = requests.get(self.source, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        with open(self.source) as f:
            return json.load(f)

    def list_puzzles(self) -> list[PuzzleDescriptor]:
        try:
            data = self._read()
        except (OSError, ValueError, requests.RequestException) as e:
            logger.error(f"Failed to fetch puzzles from {self.source}: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Catalog {self.source} is not a list")
            return []

        puzzles = []
        for record in data:
            try:
                puzzles.append(PuzzleDescriptor.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping catalog record {record!r}: {e}")
        return puzzles


class ArchiveFetcher:
    """Fetches archive bytes from local paths or HTTP URLs."""

    def __init__(self, root: str | Path = ".", timeout: float = 30.0):
        """
        Args:
            root: Base folder for relative and site-absolute (``/x.zip``) paths
            timeout: HTTP timeout in seconds
        """
        self.root = Path(root)
        self.timeout = timeout

    def resolve(self, path: str) -> Path:
        """Map a catalog path to a local file; site-absolute paths fall under ``root``."""
        candidate = Path(path)
        if candidate.is_absolute() and candidate.exists():
            return candidate
        return self.root / path.lstrip("/")

    def fetch(self, path: str) -> bytes:
        """
        Get the raw bytes of an archive.

        Raises:
            ArchiveFetchError: On a non-success response, a missing file
                or an empty body
        """
        if is_url(path):
            try:
                response = requests.get(path, timeout=self.timeout)
            except requests.RequestException as e:
                raise ArchiveFetchError(f"Could not fetch {path}: {e}") from e
            if not response.ok:
                raise ArchiveFetchError(f"Missing archive: {path} ({response.status_code})")
            data = response.content
        else:
            local = self.resolve(path)
            try:
                data = local.read_bytes()
            except OSError as e:
                raise ArchiveFetchError(f"Missing archive: {local} ({e.strerror or e})") from e

        if not data:
            raise ArchiveFetchError(f"Archive is empty: {path}")
        return data
