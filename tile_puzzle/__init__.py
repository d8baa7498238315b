"""Tile Puzzle - assemble image tiles from ZIP archives into a grid."""

from .archive import extract_entries, read_tiles
from .board import Board, PlacementResult
from .catalog import ArchiveFetcher, JsonCatalog, PuzzleDescriptor
from .config import GameConfig
from .coordinates import deduplicate, normalize_indices, parse_coordinates
from .grid_inference import GridEstimate, infer_grid
from .leaderboard import Leaderboard, LeaderboardEntry, RankResult
from .metrics import CheckResult, format_elapsed
from .renderer import BoardRenderer
from .session import LoadReport, PuzzleSession, SessionState
from .storage import JsonFileStore, KeyValueStore, MemoryStore, PlayerProfile, PointsWallet
from .tiles import GridPosition, Tile

__version__ = "0.1.0"

__all__ = [
    "extract_entries",
    "read_tiles",
    "Board",
    "PlacementResult",
    "ArchiveFetcher",
    "JsonCatalog",
    "PuzzleDescriptor",
    "GameConfig",
    "deduplicate",
    "normalize_indices",
    "parse_coordinates",
    "GridEstimate",
    "infer_grid",
    "Leaderboard",
    "LeaderboardEntry",
    "RankResult",
    "CheckResult",
    "format_elapsed",
    "BoardRenderer",
    "LoadReport",
    "PuzzleSession",
    "SessionState",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PlayerProfile",
    "PointsWallet",
    "GridPosition",
    "Tile",
]
