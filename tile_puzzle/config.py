"""Game configuration."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_STORE = "TILE_PUZZLE_STORE"
ENV_CATALOG = "TILE_PUZZLE_CATALOG"
ENV_PLAYER = "TILE_PUZZLE_PLAYER"


@dataclass
class GameConfig:
    """Settings for a puzzle session and its collaborators."""

    # Player
    player_name: str = "Player"

    # Placement
    assisted: bool = True  # Reject drops onto provably wrong cells

    # Grid inference
    index_threshold: float = 0.6  # Fraction of tiles that must carry coordinates
    filename_tolerance: float = 0.1  # Allowed mismatch for an AxB archive name

    # Points
    auto_solve_cost: int = 5
    solve_reward: int = 1
    starting_points: int = 5  # Seeded for a player seen for the first time

    # Leaderboard
    leaderboard_cap: int = 100

    # Palette shuffling on build
    shuffle_seed: Optional[int] = None

    # Collaborators
    store_path: Optional[str] = None  # JSON store file; None keeps everything in memory
    catalog_path: str = "puzzles/puzzle_list.json"  # File path or http(s) URL
    archive_root: str = "."  # Base folder for relative archive paths
    fetch_timeout: float = 30.0  # Seconds, for HTTP fetches

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "player_name": self.player_name,
            "assisted": self.assisted,
            "index_threshold": self.index_threshold,
            "filename_tolerance": self.filename_tolerance,
            "auto_solve_cost": self.auto_solve_cost,
            "solve_reward": self.solve_reward,
            "starting_points": self.starting_points,
            "leaderboard_cap": self.leaderboard_cap,
            "shuffle_seed": self.shuffle_seed,
            "store_path": self.store_path,
            "catalog_path": self.catalog_path,
            "archive_root": self.archive_root,
            "fetch_timeout": self.fetch_timeout,
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: dict) -> "GameConfig":
        """Create from dictionary."""
        return cls(
            player_name=data.get("player_name", "Player"),
            assisted=data.get("assisted", True),
            index_threshold=data.get("index_threshold", 0.6),
            filename_tolerance=data.get("filename_tolerance", 0.1),
            auto_solve_cost=data.get("auto_solve_cost", 5),
            solve_reward=data.get("solve_reward", 1),
            starting_points=data.get("starting_points", 5),
            leaderboard_cap=data.get("leaderboard_cap", 100),
            shuffle_seed=data.get("shuffle_seed"),
            store_path=data.get("store_path"),
            catalog_path=data.get("catalog_path", "puzzles/puzzle_list.json"),
            archive_root=data.get("archive_root", "."),
            fetch_timeout=data.get("fetch_timeout", 30.0),
        )

    @classmethod
    def load(cls, path: str | Path) -> "GameConfig":
        """Load configuration from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, base: Optional["GameConfig"] = None) -> "GameConfig":
        """Apply TILE_PUZZLE_* environment overrides on top of ``base``."""
        config = cls.from_dict(base.to_dict()) if base is not None else cls()
        if os.environ.get(ENV_STORE):
            config.store_path = os.environ[ENV_STORE]
        if os.environ.get(ENV_CATALOG):
            config.catalog_path = os.environ[ENV_CATALOG]
        if os.environ.get(ENV_PLAYER):
            config.player_name = os.environ[ENV_PLAYER]
        return config
