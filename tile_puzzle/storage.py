"""Key-value persistence port and the player records kept in it."""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional

logger = logging.getLogger(__name__)

PLAYER_KEY = "playerName"
THEME_KEY = "theme"
DEFAULT_PLAYER = "Player"

Theme = Literal["light", "dark"]


def points_key(player_name: str) -> str:
    """Store key of a player's point balance."""
    return f"points:{player_name}"


def leaderboard_key(puzzle_id: Optional[str], rows: int, cols: int) -> str:
    """Store key of a leaderboard; uploaded archives share the ``custom`` board."""
    return f"leaderboard:{puzzle_id or 'custom'}:{rows}x{cols}"


class KeyValueStore(ABC):
    """String-keyed, string-valued persistence."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Namespaced key

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a value, replacing any previous one."""
        pass

    def get_json(self, key: str, default=None):
        """Read and decode a JSON value; corrupt payloads return ``default``."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupt value for {key}: {e}")
            return default

    def set_json(self, key: str, value) -> None:
        self.set(key, json.dumps(value))


class MemoryStore(KeyValueStore):
    """Volatile store, for tests and one-off runs."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore(KeyValueStore):
    """
    Store backed by a single JSON file.

    The file is read once on creation and rewritten on every set. A
    missing or unreadable file starts an empty store.
    """

    def __init__(self, path: str | Path):
        """
        Initialize the store.

        Args:
            path: JSON file holding the store; parent folders are created
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data: dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.debug(f"No existing store at {self.path}")
            return

        try:
            with open(self.path) as f:
                data = json.load(f)
            values = data.get("values", {}) if isinstance(data, dict) else {}
            self._data = {str(k): str(v) for k, v in values.items()}
            logger.debug(f"Loaded {len(self._data)} keys from {self.path}")
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Failed to load store {self.path}: {e}")
            self._data = {}

    def _save(self) -> None:
        data = {
            "values": self._data,
            "last_updated": datetime.now().isoformat(),
        }
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()


class PlayerProfile:
    """Player identity and theme preference."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @property
    def name(self) -> str:
        return self.store.get(PLAYER_KEY) or DEFAULT_PLAYER

    @name.setter
    def name(self, value: str) -> None:
        self.store.set(PLAYER_KEY, (value or "").strip() or DEFAULT_PLAYER)

    @property
    def theme(self) -> Theme:
        return "dark" if self.store.get(THEME_KEY) == "dark" else "light"

    @theme.setter
    def theme(self, value: Theme) -> None:
        if value not in ("light", "dark"):
            raise ValueError(f"Invalid theme: {value}. Must be 'light' or 'dark'")
        self.store.set(THEME_KEY, value)

    def toggle_theme(self) -> Theme:
        self.theme = "light" if self.theme == "dark" else "dark"
        return self.theme


class PointsWallet:
    """
    A player's point balance.

    A player seen for the first time is seeded with ``starting_points``.
    The balance never goes below zero.
    """

    def __init__(self, store: KeyValueStore, player_name: str, starting_points: int = 5):
        self.store = store
        self.player_name = player_name
        self.key = points_key(player_name)
        if store.get(self.key) is None:
            store.set(self.key, str(starting_points))

    @property
    def balance(self) -> int:
        try:
            return max(0, int(self.store.get(self.key) or 0))
        except ValueError:
            logger.warning(f"Corrupt point balance for {self.player_name}; treating as 0")
            return 0

    def _write(self, value: int) -> int:
        value = max(0, value)
        self.store.set(self.key, str(value))
        return value

    def award(self, amount: int = 1) -> int:
        """Add points; returns the new balance."""
        return self._write(self.balance + amount)

    def spend(self, amount: int) -> int:
        """Remove points, flooring at zero; returns the new balance."""
        return self._write(self.balance - amount)

    def set_balance(self, value: int) -> int:
        return self._write(value)
