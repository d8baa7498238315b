"""Tests for key-value stores, player profiles and point wallets."""

import json
import tempfile
from pathlib import Path

import pytest

from tile_puzzle.storage import (
    DEFAULT_PLAYER,
    JsonFileStore,
    MemoryStore,
    PlayerProfile,
    PointsWallet,
    leaderboard_key,
    points_key,
)


class TestKeys:
    """Tests for store key naming."""

    def test_points_key(self):
        assert points_key("ada") == "points:ada"

    def test_leaderboard_key(self):
        """Test catalog and custom leaderboard keys."""
        assert leaderboard_key("castle", 4, 5) == "leaderboard:castle:4x5"
        assert leaderboard_key(None, 3, 3) == "leaderboard:custom:3x3"


class TestMemoryStore:
    """Tests for MemoryStore."""

    def test_get_set(self):
        store = MemoryStore()
        assert store.get("a") is None
        store.set("a", "1")
        assert store.get("a") == "1"

    def test_json_round_trip(self):
        """Test JSON helpers."""
        store = MemoryStore()
        store.set_json("k", [{"x": 1}])
        assert store.get_json("k") == [{"x": 1}]

    def test_corrupt_json_returns_default(self):
        """Test that undecodable values fall back to the default."""
        store = MemoryStore({"k": "{oops"})
        assert store.get_json("k", default=[]) == []


class TestJsonFileStore:
    """Tests for JsonFileStore."""

    def test_persists_across_instances(self):
        """Test that values survive a reload."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "store.json"

            JsonFileStore(path).set("points:ada", "7")
            reloaded = JsonFileStore(path)

            assert reloaded.get("points:ada") == "7"
            data = json.loads(path.read_text())
            assert data["values"] == {"points:ada": "7"}
            assert "last_updated" in data

    def test_corrupt_file_starts_empty(self):
        """Test that an unreadable file does not raise."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "store.json"
            path.write_text("not json at all")

            store = JsonFileStore(path)

            assert store.get("anything") is None
            store.set("k", "v")
            assert JsonFileStore(path).get("k") == "v"


class TestPlayerProfile:
    """Tests for PlayerProfile."""

    def test_default_name(self):
        assert PlayerProfile(MemoryStore()).name == DEFAULT_PLAYER

    def test_name_is_trimmed(self):
        """Test that names are stored trimmed and blanks reset to default."""
        profile = PlayerProfile(MemoryStore())
        profile.name = "  ada  "
        assert profile.name == "ada"
        profile.name = "   "
        assert profile.name == DEFAULT_PLAYER

    def test_theme(self):
        """Test theme default, toggle and validation."""
        profile = PlayerProfile(MemoryStore())
        assert profile.theme == "light"
        assert profile.toggle_theme() == "dark"
        assert profile.toggle_theme() == "light"
        with pytest.raises(ValueError):
            profile.theme = "blue"


class TestPointsWallet:
    """Tests for PointsWallet."""

    def test_seeded_once(self):
        """Test that a new player starts with the seed balance."""
        store = MemoryStore()
        assert PointsWallet(store, "ada").balance == 5

        store.set(points_key("ada"), "2")
        assert PointsWallet(store, "ada").balance == 2

    def test_award_and_spend(self):
        """Test balance changes."""
        wallet = PointsWallet(MemoryStore(), "ada", starting_points=5)

        assert wallet.award() == 6
        assert wallet.spend(5) == 1

    def test_floor_at_zero(self):
        """Test that the balance never goes negative."""
        wallet = PointsWallet(MemoryStore(), "ada", starting_points=2)

        assert wallet.spend(5) == 0
        assert wallet.balance == 0

    def test_players_are_separate(self):
        """Test that balances are per player."""
        store = MemoryStore()
        PointsWallet(store, "ada").award(3)

        assert PointsWallet(store, "bob").balance == 5
        assert PointsWallet(store, "ada").balance == 8

    def test_corrupt_balance(self):
        """Test that a non-numeric balance reads as zero."""
        store = MemoryStore({points_key("ada"): "lots"})
        assert PointsWallet(store, "ada").balance == 0
