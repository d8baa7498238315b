"""Tile model and natural name ordering."""

import re
from dataclasses import dataclass, field, replace
from typing import NamedTuple, Optional

_DIGITS = re.compile(r"(\d+)")


class GridPosition(NamedTuple):
    """A 0-indexed (row, col) grid coordinate."""

    row: int
    col: int


@dataclass(frozen=True)
class Tile:
    """One image fragment plus its designed grid position, if known.

    ``position`` is either a full ``GridPosition`` or ``None``; a tile
    never carries a row without a column.
    """

    id: str
    name: str
    image: bytes = field(default=b"", repr=False, compare=False)
    position: Optional[GridPosition] = None

    @property
    def has_position(self) -> bool:
        return self.position is not None

    @property
    def row(self) -> Optional[int]:
        return self.position.row if self.position is not None else None

    @property
    def col(self) -> Optional[int]:
        return self.position.col if self.position is not None else None

    def with_position(self, position: Optional[GridPosition]) -> "Tile":
        """Return a copy of this tile at a different position."""
        return replace(self, position=position)


def natural_key(name: str) -> list:
    """
    Sort key that orders embedded numbers by value.

    ``"tile2"`` sorts before ``"tile10"``. Text runs compare
    case-insensitively. ``re.split`` with a capturing group always puts
    text at even indices and digit runs at odd ones, so keys of
    different names never compare a string against an int.
    """
    parts = _DIGITS.split(name.lower())
    return [int(part) if i % 2 else part for i, part in enumerate(parts)]


def natural_sorted(tiles: list[Tile]) -> list[Tile]:
    """Return tiles ordered by display name, numbers compared by value."""
    return sorted(tiles, key=lambda t: (natural_key(t.name), t.id))
