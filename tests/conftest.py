"""Shared fixtures: in-memory tile archives."""

import io
import zipfile

import numpy as np
import pytest
from PIL import Image


def png_bytes(color: tuple[int, int, int] = (255, 0, 0), size: int = 8) -> bytes:
    """Encode a solid-color square as PNG."""
    img = np.zeros((size, size, 3), dtype=np.uint8)
    img[:, :] = color
    buffer = io.BytesIO()
    Image.fromarray(img).save(buffer, format="PNG")
    return buffer.getvalue()


def zip_bytes(entries: dict[str, bytes]) -> bytes:
    """Build a ZIP archive in memory from name -> content."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def make_archive():
    """Factory for archives of small PNG tiles, one per name."""

    def _make(names: list[str], extra: dict[str, bytes] | None = None) -> bytes:
        entries = {}
        for i, name in enumerate(names):
            entries[name] = png_bytes(((i * 37) % 256, (i * 91) % 256, (i * 53) % 256))
        entries.update(extra or {})
        return zip_bytes(entries)

    return _make


@pytest.fixture
def grid_2x2_archive(make_archive):
    """Four tiles named r0c0..r1c1."""
    return make_archive(["r0c0.png", "r0c1.png", "r1c0.png", "r1c1.png"])
