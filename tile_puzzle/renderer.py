"""Rendering boards and tiles to images."""

import io
import logging
from typing import Optional

import numpy as np
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from .board import Board
from .storage import Theme
from .tiles import Tile

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    "correct": (46, 160, 67),
    "wrong": (207, 34, 46),
    "": (128, 128, 128),
}
EMPTY_CELL_COLOR = (40, 40, 40)

# Margin background, empty cell and label colors per UI theme
THEME_COLORS = {
    "dark": {"background": (30, 30, 30), "empty": EMPTY_CELL_COLOR, "text": (200, 200, 200)},
    "light": {"background": (245, 245, 245), "empty": (220, 220, 220), "text": (60, 60, 60)},
}


class BoardRenderer:
    """Composes a board's placed tiles into a single annotated image."""

    def __init__(self, cell_size: int = 96, theme: Theme = "dark"):
        """
        Initialize the renderer.

        Args:
            cell_size: Edge length in pixels each tile is scaled to
            theme: "dark" or "light", for the margin and empty cells
        """
        if theme not in THEME_COLORS:
            raise ValueError(f"Invalid theme: {theme}. Must be 'light' or 'dark'")
        self.cell_size = cell_size
        self.theme = theme
        self._cache: dict[str, np.ndarray] = {}

    def _get_font(self, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        """Get a font for drawing text, with fallback."""
        for candidate in (
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
            "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
            "arial.ttf",
        ):
            try:
                return ImageFont.truetype(candidate, size)
            except (OSError, IOError):
                continue
        return ImageFont.load_default()

    def tile_image(self, tile: Tile) -> np.ndarray:
        """
        Decode a tile and scale it to the cell size.

        Undecodable tiles render as a flat placeholder.
        """
        cached = self._cache.get(tile.id)
        if cached is not None:
            return cached

        try:
            with Image.open(io.BytesIO(tile.image)) as img:
                img = img.convert("RGB").resize(
                    (self.cell_size, self.cell_size), Image.Resampling.LANCZOS
                )
                array = np.array(img)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.warning(f"Could not decode tile {tile.name}: {e}")
            array = np.full((self.cell_size, self.cell_size, 3), 90, dtype=np.uint8)

        self._cache[tile.id] = array
        return array

    def compose(self, board: Board) -> np.ndarray:
        """
        Get the board's current arrangement as an image.

        Returns:
            Numpy array (rows*cell, cols*cell, 3); empty cells are dark gray
        """
        size = self.cell_size
        h = board.rows * size
        w = board.cols * size
        result = np.zeros((h, w, 3), dtype=np.uint8)
        result[:, :] = THEME_COLORS[self.theme]["empty"]

        for row in range(board.rows):
            for col in range(board.cols):
                tile = board.tile(board.cell(row, col))
                if tile is None:
                    continue
                y1 = row * size
                x1 = col * size
                result[y1:y1 + size, x1:x1 + size] = self.tile_image(tile)

        return result

    def render(
        self,
        board: Board,
        show_status: bool = True,
        show_labels: bool = True,
        border_width: int = 3,
    ) -> np.ndarray:
        """
        Render the board with cell borders and coordinate labels.

        Args:
            board: Board to draw
            show_status: Color borders green/red for correct/wrong tiles
            show_labels: Add a margin with 0-indexed row and column numbers
            border_width: Width of cell borders

        Returns:
            Annotated image as numpy array
        """
        image = self.compose(board)
        h, w = image.shape[:2]

        margin = 24 if show_labels else 0
        output = np.zeros((h + margin, w + margin, 3), dtype=np.uint8)
        output[:, :] = THEME_COLORS[self.theme]["background"]
        output[margin:, margin:] = image

        pil_image = Image.fromarray(output)
        draw = ImageDraw.Draw(pil_image)

        size = self.cell_size
        for row in range(board.rows):
            for col in range(board.cols):
                status = board.cell_status(row, col) if show_status else ""
                x1 = margin + col * size
                y1 = margin + row * size
                draw.rectangle(
                    [x1, y1, x1 + size - 1, y1 + size - 1],
                    outline=STATUS_COLORS[status],
                    width=border_width if status else 1,
                )

        if show_labels:
            self._draw_border_labels(draw, margin, board.rows, board.cols)

        return np.array(pil_image)

    def _draw_border_labels(self, draw: ImageDraw.ImageDraw, margin: int, rows: int, cols: int) -> None:
        """Draw row and column numbers on the top and left margins."""
        font = self._get_font(max(10, margin - 8))
        text_color = THEME_COLORS[self.theme]["text"]
        size = self.cell_size

        labels = [(margin + c * size + size // 2, margin // 2, str(c)) for c in range(cols)]
        labels += [(margin // 2, margin + r * size + size // 2, str(r)) for r in range(rows)]

        for x, y, label in labels:
            bbox = draw.textbbox((0, 0), label, font=font)
            text_w = bbox[2] - bbox[0]
            text_h = bbox[3] - bbox[1]
            draw.text((x - text_w // 2, y - text_h // 2), label, fill=text_color, font=font)

    def save(self, board: Board, path: str, **kwargs) -> None:
        """Render and save the board to an image file."""
        Image.fromarray(self.render(board, **kwargs)).save(path)

    def thumbnail(self, tile: Tile, size: Optional[int] = None) -> Image.Image:
        """Get a tile as a PIL image, e.g. for a palette."""
        array = self.tile_image(tile)
        img = Image.fromarray(array)
        if size is not None and size != self.cell_size:
            img = img.resize((size, size), Image.Resampling.LANCZOS)
        return img
