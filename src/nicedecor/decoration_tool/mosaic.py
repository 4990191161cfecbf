# nicedecor/src/nicedecor/decoration_tool/mosaic.py

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from nicedecor.utils.logging import get_logger
from .errors import RegionTooSmall
from .viewport import Point

logger = get_logger(__name__)

MIN_MOSAIC_SIZE = 5


@dataclass
class SelectionRect:
    """Mosaic drag selection in bitmap coordinates (floats)."""

    start: Point
    end: Point

    def normalized(self) -> Tuple[int, int, int, int]:
        """Return integer (x, y, width, height) with a non-negative size."""
        x0 = int(math.floor(min(self.start[0], self.end[0])))
        y0 = int(math.floor(min(self.start[1], self.end[1])))
        x1 = int(math.floor(max(self.start[0], self.end[0])))
        y1 = int(math.floor(max(self.start[1], self.end[1])))
        return x0, y0, x1 - x0, y1 - y0

    def clipped(self, width: int, height: int) -> Tuple[int, int, int, int]:
        """Normalized rect intersected with a ``width`` x ``height`` bitmap."""
        x, y, w, h = self.normalized()
        left = max(0, x)
        top = max(0, y)
        right = min(width, x + w)
        bottom = min(height, y + h)
        return left, top, max(0, right - left), max(0, bottom - top)


def _block_edges(length: int, block_size: int) -> np.ndarray:
    return np.arange(0, length, block_size)


def apply_mosaic(
    pixels: np.ndarray,
    rect: SelectionRect,
    block_size: int,
    *,
    min_size: int = MIN_MOSAIC_SIZE,
) -> Tuple[int, int, int, int]:
    """Pixelate ``rect`` of an RGBA array in place.

    The clipped region is split into ``block_size`` squares (edge cells are
    truncated) and every pixel of a cell is replaced by the cell's
    per-channel mean, truncated to an integer.

    Returns:
        The clipped (x, y, width, height) that was modified.

    Raises:
        RegionTooSmall: the clipped region is narrower or shorter than
            ``min_size``; the array is left untouched.
    """
    if block_size < 1:
        raise ValueError(f"block_size must be positive, got {block_size}")

    height, width = pixels.shape[:2]
    x, y, w, h = rect.clipped(width, height)
    if w < min_size or h < min_size:
        raise RegionTooSmall(
            f"Selected region {w}x{h} is smaller than {min_size}x{min_size} pixels"
        )

    region = pixels[y:y + h, x:x + w]

    row_edges = _block_edges(h, block_size)
    col_edges = _block_edges(w, block_size)
    cell_h = np.diff(np.append(row_edges, h))
    cell_w = np.diff(np.append(col_edges, w))

    sums = np.add.reduceat(region.astype(np.int64), row_edges, axis=0)
    sums = np.add.reduceat(sums, col_edges, axis=1)
    counts = (cell_h[:, None] * cell_w[None, :])[..., None]
    means = (sums // counts).astype(np.uint8)

    region[...] = np.repeat(np.repeat(means, cell_h, axis=0), cell_w, axis=1)

    logger.debug(
        f"mosaic applied: rect=({x}, {y}, {w}x{h}), block={block_size}, "
        f"cells={len(row_edges)}x{len(col_edges)}"
    )
    return x, y, w, h
