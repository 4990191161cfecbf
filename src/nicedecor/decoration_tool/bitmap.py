# nicedecor/src/nicedecor/decoration_tool/bitmap.py

from __future__ import annotations

import base64
import io
from dataclasses import dataclass

import numpy as np
from PIL import Image


@dataclass(frozen=True)
class Snapshot:
    """Immutable full copy of a bitmap's pixel buffer."""

    pixels: np.ndarray

    @classmethod
    def capture(cls, pixels: np.ndarray) -> "Snapshot":
        frozen = np.array(pixels, dtype=np.uint8, copy=True)
        frozen.setflags(write=False)
        return cls(pixels=frozen)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


class Bitmap:
    """Mutable RGBA pixel grid, stored as a (height, width, 4) uint8 array."""

    def __init__(self, pixels: np.ndarray) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError("Bitmap expects a (height, width, 4) RGBA array")
        self.pixels = np.ascontiguousarray(pixels, dtype=np.uint8)

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        fill: tuple[int, int, int, int] = (0, 0, 0, 0),
    ) -> "Bitmap":
        if width <= 0 or height <= 0:
            raise ValueError(f"bitmap size must be positive, got {width}x{height}")
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = fill
        return cls(pixels)

    @classmethod
    def from_image(cls, image: Image.Image, size: tuple[int, int] | None = None) -> "Bitmap":
        """Build a bitmap from a PIL image, optionally scaled to ``size`` (w, h)."""
        rgba = image.convert("RGBA")
        if size is not None and rgba.size != tuple(size):
            rgba = rgba.resize(size, Image.Resampling.BILINEAR)
        return cls(np.array(rgba, dtype=np.uint8))

    # ------------- properties -------------

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    # ------------- snapshots -------------

    def snapshot(self) -> Snapshot:
        return Snapshot.capture(self.pixels)

    def restore(self, snapshot: Snapshot) -> None:
        """Replace the pixel buffer with a writable copy of ``snapshot``."""
        self.pixels = np.array(snapshot.pixels, dtype=np.uint8, copy=True)

    def fill(self, color: tuple[int, int, int, int]) -> None:
        self.pixels[...] = color

    # ------------- export -------------

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def to_png_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.to_image().save(buf, format="PNG")
        return buf.getvalue()

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.to_png_bytes()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
