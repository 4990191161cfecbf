# nicedecor/src/nicedecor/decoration_tool/viewport.py

from __future__ import annotations

from dataclasses import dataclass, asdict, replace
from typing import Any, Tuple

from .errors import InvalidViewport

Point = Tuple[float, float]


@dataclass
class ViewTransform:
    """Pan/zoom mapping from bitmap space to device space.

    ``device = bitmap * scale + origin``. Device space is measured in
    backing-store pixels, the same units raw pointer coordinates use.
    """

    scale: float = 1.0
    origin_x: float = 0.0
    origin_y: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ViewTransform":
        return cls(**data)

    @property
    def is_identity(self) -> bool:
        return self.scale == 1.0 and self.origin_x == 0.0 and self.origin_y == 0.0

    # ------------------ core operations ------------------

    def reset(self) -> None:
        self.scale = 1.0
        self.origin_x = 0.0
        self.origin_y = 0.0

    def to_bitmap(self, dx: float, dy: float) -> Point:
        """Device coords -> bitmap coords."""
        return (dx - self.origin_x) / self.scale, (dy - self.origin_y) / self.scale

    def to_device(self, bx: float, by: float) -> Point:
        """Bitmap coords -> device coords."""
        return bx * self.scale + self.origin_x, by * self.scale + self.origin_y

    def zoom_at(
        self,
        device_x: float,
        device_y: float,
        delta: float,
        min_scale: float = 0.1,
        max_scale: float = 10.0,
    ) -> bool:
        """Change scale by ``delta`` keeping the bitmap point under the cursor fixed.

        Returns True if the scale actually changed (False at the clamp bounds).
        """
        # rounded so repeated 0.1 notches land on 1.1, 1.2, ... exactly
        new_scale = max(min_scale, min(max_scale, round(self.scale + delta, 6)))
        if new_scale == self.scale:
            return False

        bx, by = self.to_bitmap(device_x, device_y)
        self.scale = new_scale
        self.origin_x = device_x - bx * new_scale
        self.origin_y = device_y - by * new_scale
        return True

    def panned(self, dx: float, dy: float) -> "ViewTransform":
        """Copy of this transform with the origin moved by a device-space delta."""
        return replace(self, origin_x=self.origin_x + dx, origin_y=self.origin_y + dy)


def device_to_bitmap(
    x: float,
    y: float,
    bitmap_size: Tuple[int, int],
    css_size: Tuple[float, float],
) -> Point:
    """Raw mode: CSS pixel position on the canvas -> bitmap pixel position.

    Only the CSS-vs-backing-store scale is compensated; pan/zoom is ignored,
    so strokes and mosaic selections always land in true bitmap space.
    """
    bitmap_w, bitmap_h = bitmap_size
    css_w, css_h = css_size
    if css_w <= 0 or css_h <= 0:
        raise InvalidViewport(f"Canvas has no visible size ({css_w}x{css_h})")

    return x * (bitmap_w / css_w), y * (bitmap_h / css_h)


def device_to_view_bitmap(
    x: float,
    y: float,
    bitmap_size: Tuple[int, int],
    css_size: Tuple[float, float],
    view: ViewTransform,
) -> Point:
    """Transformed mode: raw mapping followed by the inverse view transform."""
    dx, dy = device_to_bitmap(x, y, bitmap_size, css_size)
    return view.to_bitmap(dx, dy)


def bitmap_to_device(x: float, y: float, view: ViewTransform) -> Point:
    """Bitmap coords -> device (backing-store) coords."""
    return view.to_device(x, y)
