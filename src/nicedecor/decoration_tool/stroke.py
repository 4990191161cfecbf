# nicedecor/src/nicedecor/decoration_tool/stroke.py
"""Pen and eraser rasterization.

Strokes are drawn by stamping filled circles along the pointer path rather
than drawing one line per pointer sample, so coverage stays continuous with
large pens and sparse pointer events.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple, Union

import numpy as np
from PIL import ImageColor

from .viewport import Point

RGBA = Tuple[int, int, int, int]
ColorLike = Union[str, Sequence[int]]

# Radius that always reaches the centre of the pixel under the point.
_MIN_RADIUS = math.sqrt(0.5)

TRANSPARENT: RGBA = (0, 0, 0, 0)


def parse_color(color: ColorLike) -> RGBA:
    """Resolve a CSS color string or an RGB(A) sequence to an RGBA tuple."""
    if isinstance(color, str):
        rgba = ImageColor.getcolor(color, "RGBA")
    else:
        rgba = tuple(int(c) for c in color)
        if len(rgba) == 3:
            rgba = (*rgba, 255)
    if len(rgba) != 4 or any(c < 0 or c > 255 for c in rgba):
        raise ValueError(f"invalid color: {color!r}")
    return rgba  # type: ignore[return-value]


def stamp_circle(
    pixels: np.ndarray,
    cx: float,
    cy: float,
    diameter: float,
    color: RGBA,
    *,
    erase: bool = False,
) -> None:
    """Fill a circle of ``diameter`` centred on (cx, cy), in place.

    Paint mode composites ``color`` source-over; erase mode replaces the
    covered pixels with transparent black.
    """
    height, width = pixels.shape[:2]
    r = max(diameter / 2.0, _MIN_RADIUS)

    x0 = max(0, int(math.floor(cx - r)))
    x1 = min(width, int(math.ceil(cx + r)) + 1)
    y0 = max(0, int(math.floor(cy - r)))
    y1 = min(height, int(math.ceil(cy + r)) + 1)
    if x0 >= x1 or y0 >= y1:
        return

    ys, xs = np.ogrid[y0:y1, x0:x1]
    mask = (xs + 0.5 - cx) ** 2 + (ys + 0.5 - cy) ** 2 <= r * r
    if not mask.any():
        return

    region = pixels[y0:y1, x0:x1]
    if erase:
        region[mask] = TRANSPARENT
        return

    src_a = color[3]
    if src_a == 255:
        region[mask] = color
        return
    if src_a == 0:
        return

    dst = region[mask].astype(np.float64) / 255.0
    src = np.asarray(color, dtype=np.float64) / 255.0
    out_a = src[3] + dst[:, 3] * (1.0 - src[3])
    safe_a = np.where(out_a > 0, out_a, 1.0)
    out_rgb = (src[:3] * src[3] + dst[:, :3] * dst[:, 3:4] * (1.0 - src[3])) / safe_a[:, None]

    blended = np.empty_like(dst)
    blended[:, :3] = out_rgb
    blended[:, 3] = out_a
    region[mask] = np.clip(np.rint(blended * 255.0), 0, 255).astype(np.uint8)


def stroke_points(start: Point, end: Point) -> list[Point]:
    """Centres stamped for one stroke segment from ``start`` to ``end``."""
    sx, sy = start
    ex, ey = end
    points: list[Point] = [(ex, ey)]

    distance = math.hypot(ex - sx, ey - sy)
    if distance >= 2:
        steps = max(int(distance // 2), 1)
        for i in range(1, steps + 1):
            t = i / steps
            points.append((sx + (ex - sx) * t, sy + (ey - sy) * t))
        points.append((ex, ey))
    return points


def render_stroke(
    pixels: np.ndarray,
    start: Point,
    end: Point,
    size: float,
    color: ColorLike,
    *,
    erase: bool = False,
) -> None:
    """Rasterize one pen/eraser segment into ``pixels`` in place."""
    if size <= 0:
        raise ValueError(f"pen size must be positive, got {size}")
    rgba = TRANSPARENT if erase else parse_color(color)
    for px, py in stroke_points(start, end):
        stamp_circle(pixels, px, py, size, rgba, erase=erase)
