"""Tests for the pen/eraser stroke renderer."""

from __future__ import annotations

import numpy as np
import pytest

from nicedecor.decoration_tool.stroke import (
    parse_color,
    render_stroke,
    stamp_circle,
    stroke_points,
)

RED = (255, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def _canvas(w: int = 40, h: int = 20) -> np.ndarray:
    pixels = np.empty((h, w, 4), dtype=np.uint8)
    pixels[...] = WHITE
    return pixels


def test_parse_color() -> None:
    assert parse_color("red") == RED
    assert parse_color("#00ff0080") == (0, 255, 0, 128)
    assert parse_color((1, 2, 3)) == (1, 2, 3, 255)
    with pytest.raises(ValueError):
        parse_color((300, 0, 0, 0))
    with pytest.raises(ValueError):
        parse_color("not-a-color")


def test_short_segment_stamps_endpoint_only() -> None:
    assert stroke_points((5.0, 5.0), (6.0, 5.5)) == [(6.0, 5.5)]


def test_long_segment_interpolates_every_two_pixels() -> None:
    points = stroke_points((0.0, 0.0), (10.0, 0.0))
    # endpoint, 5 interpolated points, endpoint again
    assert len(points) == 7
    assert points[0] == (10.0, 0.0)
    assert points[-1] == (10.0, 0.0)
    xs = [p[0] for p in points[1:-1]]
    assert xs == pytest.approx([2.0, 4.0, 6.0, 8.0, 10.0])


def test_stroke_covers_gap_between_samples() -> None:
    pixels = _canvas()
    render_stroke(pixels, (2.0, 10.0), (37.0, 10.0), 3, "red")

    # the start point itself belongs to the previous segment
    row = pixels[10, 5:37]
    assert np.all(row == np.array(RED, dtype=np.uint8))
    # far from the stroke stays white
    assert np.all(pixels[0, :] == np.array(WHITE, dtype=np.uint8))


def test_size_one_stamp_covers_pixel_under_point() -> None:
    pixels = _canvas()
    stamp_circle(pixels, 10.0, 10.0, 1, RED)
    assert tuple(pixels[9, 9]) == RED or tuple(pixels[10, 10]) == RED
    assert np.count_nonzero(np.all(pixels == np.array(RED, dtype=np.uint8), axis=-1)) <= 4


def test_circle_diameter() -> None:
    pixels = _canvas(50, 50)
    stamp_circle(pixels, 25.0, 25.0, 20, RED)
    painted = np.all(pixels == np.array(RED, dtype=np.uint8), axis=-1)
    ys, xs = np.nonzero(painted)
    assert xs.max() - xs.min() + 1 == 20
    assert ys.max() - ys.min() + 1 == 20
    # corners of the bounding box are outside the circle
    assert not painted[15, 15]


def test_eraser_replaces_with_transparent() -> None:
    pixels = _canvas()
    render_stroke(pixels, (10.0, 10.0), (10.0, 10.0), 4, "red", erase=True)
    assert tuple(pixels[10, 10]) == (0, 0, 0, 0)
    assert tuple(pixels[0, 0]) == WHITE


def test_translucent_paint_blends_source_over() -> None:
    pixels = _canvas()
    stamp_circle(pixels, 10.0, 10.0, 4, (0, 0, 0, 128))
    r, g, b, a = (int(c) for c in pixels[10, 10])
    assert a == 255
    assert 120 <= r <= 135 and r == g == b


def test_stamp_outside_bitmap_is_ignored() -> None:
    pixels = _canvas()
    before = pixels.copy()
    stamp_circle(pixels, -50.0, -50.0, 10, RED)
    assert np.array_equal(pixels, before)


def test_non_positive_size_rejected() -> None:
    with pytest.raises(ValueError):
        render_stroke(_canvas(), (0, 0), (1, 1), 0, "red")
