# tests/decoration_tool/test_viewport.py

from __future__ import annotations

import pytest

from nicedecor.decoration_tool.errors import InvalidViewport
from nicedecor.decoration_tool.viewport import (
    ViewTransform,
    bitmap_to_device,
    device_to_bitmap,
    device_to_view_bitmap,
)


def test_raw_mode_compensates_css_scale():
    """800x600 backing store shown at 400x300 CSS: (100, 100) -> (200, 200)."""
    x, y = device_to_bitmap(100, 100, (800, 600), (400, 300))
    assert (x, y) == pytest.approx((200.0, 200.0))


def test_raw_mode_ignores_view_transform():
    view = ViewTransform(scale=2.5, origin_x=-40.0, origin_y=13.0)
    raw = device_to_bitmap(50, 60, (200, 100), (100, 50))
    transformed = device_to_view_bitmap(50, 60, (200, 100), (100, 50), view)
    assert raw == pytest.approx((100.0, 120.0))
    assert transformed == pytest.approx(((100.0 + 40.0) / 2.5, (120.0 - 13.0) / 2.5))


@pytest.mark.parametrize("css_size", [(0, 300), (400, 0), (0, 0)])
def test_zero_css_size_raises_invalid_viewport(css_size):
    with pytest.raises(InvalidViewport):
        device_to_bitmap(10, 10, (800, 600), css_size)


def test_zoom_in_keeps_point_under_cursor():
    view = ViewTransform()
    before = view.to_bitmap(50, 50)

    assert view.zoom_at(50, 50, 0.1)
    assert view.scale == pytest.approx(1.1)

    # the same bitmap point still renders at device (50, 50)
    assert bitmap_to_device(*before, view) == pytest.approx((50.0, 50.0))


def test_zoom_anchor_holds_over_many_notches():
    view = ViewTransform(scale=1.0, origin_x=17.0, origin_y=-9.0)
    anchor = (123.0, 45.0)
    bitmap_pt = view.to_bitmap(*anchor)
    for _ in range(30):
        view.zoom_at(*anchor, 0.1)
    for _ in range(60):
        view.zoom_at(*anchor, -0.1)
    assert view.to_device(*bitmap_pt) == pytest.approx(anchor)


def test_zoom_is_clamped():
    view = ViewTransform(scale=10.0)
    assert view.zoom_at(0, 0, 0.1, min_scale=0.1, max_scale=10.0) is False
    assert view.scale == 10.0

    view = ViewTransform(scale=0.1)
    assert view.zoom_at(5, 5, -0.1, min_scale=0.1, max_scale=10.0) is False
    assert view.scale == pytest.approx(0.1)


def test_panned_and_reset():
    view = ViewTransform(scale=2.0, origin_x=1.0, origin_y=2.0)
    moved = view.panned(10.0, -5.0)
    assert (moved.origin_x, moved.origin_y, moved.scale) == (11.0, -3.0, 2.0)
    assert (view.origin_x, view.origin_y) == (1.0, 2.0)

    moved.reset()
    assert moved.is_identity


def test_to_dict_roundtrip():
    view = ViewTransform(scale=1.5, origin_x=3.0, origin_y=4.0)
    assert ViewTransform.from_dict(view.to_dict()) == view
