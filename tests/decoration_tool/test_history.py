"""Tests for HistoryStack undo/redo semantics."""

from __future__ import annotations

import numpy as np
import pytest

from nicedecor.decoration_tool.bitmap import Bitmap
from nicedecor.decoration_tool.history import MAX_HISTORY, HistoryStack


def _bitmap_with_value(value: int) -> Bitmap:
    bm = Bitmap.blank(4, 3)
    bm.pixels[...] = value
    return bm


def test_empty_stack_boundaries() -> None:
    h = HistoryStack()
    assert len(h) == 0
    assert h.cursor == -1
    assert h.current() is None
    assert h.undo() is None
    assert h.redo() is None


def test_undo_all_then_redo_all_restores_each_state() -> None:
    """N commits, N-1 undos back to the first, then redos reproduce every state bit-identically."""
    h = HistoryStack()
    bm = _bitmap_with_value(0)
    states = []
    for i in range(12):
        bm.pixels[...] = i * 7
        states.append(bm.pixels.copy())
        h.commit(bm)

    for i in range(len(states) - 2, -1, -1):
        snap = h.undo()
        assert snap is not None
        assert np.array_equal(snap.pixels, states[i])

    for i in range(1, len(states)):
        snap = h.redo()
        assert snap is not None
        assert np.array_equal(snap.pixels, states[i])


def test_boundary_undo_redo_are_noops() -> None:
    h = HistoryStack()
    h.commit(_bitmap_with_value(1))
    assert h.undo() is None
    assert h.undo() is None
    assert h.cursor == 0

    h.commit(_bitmap_with_value(2))
    assert h.redo() is None
    assert h.redo() is None
    assert h.cursor == 1


def test_length_never_exceeds_max_and_oldest_is_evicted() -> None:
    h = HistoryStack()
    for i in range(MAX_HISTORY + 10):
        h.commit(_bitmap_with_value(i))
        assert len(h) <= MAX_HISTORY

    assert len(h) == MAX_HISTORY
    assert h.cursor == MAX_HISTORY - 1

    undos = 0
    while h.undo() is not None:
        undos += 1
    assert undos == MAX_HISTORY - 1
    # values 0..9 were evicted, the floor is now 10
    assert int(h.current().pixels[0, 0, 0]) == 10


def test_commit_after_undo_discards_redo_branch() -> None:
    h = HistoryStack()
    for i in range(5):
        h.commit(_bitmap_with_value(i))
    h.undo()
    h.undo()
    assert h.can_redo

    h.commit(_bitmap_with_value(99))
    assert len(h) == 4
    assert h.cursor == 3
    assert not h.can_redo
    assert h.redo() is None
    assert int(h.current().pixels[0, 0, 0]) == 99


def test_snapshots_do_not_alias_live_bitmap() -> None:
    h = HistoryStack()
    bm = _bitmap_with_value(5)
    snap = h.commit(bm)
    bm.pixels[...] = 200
    assert int(snap.pixels[0, 0, 0]) == 5
    with pytest.raises(ValueError):
        snap.pixels[0, 0, 0] = 1


def test_position_label() -> None:
    h = HistoryStack(max_history=3)
    for i in range(5):
        h.commit(_bitmap_with_value(i))
    assert h.position == "3/3"
    h.undo()
    assert h.position == "2/3"


def test_invalid_max_history() -> None:
    with pytest.raises(ValueError):
        HistoryStack(max_history=0)
