# tests/decoration_tool/conftest.py
"""Fixtures for decoration tool tests."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
import pytest


def pytest_configure() -> None:
    # Ensure `src` is importable when running tests from the repo root.
    repo_root = Path(__file__).resolve().parents[2]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


class FakeHost:
    """In-memory host with a configurable selection and save behaviour."""

    def __init__(
        self,
        selected=None,
        *,
        available: bool = True,
        save_error: Optional[Exception] = None,
        fetch_gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.selected = selected
        self._available = available
        self.save_error = save_error
        self.fetch_gate = fetch_gate
        self.saved: List[tuple] = []

    @property
    def available(self) -> bool:
        return self._available

    async def get_selected_image(self):
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        return self.selected

    async def save_image(self, png: bytes, metadata) -> str:
        if self.save_error is not None:
            raise self.save_error
        self.saved.append((png, metadata))
        return f"item-{len(self.saved)}"


class Notifications:
    """Collects (message, severity) pairs passed to the session notifier."""

    def __init__(self) -> None:
        self.messages: list = []

    def __call__(self, message, severity) -> None:
        self.messages.append((message, severity))

    @property
    def last(self):
        return self.messages[-1] if self.messages else None


@pytest.fixture
def notifications() -> Notifications:
    return Notifications()


@pytest.fixture
def small_config():
    from nicedecor.decoration_tool.config import DecorationToolConfig

    return DecorationToolConfig(
        placeholder_width=40,
        placeholder_height=30,
        placeholder_fill=(255, 255, 255, 255),
    )


@pytest.fixture
def session(small_config, notifications):
    """Initialized standalone session on a 40x30 white canvas."""
    from nicedecor.decoration_tool.session import EditSession

    s = EditSession(small_config, notify=notifications)
    s.initialize()
    return s


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    """A 20x10 PNG: left half blue, right half green."""
    from PIL import Image

    arr = np.zeros((10, 20, 4), dtype=np.uint8)
    arr[:, :10] = (0, 0, 255, 255)
    arr[:, 10:] = (0, 255, 0, 255)
    path = tmp_path / "sample.png"
    Image.fromarray(arr).save(path)
    return path


@pytest.fixture
def fake_host():
    """Factory for :class:`FakeHost` instances."""
    return FakeHost
