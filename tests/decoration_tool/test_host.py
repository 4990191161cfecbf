"""Tests for host helpers: pixel URL decoding and the directory-backed host."""

from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from nicedecor.decoration_tool.errors import ImageLoadFailed
from nicedecor.decoration_tool.host import (
    DirectoryImageSource,
    ImageSourceProvider,
    SaveMetadata,
    load_pixel_url,
)


def test_load_plain_path_and_file_url(png_file: Path) -> None:
    img = load_pixel_url(str(png_file))
    assert img.size == (20, 10)

    img2 = load_pixel_url(png_file.resolve().as_uri())
    assert img2.size == (20, 10)


def test_load_data_url(png_file: Path) -> None:
    encoded = base64.b64encode(png_file.read_bytes()).decode("ascii")
    img = load_pixel_url(f"data:image/png;base64,{encoded}")
    assert img.size == (20, 10)


@pytest.mark.parametrize(
    "url",
    [
        "",
        "data:image/png;base64,@@@not-base64@@@",
        "data:image/png;base64,aGVsbG8=",  # valid base64, not an image
        "ftp://example.com/a.png",
        "/definitely/not/here.png",
    ],
)
def test_load_failures_raise_image_load_failed(url: str) -> None:
    with pytest.raises(ImageLoadFailed):
        load_pixel_url(url)


@pytest.mark.asyncio
async def test_directory_source_selected_image(png_file: Path, tmp_path: Path) -> None:
    host = DirectoryImageSource(png_file, tmp_path / "out")
    assert isinstance(host, ImageSourceProvider)
    assert host.available

    item = await host.get_selected_image()
    assert item is not None
    assert item.name == "sample"
    assert (item.width, item.height) == (20, 10)
    assert load_pixel_url(item.pixel_url).size == (20, 10)


@pytest.mark.asyncio
async def test_directory_source_without_selection(tmp_path: Path) -> None:
    assert await DirectoryImageSource(None, tmp_path).get_selected_image() is None
    assert await DirectoryImageSource(tmp_path / "missing.png", tmp_path).get_selected_image() is None


@pytest.mark.asyncio
async def test_directory_source_save_writes_png_and_metadata(tmp_path: Path) -> None:
    out = tmp_path / "out"
    host = DirectoryImageSource(None, out)
    meta = SaveMetadata(name="cat_decorated", tags=["decorated"], folders=["f1"])

    item_id = await host.save_image(b"\x89PNG-bytes", meta)

    assert (out / f"{item_id}.png").read_bytes() == b"\x89PNG-bytes"
    sidecar = json.loads((out / f"{item_id}.json").read_text(encoding="utf-8"))
    assert sidecar["name"] == "cat_decorated"
    assert sidecar["tags"] == ["decorated"]
    assert sidecar["folders"] == ["f1"]


@pytest.mark.asyncio
async def test_directory_source_probes_size_off_the_event_loop(png_file: Path, tmp_path: Path, monkeypatch) -> None:
    import asyncio

    import nicedecor.decoration_tool.host as host_mod

    dispatched = []
    real_to_thread = asyncio.to_thread

    async def recording_to_thread(func, *args, **kwargs):
        dispatched.append(func)
        return await real_to_thread(func, *args, **kwargs)

    monkeypatch.setattr(host_mod.asyncio, "to_thread", recording_to_thread)

    item = await DirectoryImageSource(png_file, tmp_path).get_selected_image()

    assert (item.width, item.height) == (20, 10)
    assert host_mod._image_size in dispatched
