# nicedecor/src/nicedecor/decoration_tool/host.py
"""Host image-library collaborator.

The decoration tool only talks to its host at two points: fetching the image
the user selected, and handing back the edited PNG. Anything implementing
:class:`ImageSourceProvider` can be plugged in; :class:`DirectoryImageSource`
is a local-disk host used by the demo and tests.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
import json
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from PIL import Image

from nicedecor.utils.logging import get_logger
from .errors import ImageLoadFailed

logger = get_logger(__name__)


@dataclass(frozen=True)
class SelectedImage:
    """Image item selected in the host library."""

    id: str
    name: str
    width: int
    height: int
    pixel_url: str
    folders: tuple[str, ...] = ()


@dataclass
class SaveMetadata:
    """Metadata attached to an exported image."""

    name: str
    website: str = ""
    tags: List[str] = field(default_factory=list)
    folders: List[str] = field(default_factory=list)
    annotation: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@runtime_checkable
class ImageSourceProvider(Protocol):
    """Interface the host application exposes to the decoration tool."""

    @property
    def available(self) -> bool:
        ...

    async def get_selected_image(self) -> Optional[SelectedImage]:
        ...

    async def save_image(self, png: bytes, metadata: SaveMetadata) -> str:
        ...


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep:
        raise ImageLoadFailed("Malformed data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadFailed(f"Invalid base64 image data: {e}") from e
    return unquote(payload).encode("latin-1")


def load_pixel_url(url: str) -> Image.Image:
    """Fetch and decode the image behind a host pixel URL.

    Supports ``data:`` URLs, ``file://`` URLs and plain filesystem paths.

    Raises:
        ImageLoadFailed: unsupported scheme, missing file or undecodable data.
    """
    if not url:
        raise ImageLoadFailed("Image URL is empty")

    parsed = urlparse(url)
    try:
        if parsed.scheme == "data":
            image = Image.open(io.BytesIO(_decode_data_url(url)))
        elif parsed.scheme == "file":
            image = Image.open(url2pathname(unquote(parsed.path)))
        elif parsed.scheme == "" or len(parsed.scheme) == 1:
            # no scheme, or a Windows drive letter
            image = Image.open(Path(url).expanduser())
        else:
            raise ImageLoadFailed(f"Unsupported image URL scheme: {parsed.scheme}")
        image.load()
    except OSError as e:
        raise ImageLoadFailed(f"Failed to load image: {e}") from e

    logger.debug(f"decoded image {image.size} mode={image.mode}")
    return image


def _image_size(path: Path) -> tuple[int, int]:
    with Image.open(path) as img:
        return img.size


class DirectoryImageSource:
    """Local-disk host: one selected image file, exports go to a directory.

    Each export writes ``<id>.png`` and a ``<id>.json`` metadata sidecar.
    """

    def __init__(self, image_path: str | Path | None, output_dir: str | Path) -> None:
        self.image_path = Path(image_path).expanduser() if image_path is not None else None
        self.output_dir = Path(output_dir).expanduser()

    @property
    def available(self) -> bool:
        return True

    async def get_selected_image(self) -> Optional[SelectedImage]:
        if self.image_path is None or not self.image_path.is_file():
            return None

        width, height = await asyncio.to_thread(_image_size, self.image_path)

        return SelectedImage(
            id=self.image_path.stem,
            name=self.image_path.stem,
            width=width,
            height=height,
            pixel_url=self.image_path.resolve().as_uri(),
            folders=(str(self.image_path.parent),),
        )

    async def save_image(self, png: bytes, metadata: SaveMetadata) -> str:
        item_id = uuid.uuid4().hex
        await asyncio.to_thread(self._write_item, item_id, png, metadata)
        logger.info(f"saved {metadata.name!r} as {item_id} in {self.output_dir}")
        return item_id

    def _write_item(self, item_id: str, png: bytes, metadata: SaveMetadata) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        (self.output_dir / f"{item_id}.png").write_bytes(png)
        (self.output_dir / f"{item_id}.json").write_text(
            json.dumps(metadata.to_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
