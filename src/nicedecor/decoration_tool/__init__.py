"""Decoration tool - raster annotation with pen, eraser, mosaic and undo/redo."""

from .bitmap import Bitmap, Snapshot
from .config import DecorationToolConfig, MosaicLevel, Tool
from .decoration_widget import DecorationToolWidget
from .errors import (
    DecorationError,
    HostUnavailable,
    ImageLoadFailed,
    InvalidViewport,
    NoImageSelected,
    RegionTooSmall,
    SaveFailed,
    Severity,
)
from .history import MAX_HISTORY, HistoryStack
from .host import DirectoryImageSource, ImageSourceProvider, SaveMetadata, SelectedImage
from .session import EditSession, SessionPhase, SessionState, ToolState

__all__ = [
    "Bitmap",
    "DecorationError",
    "DecorationToolConfig",
    "DecorationToolWidget",
    "DirectoryImageSource",
    "EditSession",
    "HistoryStack",
    "HostUnavailable",
    "ImageLoadFailed",
    "ImageSourceProvider",
    "InvalidViewport",
    "MAX_HISTORY",
    "MosaicLevel",
    "NoImageSelected",
    "RegionTooSmall",
    "SaveFailed",
    "SaveMetadata",
    "SelectedImage",
    "SessionPhase",
    "SessionState",
    "Severity",
    "Snapshot",
    "Tool",
    "ToolState",
]
