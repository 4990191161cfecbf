"""
nicedecor: image decoration (annotation) widget for NiceGUI.

This package provides:
- EditSession: pen/eraser strokes, rectangular mosaic, pan/zoom and
  bounded undo/redo over a single RGBA bitmap
- DecorationToolWidget: NiceGUI toolbar + canvas shell for a session
- Logging utilities for library and application use

For logging configuration in standalone scripts/demos:
    ```python
    from nicedecor.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```
"""

import logging

from nicedecor.utils.logging import configure_logging, get_logger

from nicedecor.decoration_tool import (
    DecorationToolConfig,
    DecorationToolWidget,
    DirectoryImageSource,
    EditSession,
    MosaicLevel,
    Tool,
)

# NullHandler until an application or demo calls configure_logging().
_logger = logging.getLogger("nicedecor")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "DecorationToolConfig",
    "DecorationToolWidget",
    "DirectoryImageSource",
    "EditSession",
    "MosaicLevel",
    "Tool",
    "configure_logging",
    "get_logger",
]

__version__ = "0.1.0"
