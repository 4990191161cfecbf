"""Recoverable error conditions of the decoration tool.

Every error here is reported to the user as a status message; none of them
ends the edit session.
"""

from __future__ import annotations

from enum import Enum


class Severity(Enum):
    """Severity of a status message shown by the UI shell."""
    INFO = "info"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class DecorationError(Exception):
    """Base class for user-facing decoration tool errors."""

    severity: Severity = Severity.ERROR
    default_message: str = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message if message is not None else self.default_message
        super().__init__(self.message)


class NoImageSelected(DecorationError):
    default_message = "Select an image before running the decoration tool"


class ImageLoadFailed(DecorationError):
    default_message = "Failed to load the image"


class InvalidViewport(DecorationError):
    default_message = "Canvas has no visible size"


class RegionTooSmall(DecorationError):
    severity = Severity.INFO
    default_message = "Selected region is too small"


class SaveFailed(DecorationError):
    default_message = "Failed to save the image"


class HostUnavailable(DecorationError):
    default_message = "Image library is not available"
