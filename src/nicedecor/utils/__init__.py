"""Utility functions for nicedecor."""

from .logging import configure_logging, get_logger, get_session_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "get_session_logger",
]
