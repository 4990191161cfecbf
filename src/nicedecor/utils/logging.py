"""
Logging utilities for the nicedecor library.

Library code only ever asks for a logger:
    ```python
    from nicedecor.utils.logging import get_logger
    logger = get_logger(__name__)
    logger.info("mosaic applied")
    ```

Standalone scripts and demos that call ``ui.run()`` turn output on:
    ```python
    from nicedecor.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When nicedecor is embedded in an application that already configured
logging, nothing needs to be done; records propagate to that application's
handlers. nicedecor never writes log files.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "nicedecor"
LOG_LEVEL_ENV = "NICEDECOR_LOG_LEVEL"

DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure the nicedecor logger only (never root).

    Parameters
    ----------
    level:
        Logging level (e.g. "DEBUG", "INFO"). Defaults to the
        NICEDECOR_LOG_LEVEL env var, or "INFO" if unset.
    fmt:
        Log message format.
    datefmt:
        Date format. Defaults to "%Y-%m-%d %H:%M:%S".
    force:
        If True, drop existing handlers first. If False, a second call is a
        no-op once a stderr handler is attached.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt=fmt if fmt is not None else DEFAULT_FMT,
        datefmt=datefmt if datefmt is not None else DEFAULT_DATEFMT,
    )

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    else:
        for h in logger.handlers:
            if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
                return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger by name; ``None`` gives the package logger.

    Use like:
        logger = get_logger(__name__)
    """
    return logging.getLogger(LOGGER_NAME if name is None else name)


class SessionLoggerAdapter(logging.LoggerAdapter):
    """Prefix every record with the id of the edit session that emitted it.

    The id is also set as ``record.session_id`` for custom formats.
    """

    def process(self, msg, kwargs):
        session_id = self.extra.get("session_id")
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("session_id", session_id)
        kwargs["extra"] = extra
        if session_id:
            msg = f"[{session_id}] {msg}"
        return msg, kwargs


def get_session_logger(name: Optional[str] = None, session_id: Optional[str] = None) -> SessionLoggerAdapter:
    """
    Logger for one edit session.

    Use like:
        log = get_session_logger(__name__, context.client.id)
        log.info("committed stroke")
    """
    return SessionLoggerAdapter(get_logger(name), {"session_id": session_id})
