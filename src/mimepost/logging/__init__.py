"""Logging for mimepost applications.

Library modules only call ``logging.getLogger(__name__)``. Applications
call :func:`init_logging` once to attach Rich console and/or file handlers
to the ``mimepost`` logger tree.

Examples:
    >>> from mimepost.logging import init_logging
    >>> log = init_logging(config={"console": {"level": "TRACE"}})  # doctest: +SKIP
    >>> log.trace("SMTP details will now be shown")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from typing import Any

from mimepost.logging.manager import (
    LOGGING_LEVEL,
    SUCCESS_LEVEL,
    TRACE_LEVEL,
    LogManager,
)

_ROOT_NAME = "mimepost"
_root_logger: LogManager | None = None


def init_logging(*, preset: str | None = None, config: dict[str, Any] | None = None) -> LogManager:
    """Configure the ``mimepost`` logger tree and return the manager.

    Handlers built by the :class:`LogManager` replace any handlers
    previously installed on the standard ``mimepost`` logger, so calling
    this twice does not duplicate output.
    """
    global _root_logger  # pylint: disable=global-statement

    manager = LogManager(_ROOT_NAME, preset=preset, config=config)
    std_logger = logging.getLogger(_ROOT_NAME)
    for handler in std_logger.handlers[:]:
        std_logger.removeHandler(handler)
    for handler in manager.handlers:
        std_logger.addHandler(handler)
    std_logger.setLevel(TRACE_LEVEL)
    std_logger.propagate = False

    _root_logger = manager
    return manager


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``mimepost`` namespace.

    ``get_logger(None)`` returns the initialized :class:`LogManager` when
    :func:`init_logging` has run, else the plain ``mimepost`` logger.
    """
    if name is None:
        return _root_logger if _root_logger is not None else logging.getLogger(_ROOT_NAME)
    if name == _ROOT_NAME or name.startswith(f"{_ROOT_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


__all__ = [
    "LOGGING_LEVEL",
    "SUCCESS_LEVEL",
    "TRACE_LEVEL",
    "LogManager",
    "get_logger",
    "init_logging",
]
