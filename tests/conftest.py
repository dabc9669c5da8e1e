"""Shared pytest fixtures for the mimepost test suite."""

from __future__ import annotations

# Disable Rich colors and force wide terminal BEFORE any imports
# Rich checks these at import time
import os

os.environ["NO_COLOR"] = "1"
os.environ["TERM"] = "dumb"
os.environ["COLUMNS"] = "200"

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

import mimepost.logging as mimepost_logging

# pylint: disable=redefined-outer-name


@pytest.fixture(autouse=True)
def reset_mimepost_logger() -> Iterator[None]:
    """Undo ``init_logging`` side effects so caplog keeps seeing records."""
    yield
    std_logger = logging.getLogger("mimepost")
    for handler in std_logger.handlers[:]:
        std_logger.removeHandler(handler)
    std_logger.setLevel(logging.NOTSET)
    std_logger.propagate = True
    mimepost_logging._root_logger = None


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Write a file with the given name and content into the temp directory."""

    def _make(name: str, content: bytes) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _make
