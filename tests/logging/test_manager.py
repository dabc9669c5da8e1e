"""Tests for the Rich-backed LogManager."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

import pytest
from rich.logging import RichHandler

from mimepost.logging import LOGGING_LEVEL, SUCCESS_LEVEL, TRACE_LEVEL, LogManager
from mimepost.logging.manager import _IconFormatter, _validate_log_file_path


class RecordingHandler(logging.Handler):
    """Handler keeping every record it receives."""

    def __init__(self) -> None:
        super().__init__(level=logging.NOTSET)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def _recording_manager() -> tuple[LogManager, RecordingHandler]:
    manager = LogManager(name="test.recording")
    for handler in manager.handlers[:]:
        manager.removeHandler(handler)
    recorder = RecordingHandler()
    manager.addHandler(recorder)
    return manager, recorder


def _close_handlers(manager: LogManager) -> None:
    for handler in manager.handlers[:]:
        handler.close()
        manager.removeHandler(handler)


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------


def test_custom_levels_are_registered() -> None:
    """TRACE and SUCCESS have names and sit around the standard levels."""
    assert logging.getLevelName(TRACE_LEVEL) == "TRACE"
    assert logging.getLevelName(SUCCESS_LEVEL) == "SUCCESS"
    assert LOGGING_LEVEL.TRACE < LOGGING_LEVEL.DEBUG
    assert LOGGING_LEVEL.INFO < LOGGING_LEVEL.SUCCESS < LOGGING_LEVEL.WARNING


def test_logger_accepts_every_level() -> None:
    """The logger itself never filters; handlers do."""
    manager = LogManager(name="test.levels")
    assert manager.level == TRACE_LEVEL
    assert manager.isEnabledFor(TRACE_LEVEL)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def test_default_console_handler() -> None:
    """Defaults give a single Rich console handler at INFO."""
    manager = LogManager(name="test.default")
    assert len(manager.handlers) == 1
    handler = manager.handlers[0]
    assert isinstance(handler, RichHandler)
    assert handler.level == logging.INFO


@pytest.mark.parametrize(("preset", "level"), [("dev", logging.DEBUG), ("debug", TRACE_LEVEL)])
def test_console_presets(preset: str, level: int, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Presets adjust the console level."""
    monkeypatch.chdir(tmp_path)
    manager = LogManager(name=f"test.{preset}", preset=preset)
    console_handlers = [h for h in manager.handlers if isinstance(h, RichHandler)]
    assert console_handlers[0].level == level
    _close_handlers(manager)


def test_prod_preset_writes_file_only(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The prod preset logs to a rotating file and not to the console."""
    monkeypatch.chdir(tmp_path)
    manager = LogManager(name="test.prod", preset="prod")
    assert [type(h) for h in manager.handlers] == [logging.handlers.RotatingFileHandler]
    assert manager.handlers[0].level == logging.INFO
    _close_handlers(manager)
    assert (tmp_path / "mimepost.log").exists()


def test_config_overrides_preset() -> None:
    """Explicit config is merged on top of the preset."""
    manager = LogManager(name="test.override", preset="dev", config={"console": {"level": "ERROR"}})
    assert manager.handlers[0].level == logging.ERROR
    assert manager.settings["console"]["show_path"] is False


def test_unknown_preset() -> None:
    """Unknown presets are refused with the available names."""
    with pytest.raises(ValueError, match="Unknown logging preset"):
        LogManager(name="test.bad", preset="verbose")


def test_unknown_level() -> None:
    """Unknown level names are refused."""
    with pytest.raises(ValueError, match="Unknown log level"):
        LogManager(name="test.bad-level", config={"console": {"level": "LOUD"}})


def test_file_output_with_context(tmp_path: Path) -> None:
    """File output formats records and appends context pairs."""
    log_file = tmp_path / "logs" / "app.log"
    manager = LogManager(
        name="test.file",
        config={"output": "file", "file": {"file_path": str(log_file), "level": "TRACE"}},
    )
    manager.trace("dialogue", host="mx")
    manager.success("sent", recipients=2)
    _close_handlers(manager)

    content = log_file.read_text(encoding="utf-8")
    assert "TRACE    | test.file | dialogue | host=mx" in content
    assert "SUCCESS  | test.file | sent | recipients=2" in content


@pytest.mark.parametrize("path", ["../escape.log", "~/app.log", "app.exe", "x" * 260 + ".log"])
def test_log_file_path_validation(path: str) -> None:
    """Traversal, odd extensions and overlong names are refused."""
    with pytest.raises(ValueError):
        _validate_log_file_path(Path(path))


def test_log_file_path_resolved(tmp_path: Path) -> None:
    """Accepted paths are returned absolute."""
    assert _validate_log_file_path(tmp_path / "app.log") == (tmp_path / "app.log").resolve()


# ---------------------------------------------------------------------------
# Logging methods
# ---------------------------------------------------------------------------


def test_methods_log_at_their_level() -> None:
    """Each helper emits at its own level."""
    manager, recorder = _recording_manager()
    manager.trace("t")
    manager.debug("d")
    manager.info("i")
    manager.success("s")
    manager.warning("w")
    manager.error("e")
    manager.critical("c")
    assert [r.levelname for r in recorder.records] == [
        "TRACE",
        "DEBUG",
        "INFO",
        "SUCCESS",
        "WARNING",
        "ERROR",
        "CRITICAL",
    ]


def test_context_and_args() -> None:
    """Positional args format the message; keywords become context."""
    manager, recorder = _recording_manager()
    manager.info("Sent %d message(s)", 3, host="mx", port=587)
    assert recorder.records[0].getMessage() == "Sent 3 message(s) | host=mx port=587"


def test_exc_info_passthrough() -> None:
    """Reserved keywords reach the standard logging machinery."""
    manager, recorder = _recording_manager()
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        manager.error("failed", exc_info=True)
    assert recorder.records[0].exc_info is not None
    assert recorder.records[0].getMessage() == "failed"


def test_icon_formatter() -> None:
    """Known levels are prefixed with their icon."""
    formatter = _IconFormatter({"info": "ℹ️"})
    info = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
    warning = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
    assert formatter.format(info) == "ℹ️ hello"
    assert formatter.format(warning) == "careful"
