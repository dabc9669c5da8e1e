"""Rich-backed logger with presets and structured context.

``LogManager`` is a :class:`logging.Logger` subclass. The logger itself
always accepts every level down to ``TRACE``; handlers decide what is
shown. Extra keyword arguments passed to the log methods are rendered as
``key=value`` pairs after the message.

Presets:
    - ``dev``: console at DEBUG.
    - ``prod``: file at INFO, no console.
    - ``debug``: console and file at TRACE.
"""

from __future__ import annotations

import logging
import logging.handlers
from copy import deepcopy
from pathlib import Path
from types import SimpleNamespace
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

TRACE_LEVEL = 5
SUCCESS_LEVEL = 25

logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")

LOGGING_LEVEL = SimpleNamespace(
    TRACE=TRACE_LEVEL,
    DEBUG=logging.DEBUG,
    INFO=logging.INFO,
    SUCCESS=SUCCESS_LEVEL,
    WARNING=logging.WARNING,
    ERROR=logging.ERROR,
    CRITICAL=logging.CRITICAL,
)

_ALLOWED_LOG_EXTENSIONS = frozenset({".log", ".txt", ".json", ""})
_MAX_FILENAME_LENGTH = 255
_MAX_PATH_LENGTH = 4096

FALLBACK_DEFAULTS: dict[str, Any] = {
    "output": "console",
    "console": {"level": "INFO", "show_path": False},
    "file": {
        "level": "DEBUG",
        "file_path": "mimepost.log",
        "max_bytes": 1_048_576,
        "backup_count": 3,
    },
    "icons": {
        "show": True,
        "trace": "🔬",
        "debug": "🐛",
        "info": "ℹ️",
        "success": "✅",
        "warning": "⚠️",
        "error": "❌",
        "critical": "🔥",
    },
    "theme": {
        "trace": "medium_purple4 on dark_olive_green1",
        "success": "bold green",
    },
}

FALLBACK_PRESETS: dict[str, dict[str, Any]] = {
    "dev": {"output": "console", "console": {"level": "DEBUG"}},
    "prod": {"output": "file", "file": {"level": "INFO"}},
    "debug": {"output": "both", "console": {"level": "TRACE"}, "file": {"level": "TRACE"}},
}

_RESERVED_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def _validate_log_file_path(path: Path) -> Path:
    """Return *path* resolved, rejecting traversal and odd extensions.

    Raises:
        ValueError: If the path contains ``..`` or ``~``, has a disallowed
            extension, or exceeds file name / path length limits.
    """
    for part in path.parts:
        if part in ("..", "~"):
            raise ValueError(f"Log file path contains forbidden component: {part!r}")
    if path.suffix.lower() not in _ALLOWED_LOG_EXTENSIONS:
        raise ValueError(f"Log file extension {path.suffix!r} is not allowed")
    if len(path.name) > _MAX_FILENAME_LENGTH:
        raise ValueError("Log file name exceeds maximum length")
    if len(str(path)) > _MAX_PATH_LENGTH:
        raise ValueError("Log file path exceeds maximum length")
    return path.resolve()


class _IconFormatter(logging.Formatter):
    """Prefix messages with the icon of their level."""

    def __init__(self, icons: dict[str, str]) -> None:
        super().__init__("%(message)s")
        self._icons = icons

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        icon = self._icons.get(record.levelname.lower())
        return f"{icon} {message}" if icon else message


class LogManager(logging.Logger):
    """Logger configured from a preset and/or a config mapping.

    Args:
        name: Logger name (default: ``mimepost``).
        config: Configuration overriding the defaults and preset.
        preset: One of ``dev``, ``prod`` or ``debug``.

    Raises:
        ValueError: If *preset* is unknown or a level name is invalid.

    Examples:
        >>> logger = LogManager(name="demo", config={"console": {"level": "WARNING"}})
        >>> logger.handlers[0].level == logging.WARNING
        True
    """

    def __init__(
        self,
        name: str = "mimepost",
        *,
        config: dict[str, Any] | None = None,
        preset: str | None = None,
    ) -> None:
        super().__init__(name, level=TRACE_LEVEL)
        settings = deepcopy(FALLBACK_DEFAULTS)
        if preset is not None:
            if preset not in FALLBACK_PRESETS:
                raise ValueError(f"Unknown logging preset: {preset!r}. Available: {sorted(FALLBACK_PRESETS)}")
            settings = _deep_merge(settings, FALLBACK_PRESETS[preset])
        if config:
            settings = _deep_merge(settings, config)
        self.settings = settings
        self._configure_handlers()

    def _configure_handlers(self) -> None:
        output = self.settings["output"]
        icons = self.settings["icons"] if self.settings["icons"].get("show") else {}
        if output in ("console", "both"):
            console_cfg = self.settings["console"]
            console = Console(stderr=True, theme=Theme(self.settings["theme"]))
            handler = RichHandler(
                console=console,
                show_path=console_cfg.get("show_path", False),
                rich_tracebacks=True,
                markup=False,
            )
            handler.setLevel(_resolve_level(console_cfg["level"]))
            handler.setFormatter(_IconFormatter(icons))
            self.addHandler(handler)
        if output in ("file", "both"):
            file_cfg = self.settings["file"]
            path = _validate_log_file_path(Path(file_cfg["file_path"]))
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                path,
                maxBytes=file_cfg["max_bytes"],
                backupCount=file_cfg["backup_count"],
                encoding="utf-8",
            )
            file_handler.setLevel(_resolve_level(file_cfg["level"]))
            file_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"))
            self.addHandler(file_handler)

    def _log_with_context(self, level: int, msg: object, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self.isEnabledFor(level):
            return
        passthrough = {key: kwargs.pop(key) for key in list(kwargs) if key in _RESERVED_KWARGS}
        passthrough.setdefault("stacklevel", 3)
        if kwargs:
            context = " ".join(f"{key}={value}" for key, value in kwargs.items())
            msg = f"{msg} | {context}"
        self._log(level, msg, args, **passthrough)

    def trace(self, msg: object, *args: Any, **kwargs: Any) -> None:
        """Log at TRACE level."""
        self._log_with_context(TRACE_LEVEL, msg, args, kwargs)

    def debug(self, msg: object, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        self._log_with_context(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: object, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        self._log_with_context(logging.INFO, msg, args, kwargs)

    def success(self, msg: object, *args: Any, **kwargs: Any) -> None:
        """Log at SUCCESS level."""
        self._log_with_context(SUCCESS_LEVEL, msg, args, kwargs)

    def warning(self, msg: object, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        self._log_with_context(logging.WARNING, msg, args, kwargs)

    def error(self, msg: object, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        self._log_with_context(logging.ERROR, msg, args, kwargs)

    def critical(self, msg: object, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        self._log_with_context(logging.CRITICAL, msg, args, kwargs)


__all__ = [
    "FALLBACK_DEFAULTS",
    "FALLBACK_PRESETS",
    "LOGGING_LEVEL",
    "SUCCESS_LEVEL",
    "TRACE_LEVEL",
    "LogManager",
]
