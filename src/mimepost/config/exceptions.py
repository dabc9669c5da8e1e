"""Specialized exceptions raised by the mimepost.config module.

Exception hierarchy::

    MimepostError
        ConfigError (base for all configuration errors)
            ConfigFileNotFoundError (explicit file missing)
            ConfigFormatError (unreadable YAML or wrong shape)
"""

from __future__ import annotations


class MimepostError(Exception):
    """Base exception for every error raised by mimepost."""


class ConfigError(MimepostError):
    """Base exception for configuration loading errors."""


class ConfigFileNotFoundError(ConfigError, FileNotFoundError):
    """Raised when an explicitly requested configuration file does not exist."""


class ConfigFormatError(ConfigError, ValueError):
    """Raised when a configuration file cannot be parsed or has the wrong shape."""


__all__ = [
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "MimepostError",
]
