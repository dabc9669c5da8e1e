"""Configuration file and environment handling for mimepost."""

from mimepost.config.exceptions import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigFormatError,
    MimepostError,
)
from mimepost.config.loader import (
    CONFIG_FILENAME,
    SMTPSettings,
    find_config_file,
    load_config,
    parse_port,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "MimepostError",
    "SMTPSettings",
    "find_config_file",
    "load_config",
    "parse_port",
]
