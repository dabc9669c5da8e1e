"""Configuration loading for mimepost.

Configuration lives in a YAML file named ``mimepost.conf.yml``. When no
explicit path is given, the current directory is searched first, then the
user's home directory; a missing file simply yields an empty config.

String values support environment variable substitution:

- ``${VAR}``: replaced by the variable, empty string when unset
- ``${VAR:-default}``: replaced by the variable or *default*

Example file::

    smtp:
      host: smtp.example.com
      port: 587
      user: ${SMTP_USER}
      password: ${SMTP_PASS}
      secure: true
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from box import Box

from mimepost.config.exceptions import ConfigFileNotFoundError, ConfigFormatError

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

CONFIG_FILENAME = "mimepost.conf.yml"
DEFAULT_SMTP_PORT = 465

_ENV_VAR_PATTERN = re.compile(r"\$\{([a-zA-Z_][a-zA-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(value: str, environ: Mapping[str, str]) -> str:
    """Expand ``${VAR}`` and ``${VAR:-default}`` patterns in *value*.

    Examples:
        >>> _expand_env_vars("${HOST:-localhost}:25", {})
        'localhost:25'
        >>> _expand_env_vars("${HOST}", {"HOST": "mx"})
        'mx'
    """

    def replacer(match: re.Match[str]) -> str:
        env_value = environ.get(match.group(1))
        if env_value is not None:
            return env_value
        return match.group(2) or ""

    return _ENV_VAR_PATTERN.sub(replacer, value)


def _expand_env_vars_recursive(data: Any, environ: Mapping[str, str]) -> Any:
    if isinstance(data, dict):
        return {key: _expand_env_vars_recursive(value, environ) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars_recursive(item, environ) for item in data]
    if isinstance(data, str):
        return _expand_env_vars(data, environ)
    return data


def find_config_file() -> Path | None:
    """Return the first ``mimepost.conf.yml`` in the cwd or home directory."""
    for directory in (Path.cwd(), Path.home()):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: str | os.PathLike[str] | None = None, *, environ: Mapping[str, str] | None = None) -> Box:
    """Load the YAML configuration into a :class:`box.Box`.

    Args:
        path: Explicit configuration file. When omitted the default search
            locations are used and a missing file is not an error.
        environ: Variables used for substitution (default: ``os.environ``).

    Raises:
        ConfigFileNotFoundError: If an explicit *path* does not exist.
        ConfigFormatError: If the file is not valid YAML or not a mapping.
    """
    if path is not None:
        config_path: Path | None = Path(path)
        if not config_path.is_file():
            raise ConfigFileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        config_path = find_config_file()

    if config_path is None:
        log.debug("No %s found, using defaults", CONFIG_FILENAME)
        return Box()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigFormatError(f"Invalid YAML in {config_path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigFormatError(f"Configuration root in {config_path} must be a mapping")

    log.debug("Loaded configuration from %s", config_path)
    expanded = _expand_env_vars_recursive(data, os.environ if environ is None else environ)
    return Box(expanded)


def parse_port(value: Any) -> int:
    """Return *value* as a port number, falling back to 465.

    Examples:
        >>> parse_port("587")
        587
        >>> parse_port("smtp")
        465
    """
    try:
        port = int(value)
    except (TypeError, ValueError):
        return DEFAULT_SMTP_PORT
    return port if 0 < port < 65536 else DEFAULT_SMTP_PORT


@dataclass(frozen=True, slots=True)
class SMTPSettings:
    """Resolved SMTP connection settings.

    Attributes:
        host: Server host name.
        port: Server port; 25 and 587 imply STARTTLS, others implicit TLS.
        user: Login name, also the default sender.
        password: Login password.
        verify_certificates: Verify the server certificate.
    """

    host: str = ""
    port: int = DEFAULT_SMTP_PORT
    user: str = ""
    password: str = ""
    verify_certificates: bool = True

    @classmethod
    def from_sources(
        cls,
        config: Mapping[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> SMTPSettings:
        """Merge the ``smtp`` config section with ``SMTP_*`` variables.

        Environment variables win over the file: ``SMTP_HOST``,
        ``SMTP_PORT``, ``SMTP_USER``, ``SMTP_PASS`` and ``SMTP_SECURE``
        (``"false"`` disables certificate verification).

        Examples:
            >>> SMTPSettings.from_sources({}, {"SMTP_HOST": "mx", "SMTP_PORT": "587"}).port
            587
        """
        environ = os.environ if environ is None else environ
        section: Mapping[str, Any] = {}
        if config is not None:
            candidate = config.get("smtp")
            if isinstance(candidate, dict):
                section = candidate

        def pick(env_name: str, key: str) -> Any:
            value = environ.get(env_name)
            return value if value is not None else section.get(key)

        secure = pick("SMTP_SECURE", "secure")
        return cls(
            host=str(pick("SMTP_HOST", "host") or ""),
            port=parse_port(pick("SMTP_PORT", "port")),
            user=str(pick("SMTP_USER", "user") or ""),
            password=str(pick("SMTP_PASS", "password") or ""),
            verify_certificates=str(secure).lower() != "false" if secure is not None else True,
        )


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_SMTP_PORT",
    "SMTPSettings",
    "find_config_file",
    "load_config",
    "parse_port",
]
