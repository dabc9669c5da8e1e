"""mimepost: multipart MIME composition and SMTP delivery.

Examples:
    >>> from mimepost import MailMessage
    >>> payload = (
    ...     MailMessage()
    ...     .set_from("me@example.com")
    ...     .set_to("you@example.com")
    ...     .set_subject("Hi")
    ...     .set_html("<p>Hello</p>")
    ...     .as_bytes()
    ... )
    >>> payload.startswith(b"MIME-Version: 1.0\\r\\n")
    True
"""

from mimepost.config import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigFormatError,
    MimepostError,
    SMTPSettings,
    load_config,
)
from mimepost.logging import LogManager, get_logger, init_logging
from mimepost.mail import (
    AttachmentReadError,
    MailError,
    MailMessage,
    MailTransportError,
    MailValidationError,
)
from mimepost.meta import __version__

__all__ = [
    "AttachmentReadError",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "LogManager",
    "MailError",
    "MailMessage",
    "MailTransportError",
    "MailValidationError",
    "MimepostError",
    "SMTPSettings",
    "__version__",
    "get_logger",
    "init_logging",
    "load_config",
]
