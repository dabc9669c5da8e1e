"""Specialized exceptions raised by the mimepost.mail module.

Exception hierarchy::

    MimepostError
        MailError (base for all mail errors)
            MailValidationError (blank field or conflicting bodies, also ValueError)
            AttachmentReadError (attachment file unreadable)
            MailTransportError (dial, auth, envelope or DATA failure)
            MailConfigurationError (invalid transport settings, also ValueError)
"""

from __future__ import annotations

import os

from mimepost.config.exceptions import MimepostError


class MailError(MimepostError):
    """Base exception for all mail module errors."""


class MailValidationError(MailError, ValueError):
    """The message cannot be emitted in its current state.

    Raised before any byte is written, so a sink never receives a partial
    document because of a validation failure.
    """


class AttachmentReadError(MailError):
    """An attachment file could not be read during emission.

    Attributes:
        path: The attachment path as given to the builder.
        reason: Description of the underlying failure.
    """

    def __init__(self, path: str | os.PathLike[str], reason: str) -> None:
        """Initialize AttachmentReadError.

        Args:
            path: The attachment path that failed.
            reason: Description of the underlying failure.
        """
        super().__init__(f"Cannot read attachment '{os.fspath(path)}': {reason}")
        self.path = os.fspath(path)
        self.reason = reason


class MailTransportError(MailError):
    """The transport session rejected or failed an operation."""


class MailConfigurationError(MailError, ValueError):
    """Transport settings are missing or invalid."""


__all__ = [
    "AttachmentReadError",
    "MailConfigurationError",
    "MailError",
    "MailTransportError",
    "MailValidationError",
]
