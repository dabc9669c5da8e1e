"""Multipart MIME message composition and delivery.

Build a message with the fluent :class:`MailMessage` API, then either
serialize it (dry run) or deliver it through a transport session.

Examples:
    >>> from mimepost.mail import MailMessage
    >>> message = (
    ...     MailMessage()
    ...     .set_from("sender@example.com")
    ...     .set_to("a@example.com,b@example.com")
    ...     .set_subject("Report")
    ...     .set_plain_text("See attached.")
    ... )
    >>> message.recipient_list()
    ['a@example.com', 'b@example.com']
"""

from mimepost.mail.exceptions import (
    AttachmentReadError,
    MailConfigurationError,
    MailError,
    MailTransportError,
    MailValidationError,
)
from mimepost.mail.message import MailMessage
from mimepost.mail.multipart import MultipartWriter
from mimepost.mail.transport import BodyStream, MailSession, MailTransport

__all__ = [
    "AttachmentReadError",
    "BodyStream",
    "MailConfigurationError",
    "MailError",
    "MailMessage",
    "MailSession",
    "MailTransport",
    "MailTransportError",
    "MailValidationError",
    "MultipartWriter",
]
