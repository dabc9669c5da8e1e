"""Transport abstractions consumed by :class:`MailMessage`.

A :class:`MailSession` is an already connected and authenticated
mail-transfer session. It exposes the three phases of a submission:
envelope sender, envelope recipients, then a body stream receiving the
raw MIME bytes. A :class:`MailTransport` knows how to open such a session
and drive a message through it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mimepost.mail.message import MailMessage

__all__ = ["BodyStream", "MailSession", "MailTransport"]


class BodyStream(ABC):
    """Writable sink for the message body of a single submission."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Append raw message bytes."""

    @abstractmethod
    def close(self) -> None:
        """Finish the body and submit it.

        Raises:
            MailTransportError: If the server refuses the message.
        """

    @abstractmethod
    def abort(self) -> None:
        """Discard everything written so far without submitting it."""


class MailSession(ABC):
    """Connected transport session accepting one message at a time."""

    @abstractmethod
    def set_envelope_sender(self, address: str) -> None:
        """Start a submission with *address* as envelope sender.

        Raises:
            MailTransportError: If the sender is rejected.
        """

    @abstractmethod
    def add_envelope_recipient(self, address: str) -> None:
        """Add one envelope recipient.

        Raises:
            MailTransportError: If the recipient is rejected.
        """

    @abstractmethod
    def open_body_stream(self) -> BodyStream:
        """Return the stream receiving the message body.

        Raises:
            MailTransportError: If no submission is in progress.
        """

    @abstractmethod
    def close(self) -> None:
        """End the session."""


class MailTransport(ABC):
    """Backend able to deliver a :class:`MailMessage`."""

    @abstractmethod
    def send(self, message: MailMessage) -> None:
        """Deliver *message*, consuming it.

        Raises:
            MailTransportError: If delivery fails.
        """
