"""Fluent message builder and MIME emission.

``MailMessage`` accumulates the sender, recipients, subject, body and
attachment paths with chained setters, then emits a complete multipart
document either to a byte sink (:meth:`MailMessage.write`) or through a
transport session (:meth:`MailMessage.send`).

Validation is deferred: setters never fail, and every check runs once when
the message is consumed, before the first byte is written.

Emitted structure::

    MIME-Version / From / To / Subject
    Content-Type: multipart/mixed; boundary=B1
        part: multipart/alternative; boundary=B2
            part: text/plain (quoted-printable)
            part: text/html (quoted-printable)
        part: attachment (base64), one per path

Examples:
    Serialize without sending:

    >>> message = (
    ...     MailMessage()
    ...     .set_from("sender@example.com")
    ...     .set_to("user@example.com")
    ...     .set_subject("Hello")
    ...     .set_plain_text("Hi there")
    ... )
    >>> payload = message.as_bytes()
    >>> b"Subject: =?UTF-8?B?SGVsbG8=?=" in payload
    True
"""

from __future__ import annotations

import io
import logging
import os
from typing import TYPE_CHECKING

from mimepost.mail.encoding import encode_quoted_printable, encode_subject, wrap_base64
from mimepost.mail.exceptions import AttachmentReadError, MailValidationError
from mimepost.mail.multipart import MultipartWriter
from mimepost.mail.sniff import resolve_content_type

if TYPE_CHECKING:
    from mimepost.mail.multipart import ByteSink
    from mimepost.mail.transport import MailSession

__all__ = ["MailMessage"]

log = logging.getLogger(__name__)

_TEXT_PART_TYPES = (
    ("plain_text", "text/plain; charset=utf-8"),
    ("html", "text/html; charset=utf-8"),
)


class MailMessage:
    """Mutable, single-use email message.

    Every setter returns the same instance so calls can be chained in any
    order. The message is consumed by the first call to :meth:`write`,
    :meth:`as_bytes` or :meth:`send`; consuming it again raises
    :class:`MailValidationError`.

    Attributes:
        sender: Envelope and ``From`` address.
        recipients: Comma-separated recipient list, as given.
        subject: Subject as an RFC 2047 encoded word.
        plain_text: UTF-8 plain text body, if any.
        html: UTF-8 HTML body, if any.
        attachments: Attachment paths in emission order.
    """

    def __init__(self) -> None:
        self.sender = ""
        self.recipients = ""
        self.subject = ""
        self.plain_text: bytes | None = None
        self.html: bytes | None = None
        self.attachments: list[str] = []
        self._consumed = False

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------
    def set_from(self, address: str) -> MailMessage:
        """Set the sender address."""
        self.sender = address
        return self

    def set_to(self, addresses: str) -> MailMessage:
        """Set the comma-separated recipient list."""
        self.recipients = addresses
        return self

    def set_subject(self, text: str) -> MailMessage:
        """Set the subject, stored immediately in encoded-word form."""
        self.subject = encode_subject(text)
        return self

    def set_plain_text(self, text: str) -> MailMessage:
        """Set the plain text body."""
        self.plain_text = text.encode("utf-8")
        return self

    def set_html(self, text: str) -> MailMessage:
        """Set the HTML body."""
        self.html = text.encode("utf-8")
        return self

    def add_attachment(self, path: str | os.PathLike[str]) -> MailMessage:
        """Append an attachment path.

        The file is not touched until emission; a missing file surfaces as
        :class:`AttachmentReadError` at that point.
        """
        self.attachments.append(os.fspath(path))
        return self

    def recipient_list(self) -> list[str]:
        """Return the individual recipients in their original order.

        Examples:
            >>> MailMessage().set_to("a@x.com, b@x.com").recipient_list()
            ['a@x.com', 'b@x.com']
        """
        return [address.strip() for address in self.recipients.split(",") if address.strip()]

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------
    def validate(self) -> None:
        """Check the message can be emitted.

        Raises:
            MailValidationError: If there is no recipient, the sender or subject is blank,
                or if both a plain text and an HTML body are set.
        """
        if not self.recipient_list():
            raise MailValidationError('"To" field is empty')
        if not self.sender.strip():
            raise MailValidationError('"From" field is empty')
        if not self.subject.strip():
            raise MailValidationError('"Subject" field is empty')
        if self.plain_text is not None and self.html is not None:
            raise MailValidationError("Message can't have both plain text and HTML bodies")

    def write(self, sink: ByteSink) -> None:
        """Validate and emit the complete MIME document to *sink*.

        Args:
            sink: Byte sink such as a binary file, ``io.BytesIO`` or a
                transport body stream.

        Raises:
            MailValidationError: If the message is invalid or was already
                consumed. Nothing is written in that case.
            AttachmentReadError: If an attachment cannot be read. Bytes
                already written to *sink* must be discarded by the caller.
        """
        self._consume()
        self._emit(sink)

    def as_bytes(self) -> bytes:
        """Validate and return the complete MIME document."""
        buffer = io.BytesIO()
        self.write(buffer)
        return buffer.getvalue()

    def send(self, session: MailSession) -> None:
        """Deliver the message through an established transport session.

        The envelope sender is set, then every recipient is added in order;
        a single rejected recipient aborts the send. The document is then
        streamed into the session's body stream. If emission fails the
        stream is aborted so no partial document is submitted. An error
        while closing the stream is logged and not raised.

        Args:
            session: Connected, authenticated transport session.

        Raises:
            MailValidationError: If the message is invalid or was already
                consumed.
            MailTransportError: If the session rejects the sender, a
                recipient, or the body stream cannot be opened.
            AttachmentReadError: If an attachment cannot be read.
        """
        self._consume()

        session.set_envelope_sender(self.sender)
        recipients = self.recipient_list()
        for recipient in recipients:
            session.add_envelope_recipient(recipient)
        log.debug("Envelope ready: from=%s, %d recipient(s)", self.sender, len(recipients))

        stream = session.open_body_stream()
        try:
            self._emit(stream)
        except BaseException:
            # a partial document must never be submitted
            stream.abort()
            raise

        try:
            stream.close()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log.error("Failed to close message body stream: %s", exc)

    def _consume(self) -> None:
        if self._consumed:
            raise MailValidationError("Message has already been emitted")
        self.validate()
        self._consumed = True

    def _emit(self, sink: ByteSink) -> None:
        mixed = MultipartWriter(sink)
        headers = (
            "MIME-Version: 1.0\r\n"
            f"From: {self.sender}\r\n"
            f"To: {self.recipients}\r\n"
            f"Subject: {self.subject}\r\n"
            f"Content-Type: {mixed.content_type('mixed')}\r\n"
            "\r\n"
        )
        sink.write(headers.encode("utf-8"))

        # the alternative document must be closed before it can be framed
        buffer = io.BytesIO()
        alternative = MultipartWriter(buffer)
        for attribute, content_type in _TEXT_PART_TYPES:
            body: bytes | None = getattr(self, attribute)
            if not body:
                continue
            part = alternative.create_part(
                {
                    "Content-Type": content_type,
                    "Content-Transfer-Encoding": "quoted-printable",
                }
            )
            part.write(encode_quoted_printable(body))
        alternative.close()

        mixed.create_part({"Content-Type": alternative.content_type("alternative")}).write(buffer.getvalue())

        for path in self.attachments:
            self._emit_attachment(mixed, path)

        mixed.close()

    def _emit_attachment(self, writer: MultipartWriter, path: str) -> None:
        try:
            with open(path, "rb") as handle:
                content = handle.read()
        except OSError as exc:
            raise AttachmentReadError(path, exc.strerror or str(exc)) from exc

        content_type = resolve_content_type(content, path)
        log.debug("Attaching %s (%s, %d bytes)", path, content_type, len(content))

        filename = os.path.basename(path).replace("\\", "\\\\").replace('"', '\\"')
        part = writer.create_part(
            {
                "Content-Type": content_type,
                "Content-Transfer-Encoding": "base64",
                "Content-Disposition": f'attachment; filename="{filename}"',
            }
        )
        part.write(wrap_base64(content))
