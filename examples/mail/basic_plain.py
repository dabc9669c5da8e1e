"""Plain-text message composition using :class:`mimepost.mail.MailMessage`."""

from __future__ import annotations

import sys

from mimepost.mail import MailMessage


def build_plain_message() -> None:
    """Construct a plain-text message and print the MIME document."""
    message = (
        MailMessage()
        .set_from("sender@example.com")
        .set_to("user@example.com, other@example.com")
        .set_subject("Plain Greetings")
        .set_plain_text("Hello from mimepost!\nThis message uses the plain content type.")
    )
    sys.stdout.buffer.write(message.as_bytes())


if __name__ == "__main__":  # pragma: no cover - manual example
    build_plain_message()
