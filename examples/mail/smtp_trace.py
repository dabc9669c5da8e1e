#!/usr/bin/env python3
"""Demonstrate SMTP TRACE-level logging for debugging.

This example shows the detailed SMTP session information available
when TRACE logging is enabled. Useful for debugging connection issues,
TLS negotiation, and authentication problems.

Setup:
    1. Go to https://ethereal.email and create a free account
    2. Copy your credentials (user/pass)
    3. Set environment variables:
       export SMTP_HOST="smtp.ethereal.email"
       export SMTP_PORT="587"
       export SMTP_USER="your-user@ethereal.email"
       export SMTP_PASS="your-password"

Usage:
    python examples/mail/smtp_trace.py
"""

from __future__ import annotations

import sys

from mimepost.config import SMTPSettings
from mimepost.logging import init_logging
from mimepost.mail import MailMessage, MailTransportError
from mimepost.mail.transports import SMTPCredentials, SMTPSecurity, SMTPTransport


def main() -> None:
    """Send a message with TRACE logging enabled."""
    settings = SMTPSettings.from_sources()
    if not settings.host or not settings.user:
        print("ERROR: set SMTP_HOST, SMTP_USER and SMTP_PASS first (see module docstring).")
        sys.exit(1)

    # Enable TRACE level logging for detailed SMTP diagnostics
    log = init_logging(config={"console": {"level": "TRACE"}})
    log.info("TRACE logging enabled - SMTP session details will be shown")

    transport = SMTPTransport(
        settings.host,
        settings.port,
        credentials=SMTPCredentials(username=settings.user, password=settings.password),
        security=SMTPSecurity.for_port(settings.port, verify_certificates=settings.verify_certificates),
    )
    message = (
        MailMessage()
        .set_from(settings.user)
        .set_to(settings.user)
        .set_subject("TRACE logging test from mimepost")
        .set_plain_text(
            "This email was sent with TRACE-level logging enabled.\n\n"
            "Check the console output for the EHLO exchange, STARTTLS\n"
            "negotiation, authentication and the message envelope.\n"
        )
    )

    try:
        transport.send(message)
    except MailTransportError as exc:
        log.error("Delivery failed: %s", exc)
        sys.exit(1)
    log.success("Email sent successfully", recipients=len(message.recipient_list()))


if __name__ == "__main__":  # pragma: no cover - manual example
    main()
