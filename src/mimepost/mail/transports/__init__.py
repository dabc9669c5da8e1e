"""Transport implementations for mail delivery.

Available transports:
    - SMTPTransport: Standard SMTP protocol (sync), STARTTLS or implicit TLS
"""

from mimepost.mail.transports.smtp import SMTPCredentials, SMTPSecurity, SMTPSession, SMTPTransport

__all__ = [
    "SMTPCredentials",
    "SMTPSecurity",
    "SMTPSession",
    "SMTPTransport",
]
