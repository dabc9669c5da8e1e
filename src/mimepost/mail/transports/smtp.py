"""SMTP transport built on :mod:`smtplib`.

``SMTPTransport.connect`` performs the dial and negotiation phase (plain
connection upgraded with STARTTLS, or implicit TLS) and authentication,
then returns an :class:`SMTPSession` implementing
:class:`~mimepost.mail.transport.MailSession`.

When TRACE logging is enabled, the smtplib protocol dialogue, TLS details
and envelope commands are logged under ``mimepost.mail.transports.smtp``.

Examples:
    Send over STARTTLS with authentication::

        transport = SMTPTransport(
            "smtp.example.com",
            port=587,
            credentials=SMTPCredentials(username="me@example.com", password="secret"),
            security=SMTPSecurity.for_port(587),
        )
        transport.send(message)
"""

from __future__ import annotations

import io
import logging
import re
import smtplib
import ssl
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mimepost.logging import TRACE_LEVEL
from mimepost.mail.exceptions import MailConfigurationError, MailTransportError
from mimepost.mail.transport import BodyStream, MailSession, MailTransport

if TYPE_CHECKING:
    from mimepost.mail.message import MailMessage

__all__ = ["SMTPCredentials", "SMTPSecurity", "SMTPSession", "SMTPTransport"]

log = logging.getLogger(__name__)

DEFAULT_PORT = 465
STARTTLS_PORTS = frozenset({25, 587})

_SMTP_ERRORS = (smtplib.SMTPException, ssl.SSLError, OSError)
_LEADING_DOT = re.compile(rb"^\.", re.MULTILINE)


@dataclass(frozen=True, slots=True)
class SMTPCredentials:
    """Username/password pair for SMTP AUTH.

    Authentication only happens when both values are non-empty.
    """

    username: str | None = None
    password: str | None = None

    @property
    def complete(self) -> bool:
        """Return True when both username and password are set."""
        return bool(self.username) and bool(self.password)


@dataclass(frozen=True, slots=True)
class SMTPSecurity:
    """TLS policy for the SMTP connection.

    Attributes:
        use_ssl: Connect with implicit TLS (SMTPS).
        use_starttls: Upgrade a plain connection with STARTTLS. Ignored when
            *use_ssl* is set.
        verify_certificates: Verify the server certificate and host name.
    """

    use_ssl: bool = False
    use_starttls: bool = True
    verify_certificates: bool = True

    @classmethod
    def for_port(cls, port: int, *, verify_certificates: bool = True) -> SMTPSecurity:
        """Return the conventional policy for *port*.

        Ports 25 and 587 use STARTTLS, every other port implicit TLS.

        Examples:
            >>> SMTPSecurity.for_port(587).use_starttls
            True
            >>> SMTPSecurity.for_port(465).use_ssl
            True
        """
        if port in STARTTLS_PORTS:
            return cls(use_ssl=False, use_starttls=True, verify_certificates=verify_certificates)
        return cls(use_ssl=True, use_starttls=False, verify_certificates=verify_certificates)

    def ssl_context(self) -> ssl.SSLContext:
        """Build the SSL context matching this policy."""
        context = ssl.create_default_context()
        if not self.verify_certificates:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context


# ─────────────────────────────────────────────────────────────────────────────
# TRACE helpers
# ─────────────────────────────────────────────────────────────────────────────


@contextmanager
def _capture_smtp_debug() -> Iterator[io.StringIO]:
    """Redirect stderr, where smtplib prints its debug dialogue."""
    buffer = io.StringIO()
    original = sys.stderr
    sys.stderr = buffer
    try:
        yield buffer
    finally:
        sys.stderr = original


def _log_smtp_debug_output(buffer: io.StringIO) -> None:
    """Replay captured smtplib debug lines at TRACE level."""
    if not log.isEnabledFor(TRACE_LEVEL):
        return
    for raw_line in buffer.getvalue().splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith("send:"):
            log.log(TRACE_LEVEL, "[SMTP] >>> %s", line[len("send:") :].strip())
        elif line.startswith("reply:"):
            log.log(TRACE_LEVEL, "[SMTP] <<< %s", line[len("reply:") :].strip())
        else:
            log.log(TRACE_LEVEL, "[SMTP] %s", line)


def _first_common_name(entries: Any) -> str | None:
    try:
        for rdn in entries:
            for key, value in rdn:
                if key == "commonName":
                    return str(value)
    except (TypeError, ValueError):
        return None
    return None


def _extract_ssl_info(sock: ssl.SSLSocket | None) -> dict[str, Any]:
    """Collect TLS version, cipher and certificate names from *sock*."""
    if sock is None:
        return {}

    info: dict[str, Any] = {}
    try:
        info["version"] = sock.version() or "unknown"
    except Exception:  # pylint: disable=broad-exception-caught
        info["version"] = "unknown"

    try:
        cipher = sock.cipher()
    except Exception:  # pylint: disable=broad-exception-caught
        cipher = None
    if cipher:
        info["cipher_name"], info["cipher_protocol"], info["cipher_bits"] = cipher

    try:
        cert = sock.getpeercert()
    except Exception:  # pylint: disable=broad-exception-caught
        cert = None
    if cert:
        peer_cn = _first_common_name(cert.get("subject", ()))
        if peer_cn:
            info["peer_cn"] = peer_cn
        issuer_cn = _first_common_name(cert.get("issuer", ()))
        if issuer_cn:
            info["issuer_cn"] = issuer_cn
        if "notBefore" in cert:
            info["valid_from"] = cert["notBefore"]
        if "notAfter" in cert:
            info["valid_until"] = cert["notAfter"]
    return info


def _log_ssl_info(label: str, sock: Any) -> None:
    info = _extract_ssl_info(sock)
    if not info:
        return
    log.log(
        TRACE_LEVEL,
        "[SMTP] %s: %s, cipher=%s (%s bits)",
        label,
        info.get("version"),
        info.get("cipher_name", "unknown"),
        info.get("cipher_bits", "?"),
    )
    if "peer_cn" in info:
        log.log(TRACE_LEVEL, "[SMTP] Certificate: CN=%s, issuer=%s", info["peer_cn"], info.get("issuer_cn", "unknown"))


# ─────────────────────────────────────────────────────────────────────────────
# Session
# ─────────────────────────────────────────────────────────────────────────────


class _SMTPBodyStream(BodyStream):
    """Buffers the message body once DATA has been accepted.

    ``close`` sends the dot-stuffed body and its terminator. ``abort``
    drops the connection, since RSET is not allowed inside DATA.
    """

    def __init__(self, session: SMTPSession) -> None:
        self._session = session
        self._buffer = io.BytesIO()
        self._done = False

    def write(self, data: bytes) -> int:
        if self._done:
            raise MailTransportError("Body stream is closed")
        return self._buffer.write(data)

    def close(self) -> None:
        if self._done:
            return
        self._done = True
        self._session._submit(self._buffer.getvalue())

    def abort(self) -> None:
        if self._done:
            return
        self._done = True
        self._buffer = io.BytesIO()
        self._session._drop()


class SMTPSession(MailSession):
    """:class:`MailSession` over a connected :class:`smtplib.SMTP` client.

    Args:
        client: Connected and authenticated smtplib client.
        host: Server host name, used in log and error messages.
    """

    def __init__(self, client: smtplib.SMTP, host: str) -> None:
        self._client = client
        self._host = host
        self._in_transaction = False
        self._dropped = False

    @contextmanager
    def _dialogue(self, action: str) -> Iterator[None]:
        trace_enabled = log.isEnabledFor(TRACE_LEVEL)
        with _capture_smtp_debug() as buffer:
            try:
                yield
            except _SMTP_ERRORS as exc:
                raise MailTransportError(f"SMTP {action} failed on {self._host}: {exc}") from exc
            finally:
                if trace_enabled:
                    _log_smtp_debug_output(buffer)

    def set_envelope_sender(self, address: str) -> None:
        log.log(TRACE_LEVEL, "[SMTP] MAIL FROM: <%s>", address)
        with self._dialogue("MAIL FROM"):
            code, reply = self._client.mail(address)
        if code != 250:
            raise MailTransportError(f"Sender <{address}> rejected: {code} {_reply_text(reply)}")
        self._in_transaction = True

    def add_envelope_recipient(self, address: str) -> None:
        if not self._in_transaction:
            raise MailTransportError("RCPT TO issued before MAIL FROM")
        log.log(TRACE_LEVEL, "[SMTP] RCPT TO: <%s>", address)
        with self._dialogue("RCPT TO"):
            code, reply = self._client.rcpt(address)
        if code not in (250, 251):
            self._reset()
            raise MailTransportError(f"Recipient <{address}> rejected: {code} {_reply_text(reply)}")

    def open_body_stream(self) -> BodyStream:
        if not self._in_transaction:
            raise MailTransportError("DATA requested before MAIL FROM")
        log.log(TRACE_LEVEL, "[SMTP] DATA")
        with self._dialogue("DATA"):
            self._client.putcmd("data")
            code, reply = self._client.getreply()
        if code != 354:
            self._reset()
            raise MailTransportError(f"DATA refused: {code} {_reply_text(reply)}")
        return _SMTPBodyStream(self)

    def close(self) -> None:
        if self._dropped:
            return
        with self._dialogue("QUIT"):
            self._client.quit()

    def _submit(self, payload: bytes) -> None:
        log.log(TRACE_LEVEL, "[SMTP] Message body: %d bytes", len(payload))
        try:
            with self._dialogue("DATA"):
                self._client.send(_dot_stuff(payload) + b".\r\n")
                code, reply = self._client.getreply()
        finally:
            self._in_transaction = False
        if code != 250:
            raise MailTransportError(f"Message refused: {code} {_reply_text(reply)}")
        log.log(TRACE_LEVEL, "[SMTP] Message sent successfully")

    def _drop(self) -> None:
        self._in_transaction = False
        self._dropped = True
        log.warning("Closing SMTP connection to %s to discard the unfinished message", self._host)
        self._client.close()

    def _reset(self) -> None:
        self._in_transaction = False
        try:
            with self._dialogue("RSET"):
                self._client.rset()
        except MailTransportError as exc:
            log.warning("Could not reset SMTP transaction: %s", exc)


def _dot_stuff(payload: bytes) -> bytes:
    """Double leading dots and end the body with CRLF (RFC 5321 §4.5.2)."""
    stuffed = _LEADING_DOT.sub(b"..", payload)
    if not stuffed.endswith(b"\r\n"):
        stuffed += b"\r\n"
    return stuffed


def _reply_text(reply: bytes | str) -> str:
    if isinstance(reply, bytes):
        return reply.decode("utf-8", errors="replace")
    return reply


# ─────────────────────────────────────────────────────────────────────────────
# Transport
# ─────────────────────────────────────────────────────────────────────────────


class SMTPTransport(MailTransport):
    """Synchronous SMTP delivery backend.

    Args:
        host: SMTP server host name.
        port: Server port (default: 465).
        credentials: Optional login credentials.
        security: TLS policy; defaults to :meth:`SMTPSecurity.for_port`.
        timeout: Socket timeout in seconds.

    Raises:
        MailConfigurationError: If *host* is empty or *timeout* is not
            positive.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        *,
        credentials: SMTPCredentials | None = None,
        security: SMTPSecurity | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not host:
            raise MailConfigurationError("SMTP host is required")
        if timeout <= 0:
            raise MailConfigurationError("Timeout must be greater than 0")
        self.host = host
        self.port = port
        self.credentials = credentials or SMTPCredentials()
        self.security = security or SMTPSecurity.for_port(port)
        self.timeout = timeout

    def connect(self) -> SMTPSession:
        """Dial, negotiate TLS, authenticate and return a session.

        Raises:
            MailTransportError: If any step of the negotiation fails.
        """
        trace_enabled = log.isEnabledFor(TRACE_LEVEL)
        mode = "SSL" if self.security.use_ssl else ("STARTTLS" if self.security.use_starttls else "plain")
        log.log(TRACE_LEVEL, "[SMTP] Connecting to %s:%d (%s)", self.host, self.port, mode)

        with _capture_smtp_debug() as buffer:
            try:
                client = self._open_client()
            except _SMTP_ERRORS as exc:
                if trace_enabled:
                    _log_smtp_debug_output(buffer)
                raise MailTransportError(f"SMTP connection to {self.host}:{self.port} failed: {exc}") from exc

            try:
                self._negotiate(client, trace_enabled)
            except MailTransportError:
                client.close()
                raise
            except _SMTP_ERRORS as exc:
                client.close()
                raise MailTransportError(f"SMTP negotiation with {self.host}:{self.port} failed: {exc}") from exc
            finally:
                if trace_enabled:
                    _log_smtp_debug_output(buffer)

        log.debug("Connected to SMTP server %s:%d", self.host, self.port)
        return SMTPSession(client, self.host)

    def send(self, message: MailMessage) -> None:
        """Connect, deliver *message* through a fresh session and quit.

        Raises:
            MailTransportError: If connection or delivery fails.
        """
        session = self.connect()
        try:
            message.send(session)
        finally:
            try:
                session.close()
            except MailTransportError as exc:
                log.error("%s", exc)
        log.info("Message delivered via %s", self.host)

    def _open_client(self) -> smtplib.SMTP:
        if self.security.use_ssl:
            return smtplib.SMTP_SSL(
                host=self.host,
                port=self.port,
                timeout=self.timeout,
                context=self.security.ssl_context(),
            )
        return smtplib.SMTP(host=self.host, port=self.port, timeout=self.timeout)

    def _negotiate(self, client: smtplib.SMTP, trace_enabled: bool) -> None:
        if trace_enabled:
            client.set_debuglevel(1)
        if self.security.use_ssl and trace_enabled:
            _log_ssl_info("SSL", getattr(client, "sock", None))

        client.ehlo()
        if self.security.use_starttls and not self.security.use_ssl:
            if not client.has_extn("STARTTLS"):
                raise MailTransportError(f"{self.host} does not support STARTTLS")
            log.log(TRACE_LEVEL, "[SMTP] Upgrading connection with STARTTLS")
            client.starttls(context=self.security.ssl_context())
            client.ehlo()
            if trace_enabled:
                _log_ssl_info("TLS", getattr(client, "sock", None))

        if self.credentials.complete:
            log.log(TRACE_LEVEL, "[SMTP] Authenticating as: %s", self.credentials.username)
            client.login(self.credentials.username or "", self.credentials.password or "")
            log.log(TRACE_LEVEL, "[SMTP] Authentication successful")
