"""Compose a message and send it, or print it with ``--dry-run``."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer

from mimepost.cli.common import console, exit_error
from mimepost.config import MimepostError, SMTPSettings, load_config
from mimepost.logging import TRACE_LEVEL, init_logging
from mimepost.mail import MailMessage
from mimepost.mail.transports import SMTPCredentials, SMTPSecurity, SMTPTransport

log = logging.getLogger(__name__)


def paragraphs_to_html(text: str) -> str:
    """Wrap every line of *text* in its own paragraph.

    Examples:
        >>> paragraphs_to_html("one\\ntwo")
        '<p>one</p><p>two</p>'
    """
    return "<p>" + "</p><p>".join(text.split("\n")) + "</p>"


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _console_level(verbose: bool, trace: bool) -> str:
    if trace:
        return logging.getLevelName(TRACE_LEVEL)
    return "DEBUG" if verbose else "WARNING"


def _read_body(msg_file: Path | None) -> str:
    try:
        if msg_file is None:
            return sys.stdin.read()
        return msg_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        exit_error(f"Message is not valid UTF-8: {exc}")
    except OSError as exc:
        exit_error(f"Error opening message file: {exc}")


def build_message(
    *,
    sender: str,
    dests: str,
    subject: str,
    body: str,
    attachments: str,
    is_html: bool,
) -> MailMessage:
    """Assemble a :class:`MailMessage` from CLI values."""
    message = MailMessage().set_from(sender).set_to(dests).set_subject(subject)
    if is_html:
        message.set_html(paragraphs_to_html(body))
    else:
        message.set_plain_text(body)
    for path in _split_list(attachments):
        message.add_attachment(path)
    return message


def _transport_for(settings: SMTPSettings) -> SMTPTransport:
    return SMTPTransport(
        settings.host,
        settings.port,
        credentials=SMTPCredentials(username=settings.user, password=settings.password),
        security=SMTPSecurity.for_port(settings.port, verify_certificates=settings.verify_certificates),
    )


def send(
    ctx: typer.Context,
    sender: str | None = typer.Option(
        None,
        "--from",
        help="Sender email address (default: SMTP user).",
    ),
    dests: str = typer.Option(
        "",
        "--dests",
        help="Destination email addresses (comma separated).",
    ),
    subject: str = typer.Option(
        "",
        "--sub",
        help="Subject of the message.",
    ),
    msg_file: Path | None = typer.Option(
        None,
        "--msg",
        help="Message file (default: stdin).",
    ),
    attachments: str = typer.Option(
        "",
        "--atts",
        help="Attachments to send (comma separated paths).",
    ),
    is_html: bool = typer.Option(
        False,
        "--html",
        help="Send the message as HTML, one paragraph per line.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the MIME document instead of sending it.",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Configuration file (default: ./mimepost.conf.yml or ~/mimepost.conf.yml).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logs.",
    ),
    trace: bool = typer.Option(
        False,
        "--trace",
        help="Show the SMTP dialogue (TRACE logs).",
    ),
) -> None:
    """Compose a multipart message and deliver it over SMTP.

    SMTP settings come from the ``smtp`` section of the configuration file,
    overridden by SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS and
    SMTP_SECURE.
    """
    if not dests or not subject:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=2)

    init_logging(config={"output": "console", "console": {"level": _console_level(verbose, trace)}})

    try:
        settings = SMTPSettings.from_sources(load_config(config_path))
    except MimepostError as exc:
        exit_error(str(exc))

    message = build_message(
        sender=sender or settings.user,
        dests=dests,
        subject=subject,
        body=_read_body(msg_file),
        attachments=attachments,
        is_html=is_html,
    )

    if dry_run:
        try:
            payload = message.as_bytes()
        except MimepostError as exc:
            exit_error(str(exc))
        sys.stdout.flush()
        sys.stdout.buffer.write(payload)
        sys.stdout.buffer.flush()
        return

    try:
        _transport_for(settings).send(message)
    except MimepostError as exc:
        log.debug("Delivery failed", exc_info=True)
        exit_error(str(exc))

    console.print(f"[green]Message sent to {len(message.recipient_list())} recipient(s).[/]")
