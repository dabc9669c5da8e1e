"""Typer application wiring the mimepost commands."""

from __future__ import annotations

import typer

from mimepost import meta
from mimepost.cli.commands import send

app = typer.Typer(
    name=meta.__app_name__,
    help=meta.__description__,
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{meta.__app_name__} {meta.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Compose multipart MIME email and deliver it over SMTP."""


app.command("send")(send)

__all__ = ["app"]
