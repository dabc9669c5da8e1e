"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.console import Console

console = Console()
error_console = Console(stderr=True)


def exit_error(message: str, code: int = 1) -> NoReturn:
    """Print *message* on stderr and exit with *code*."""
    error_console.print(f"[red]Error:[/] {message}", markup=True, highlight=False)
    raise typer.Exit(code=code)


__all__ = ["console", "error_console", "exit_error"]
