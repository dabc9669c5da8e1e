"""CLI command implementations."""

from mimepost.cli.commands.send import send

__all__ = ["send"]
