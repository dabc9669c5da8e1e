"""Command-line interface for mimepost."""

from mimepost.cli.app import app

__all__ = ["app"]
