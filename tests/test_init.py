"""Tests for the package surface."""

from __future__ import annotations

import mimepost
from mimepost import meta


def test_version_matches_meta() -> None:
    """The package version comes from meta."""
    assert mimepost.__version__ == meta.__version__


def test_public_names_are_exported() -> None:
    """Everything listed in __all__ is importable from the package."""
    for name in mimepost.__all__:
        assert hasattr(mimepost, name), name


def test_error_hierarchy() -> None:
    """Every mimepost error shares a single base class."""
    for error in (
        mimepost.ConfigError,
        mimepost.MailError,
        mimepost.MailValidationError,
        mimepost.AttachmentReadError,
        mimepost.MailTransportError,
    ):
        assert issubclass(error, mimepost.MimepostError)


def test_attachment_error_details() -> None:
    """AttachmentReadError keeps the failing path and reason."""
    error = mimepost.AttachmentReadError("docs/a.pdf", "Permission denied")
    assert error.path == "docs/a.pdf"
    assert error.reason == "Permission denied"
    assert str(error) == "Cannot read attachment 'docs/a.pdf': Permission denied"
