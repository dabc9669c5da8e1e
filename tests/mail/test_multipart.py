"""Tests for the streaming multipart writer."""

from __future__ import annotations

import io
import re

import pytest

from mimepost.mail.multipart import MultipartWriter, make_boundary


def test_make_boundary_is_random_hex() -> None:
    """Boundaries are 60 lowercase hex characters and do not repeat."""
    boundaries = {make_boundary() for _ in range(50)}
    assert len(boundaries) == 50
    assert all(re.fullmatch(r"[0-9a-f]{60}", boundary) for boundary in boundaries)


def test_writer_generates_boundary() -> None:
    """A writer without explicit boundary gets a fresh one."""
    first = MultipartWriter(io.BytesIO())
    second = MultipartWriter(io.BytesIO())
    assert first.boundary != second.boundary
    assert first.content_type("mixed") == f"multipart/mixed; boundary={first.boundary}"


def test_framing_of_several_parts() -> None:
    """First delimiter has no leading CRLF, later ones do, close ends the body."""
    buffer = io.BytesIO()
    writer = MultipartWriter(buffer, boundary="XYZ")
    writer.create_part({"Content-Type": "text/plain"}).write(b"one")
    writer.create_part({"Content-Type": "text/html"}).write(b"<p>two</p>")
    writer.close()

    assert buffer.getvalue() == (
        b"--XYZ\r\nContent-Type: text/plain\r\n\r\none"
        b"\r\n--XYZ\r\nContent-Type: text/html\r\n\r\n<p>two</p>"
        b"\r\n--XYZ--\r\n"
    )


def test_part_headers_are_sorted() -> None:
    """Header order does not depend on insertion order."""
    buffer = io.BytesIO()
    writer = MultipartWriter(buffer, boundary="XYZ")
    writer.create_part(
        {
            "Content-Type": "application/pdf",
            "Content-Disposition": 'attachment; filename="a.pdf"',
            "Content-Transfer-Encoding": "base64",
        }
    )

    assert buffer.getvalue() == (
        b"--XYZ\r\n"
        b'Content-Disposition: attachment; filename="a.pdf"\r\n'
        b"Content-Transfer-Encoding: base64\r\n"
        b"Content-Type: application/pdf\r\n"
        b"\r\n"
    )


def test_part_without_headers() -> None:
    """A part may carry no headers at all."""
    buffer = io.BytesIO()
    writer = MultipartWriter(buffer, boundary="XYZ")
    writer.create_part({}).write(b"raw")
    writer.close()
    assert buffer.getvalue() == b"--XYZ\r\n\r\nraw\r\n--XYZ--\r\n"


def test_close_without_parts() -> None:
    """An empty multipart body is only the closing delimiter, with its leading CRLF."""
    buffer = io.BytesIO()
    writer = MultipartWriter(buffer, boundary="XYZ")
    writer.close()
    assert buffer.getvalue() == b"\r\n--XYZ--\r\n"


def test_close_is_idempotent() -> None:
    """Closing twice writes the closing marker once."""
    buffer = io.BytesIO()
    writer = MultipartWriter(buffer, boundary="XYZ")
    writer.close()
    writer.close()
    assert buffer.getvalue().count(b"--XYZ--") == 1


def test_superseded_part_rejects_writes() -> None:
    """Starting a new part closes the previous part writer."""
    writer = MultipartWriter(io.BytesIO(), boundary="XYZ")
    first = writer.create_part({})
    writer.create_part({})
    with pytest.raises(ValueError, match="already closed"):
        first.write(b"late")


def test_create_part_after_close() -> None:
    """No part can be added once the writer is closed."""
    writer = MultipartWriter(io.BytesIO(), boundary="XYZ")
    writer.close()
    with pytest.raises(ValueError, match="after close"):
        writer.create_part({})


@pytest.mark.parametrize("boundary", ["", "ends with space ", "x" * 71, "semi;colon", "quote\"d"])
def test_invalid_boundary(boundary: str) -> None:
    """Boundaries outside the RFC 2046 grammar are refused."""
    with pytest.raises(ValueError, match="invalid boundary"):
        MultipartWriter(io.BytesIO(), boundary=boundary)


@pytest.mark.parametrize("boundary", ["a", "x" * 70, "simple boundary", "'()+_,-./:=?"])
def test_valid_boundary(boundary: str) -> None:
    """Boundaries from the RFC 2046 character set are accepted."""
    assert MultipartWriter(io.BytesIO(), boundary=boundary).boundary == boundary
