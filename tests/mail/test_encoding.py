"""Tests for subject, quoted-printable and base64 encoding."""

from __future__ import annotations

import base64
import quopri

import pytest

from mimepost.mail.encoding import (
    BASE64_LINE_LENGTH,
    encode_quoted_printable,
    encode_subject,
    wrap_base64,
)

# ---------------------------------------------------------------------------
# Subject
# ---------------------------------------------------------------------------


def test_encode_subject_ascii() -> None:
    """ASCII subjects are encoded too."""
    assert encode_subject("Hello") == "=?UTF-8?B?SGVsbG8=?="


def test_encode_subject_non_ascii() -> None:
    """Non-ASCII subjects are base64 of their UTF-8 bytes."""
    encoded = encode_subject("Réunion à 10h ✅")
    assert encoded.startswith("=?UTF-8?B?")
    assert encoded.endswith("?=")
    assert base64.b64decode(encoded[len("=?UTF-8?B?") : -2]).decode("utf-8") == "Réunion à 10h ✅"


def test_encode_subject_empty() -> None:
    """An empty subject still yields a well-formed encoded word."""
    assert encode_subject("") == "=?UTF-8?B??="


# ---------------------------------------------------------------------------
# Quoted-printable
# ---------------------------------------------------------------------------


def test_quoted_printable_escapes_non_ascii_and_equals() -> None:
    """Bytes outside printable ASCII and '=' are hex escaped."""
    assert encode_quoted_printable("café = 1".encode()) == b"caf=C3=A9 =3D 1"


def test_quoted_printable_hard_breaks_are_crlf() -> None:
    """LF, CRLF and lone CR all come out as CRLF."""
    assert encode_quoted_printable(b"one\ntwo\r\nthree\rfour") == b"one\r\ntwo\r\nthree\r\nfour"


def test_quoted_printable_trailing_whitespace_is_protected() -> None:
    """Whitespace before a line break is encoded so it survives transport."""
    assert encode_quoted_printable(b"end \nnext") == b"end=20\r\nnext"


def test_quoted_printable_soft_breaks_keep_lines_short() -> None:
    """Long lines are split with '=' soft breaks within 76 columns."""
    encoded = encode_quoted_printable(b"x" * 200 + "é".encode() * 40)
    lines = encoded.split(b"\r\n")
    assert len(lines) > 1
    assert all(len(line) <= 76 for line in lines)
    assert all(line.endswith(b"=") for line in lines[:-1])


@pytest.mark.parametrize(
    "text",
    [
        "Hello",
        "Ligne 1\r\nLigne 2 avec accents: éàü\r\n",
        "a" * 300,
        "=== equals ===\r\n\ttabbed\r\n",
        "",
    ],
)
def test_quoted_printable_round_trip(text: str) -> None:
    """Decoding the encoded body restores the CRLF text exactly."""
    data = text.encode("utf-8")
    assert quopri.decodestring(encode_quoted_printable(data)) == data


# ---------------------------------------------------------------------------
# Base64
# ---------------------------------------------------------------------------


def test_wrap_base64_empty() -> None:
    """Empty input produces no output at all."""
    assert wrap_base64(b"") == b""


@pytest.mark.parametrize(
    ("size", "expected_lines"),
    [
        (1, 1),
        (56, 1),  # padded to 76 characters
        (57, 1),  # exactly 76 characters
        (58, 2),
        (10_000, 176),
    ],
)
def test_wrap_base64_line_layout(size: int, expected_lines: int) -> None:
    """Every line but the last is exactly 76 characters, none has a trailing break."""
    data = bytes(range(256)) * (size // 256 + 1)
    data = data[:size]
    wrapped = wrap_base64(data)

    lines = wrapped.split(b"\r\n")
    assert len(lines) == expected_lines
    assert all(len(line) == BASE64_LINE_LENGTH for line in lines[:-1])
    assert 0 < len(lines[-1]) <= BASE64_LINE_LENGTH
    assert not wrapped.endswith(b"\r\n")
    assert base64.b64decode(b"".join(lines)) == data


def test_wrap_base64_custom_width() -> None:
    """The wrap width can be overridden."""
    assert wrap_base64(b"abcdef", width=4) == b"YWJj\r\nZGVm"
