"""Transfer encodings used when emitting a message.

- ``encode_subject``: RFC 2047 base64 encoded word, UTF-8 charset.
- ``encode_quoted_printable``: text body encoding with CRLF line breaks.
- ``wrap_base64``: attachment encoding hard-wrapped at 76 columns.
"""

from __future__ import annotations

import base64
import quopri

BASE64_LINE_LENGTH = 76
CRLF = b"\r\n"


def encode_subject(text: str) -> str:
    """Return *text* as a UTF-8 base64 encoded word.

    ASCII input is encoded too, so the header value always has the same
    shape.

    Examples:
        >>> encode_subject("Hello")
        '=?UTF-8?B?SGVsbG8=?='
    """
    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"=?UTF-8?B?{payload}?="


def encode_quoted_printable(data: bytes) -> bytes:
    """Quoted-printable encode a text body.

    Line breaks (``\\r\\n``, ``\\n`` or a lone ``\\r``) are hard breaks and
    come out as CRLF. Soft breaks keep every encoded line within 76
    characters and are emitted as ``=\\r\\n``.

    Examples:
        >>> encode_quoted_printable(b"caf\\xc3\\xa9\\nbar")
        b'caf=C3=A9\\r\\nbar'
    """
    # quopri works on LF-terminated lines; normalize in, widen out.
    normalized = data.replace(CRLF, b"\n").replace(b"\r", b"\n")
    return quopri.encodestring(normalized).replace(b"\n", CRLF)


def wrap_base64(data: bytes, width: int = BASE64_LINE_LENGTH) -> bytes:
    """Base64 encode *data* and hard-wrap it at *width* characters.

    Lines are joined with CRLF. The final line carries no trailing break,
    including when it is exactly *width* long.

    Examples:
        >>> wrap_base64(b"")
        b''
        >>> wrap_base64(b"abc")
        b'YWJj'
    """
    encoded = base64.b64encode(data)
    lines = [encoded[i : i + width] for i in range(0, len(encoded), width)]
    return CRLF.join(lines)


__all__ = [
    "BASE64_LINE_LENGTH",
    "CRLF",
    "encode_quoted_printable",
    "encode_subject",
    "wrap_base64",
]
