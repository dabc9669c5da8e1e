"""Streaming multipart writer.

``MultipartWriter`` frames parts onto a byte sink using a single boundary.
The boundary and its closing marker are only complete once ``close()``
runs, so a nested multipart document must be written to its own buffer,
closed, and then copied into one part of the enclosing writer.

Framing::

    --<boundary>\\r\\n                  first part
    \\r\\n--<boundary>\\r\\n              every later part
    Name: value\\r\\n ... \\r\\n          part headers, sorted by name
    \\r\\n--<boundary>--\\r\\n            close()

Examples:
    >>> import io
    >>> buffer = io.BytesIO()
    >>> writer = MultipartWriter(buffer, boundary="XYZ")
    >>> writer.create_part({"Content-Type": "text/plain"}).write(b"hi")
    2
    >>> writer.close()
    >>> buffer.getvalue()
    b'--XYZ\\r\\nContent-Type: text/plain\\r\\n\\r\\nhi\\r\\n--XYZ--\\r\\n'
"""

from __future__ import annotations

import re
import secrets
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

# RFC 2046 bchars, without the trailing space rule
_BOUNDARY_PATTERN = re.compile(r"^[0-9A-Za-z'()+_,\-./:=? ]{0,69}[0-9A-Za-z'()+_,\-./:=?]$")

_BOUNDARY_RANDOM_BYTES = 30


class ByteSink(Protocol):
    """Anything accepting raw bytes, such as a binary file or ``io.BytesIO``."""

    def write(self, data: bytes, /) -> int | None:
        """Write *data* to the sink."""


def make_boundary() -> str:
    """Return a fresh boundary of 60 lowercase hex characters."""
    return secrets.token_hex(_BOUNDARY_RANDOM_BYTES)


class PartWriter:
    """Writer for the body of a single part.

    Becomes unusable once the parent writer starts another part or closes.
    """

    def __init__(self, owner: MultipartWriter) -> None:
        self._owner = owner
        self._closed = False

    def write(self, data: bytes) -> int:
        """Write body bytes for this part.

        Raises:
            ValueError: If the part has already been superseded or closed.
        """
        if self._closed:
            raise ValueError("multipart: write to a part that is already closed")
        self._owner.sink.write(data)
        return len(data)

    def close(self) -> None:
        """Mark the part as finished."""
        self._closed = True


class MultipartWriter:
    """Write a multipart body to *sink*.

    Args:
        sink: Byte sink receiving the framed parts.
        boundary: Explicit boundary; a random one is generated when omitted.

    Raises:
        ValueError: If *boundary* is not a valid RFC 2046 boundary.
    """

    def __init__(self, sink: ByteSink, boundary: str | None = None) -> None:
        if boundary is None:
            boundary = make_boundary()
        elif not _BOUNDARY_PATTERN.match(boundary):
            raise ValueError(f"multipart: invalid boundary {boundary!r}")
        self.sink = sink
        self._boundary = boundary
        self._last_part: PartWriter | None = None
        self._closed = False

    @property
    def boundary(self) -> str:
        """Return the boundary delimiting this writer's parts."""
        return self._boundary

    def content_type(self, subtype: str) -> str:
        """Return the ``Content-Type`` value announcing this writer's body.

        Examples:
            >>> MultipartWriter(None, boundary="abc").content_type("mixed")  # type: ignore[arg-type]
            'multipart/mixed; boundary=abc'
        """
        return f"multipart/{subtype}; boundary={self._boundary}"

    def create_part(self, headers: Mapping[str, str]) -> PartWriter:
        """Start a new part with *headers* and return its body writer.

        Headers are emitted sorted by name so output is deterministic for a
        given boundary.

        Raises:
            ValueError: If the writer is already closed.
        """
        if self._closed:
            raise ValueError("multipart: create_part after close")

        delimiter = f"--{self._boundary}\r\n"
        if self._last_part is not None:
            self._last_part.close()
            delimiter = "\r\n" + delimiter

        lines = [delimiter]
        lines.extend(f"{name}: {headers[name]}\r\n" for name in sorted(headers))
        lines.append("\r\n")
        self.sink.write("".join(lines).encode("utf-8"))

        self._last_part = PartWriter(self)
        return self._last_part

    def close(self) -> None:
        """Finish the last part and write the closing boundary marker."""
        if self._closed:
            return
        if self._last_part is not None:
            self._last_part.close()
        self.sink.write(f"\r\n--{self._boundary}--\r\n".encode("ascii"))
        self._closed = True


__all__ = ["ByteSink", "MultipartWriter", "PartWriter", "make_boundary"]
