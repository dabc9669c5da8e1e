"""Content-type detection for attachments.

Implements the byte-signature sniffing rules of the WHATWG MIME Sniffing
standard (the same table used by common HTTP servers): only the first
512 bytes are inspected, and ``application/octet-stream`` is returned when
nothing matches. ``resolve_content_type`` adds an extension lookup through
:mod:`mimetypes` for that generic fallback.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import Protocol

log = logging.getLogger(__name__)

SNIFF_LENGTH = 512
OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN_UTF8 = "text/plain; charset=utf-8"

_WHITESPACE = b"\t\n\x0c\r "
# bytes that never appear in text, per the "binary data byte" definition
_BINARY_BYTES = frozenset(range(0x00, 0x09)) | {0x0B} | frozenset(range(0x0E, 0x1B)) | frozenset(range(0x1C, 0x20))


class _Signature(Protocol):
    def match(self, data: bytes, first_non_ws: int) -> str | None: ...


@dataclass(frozen=True, slots=True)
class _ExactSig:
    prefix: bytes
    content_type: str

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        return self.content_type if data.startswith(self.prefix) else None


@dataclass(frozen=True, slots=True)
class _MaskedSig:
    mask: bytes
    pattern: bytes
    content_type: str
    skip_ws: bool = False

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        if self.skip_ws:
            data = data[first_non_ws:]
        if len(data) < len(self.pattern):
            return None
        for byte, mask, expected in zip(data, self.mask, self.pattern):
            if byte & mask != expected:
                return None
        return self.content_type


@dataclass(frozen=True, slots=True)
class _HtmlSig:
    tag: bytes

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        data = data[first_non_ws:]
        if len(data) < len(self.tag) + 1:
            return None
        if data[: len(self.tag)].upper() != self.tag:
            return None
        # the tag must be followed by a tag-terminating byte
        if data[len(self.tag)] not in b" >":
            return None
        return "text/html; charset=utf-8"


class _Mp4Sig:
    def match(self, data: bytes, first_non_ws: int) -> str | None:
        if len(data) < 12:
            return None
        box_size = int.from_bytes(data[:4], "big")
        if box_size % 4 != 0 or box_size < 12 or len(data) < box_size:
            return None
        if data[4:8] != b"ftyp":
            return None
        for start in range(8, box_size, 4):
            if start == 12:
                # skip the minor version number
                continue
            if data[start : start + 3] == b"mp4":
                return "video/mp4"
        return None


class _TextSig:
    def match(self, data: bytes, first_non_ws: int) -> str | None:
        if any(byte in _BINARY_BYTES for byte in data[first_non_ws:]):
            return None
        return TEXT_PLAIN_UTF8


def _masked(pattern: bytes, mask: bytes, content_type: str) -> _MaskedSig:
    return _MaskedSig(mask=mask, pattern=pattern, content_type=content_type)


_HTML_TAGS = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

_SIGNATURES: tuple[_Signature, ...] = (
    *(_HtmlSig(tag) for tag in _HTML_TAGS),
    _MaskedSig(mask=b"\xff" * 5, pattern=b"<?xml", content_type="text/xml; charset=utf-8", skip_ws=True),
    _ExactSig(b"%PDF-", "application/pdf"),
    _ExactSig(b"%!PS-Adobe-", "application/postscript"),
    # UTF BOMs
    _masked(b"\xfe\xff\x00\x00", b"\xff\xff\x00\x00", "text/plain; charset=utf-16be"),
    _masked(b"\xff\xfe\x00\x00", b"\xff\xff\x00\x00", "text/plain; charset=utf-16le"),
    _masked(b"\xef\xbb\xbf\x00", b"\xff\xff\xff\x00", TEXT_PLAIN_UTF8),
    # images
    _ExactSig(b"\x00\x00\x01\x00", "image/x-icon"),
    _ExactSig(b"\x00\x00\x02\x00", "image/x-icon"),
    _ExactSig(b"BM", "image/bmp"),
    _ExactSig(b"GIF87a", "image/gif"),
    _ExactSig(b"GIF89a", "image/gif"),
    _masked(b"RIFF\x00\x00\x00\x00WEBPVP", b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff", "image/webp"),
    _ExactSig(b"\x89PNG\x0d\x0a\x1a\x0a", "image/png"),
    _ExactSig(b"\xff\xd8\xff", "image/jpeg"),
    # audio and video
    _masked(b"FORM\x00\x00\x00\x00AIFF", b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff", "audio/aiff"),
    _masked(b"ID3", b"\xff\xff\xff", "audio/mpeg"),
    _masked(b"OggS\x00", b"\xff\xff\xff\xff\xff", "application/ogg"),
    _masked(b"MThd\x00\x00\x00\x06", b"\xff\xff\xff\xff\xff\xff\xff\xff", "audio/midi"),
    _masked(b"RIFF\x00\x00\x00\x00AVI ", b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff", "video/avi"),
    _masked(b"RIFF\x00\x00\x00\x00WAVE", b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff", "audio/wave"),
    _Mp4Sig(),
    _ExactSig(b"\x1a\x45\xdf\xa3", "video/webm"),
    # fonts
    _ExactSig(b"wOFF", "font/woff"),
    _ExactSig(b"wOF2", "font/woff2"),
    _ExactSig(b"\x00\x01\x00\x00", "font/ttf"),
    _ExactSig(b"OTTO", "font/otf"),
    _ExactSig(b"ttcf", "font/collection"),
    # archives
    _ExactSig(b"\x1f\x8b\x08", "application/x-gzip"),
    _ExactSig(b"PK\x03\x04", "application/zip"),
    _ExactSig(b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    _ExactSig(b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    _ExactSig(b"\x00asm", "application/wasm"),
    _TextSig(),
)


def detect_content_type(data: bytes) -> str:
    """Return the sniffed content type of *data*.

    Examples:
        >>> detect_content_type(b"%PDF-1.7")
        'application/pdf'
        >>> detect_content_type(b"hello")
        'text/plain; charset=utf-8'
        >>> detect_content_type(b"\\x00\\x01binary")
        'application/octet-stream'
    """
    data = data[:SNIFF_LENGTH]
    first_non_ws = 0
    while first_non_ws < len(data) and data[first_non_ws] in _WHITESPACE:
        first_non_ws += 1

    for signature in _SIGNATURES:
        content_type = signature.match(data, first_non_ws)
        if content_type is not None:
            return content_type
    return OCTET_STREAM


def resolve_content_type(data: bytes, path: str | os.PathLike[str]) -> str:
    """Sniff *data*, falling back to the extension of *path* when generic.

    Examples:
        >>> resolve_content_type(b"\\x00\\x01", "report.pdf")
        'application/pdf'
        >>> resolve_content_type(b"\\x00\\x01", "blob")
        'application/octet-stream'
    """
    content_type = detect_content_type(data)
    if content_type != OCTET_STREAM:
        return content_type

    guessed, _ = mimetypes.guess_type(os.fspath(path), strict=False)
    if guessed:
        log.debug("Content type for %s resolved from extension: %s", os.fspath(path), guessed)
        return guessed
    return content_type


__all__ = [
    "OCTET_STREAM",
    "SNIFF_LENGTH",
    "TEXT_PLAIN_UTF8",
    "detect_content_type",
    "resolve_content_type",
]
