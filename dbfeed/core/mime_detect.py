"""MIME type detection for large-object content.

Order: magic-number sniffing of the leading bytes, the configured override
when sniffing is inconclusive or only finds plain text, a guess from a file
name, then text/plain for text content and application/octet-stream
otherwise.
"""

import mimetypes
from typing import Optional

from dbfeed.core.models import MIMETYPE_OCTET_STREAM, MIMETYPE_TEXT_PLAIN

_SIGNATURES: list[tuple[bytes, str]] = [
    (b"%PDF-", "application/pdf"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
    (b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", "application/msword"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
    (b"{\\rtf", "application/rtf"),
]

_TEXT_MARKERS: list[tuple[bytes, str]] = [
    (b"<!doctype html", "text/html"),
    (b"<html", "text/html"),
    (b"<?xml", "text/xml"),
]


def sniff_mime_type(head: bytes) -> Optional[str]:
    """Guess a MIME type from leading bytes. Returns None when inconclusive."""
    if not head:
        return None

    for signature, mime_type in _SIGNATURES:
        if head.startswith(signature):
            return mime_type

    stripped = head.lstrip(b"\xef\xbb\xbf \t\r\n").lower()
    for marker, mime_type in _TEXT_MARKERS:
        if stripped.startswith(marker):
            return mime_type

    if b"\x00" in head:
        return None
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte sequence may be cut at the end of the sniffed window
        if e.start < len(head) - 3:
            return None
    return MIMETYPE_TEXT_PLAIN


def detect_mime_type(
    head: bytes,
    override: Optional[str] = None,
    file_name: Optional[str] = None,
) -> str:
    """Resolve the MIME type of a large object."""
    sniffed = sniff_mime_type(head)
    if sniffed and sniffed != MIMETYPE_TEXT_PLAIN:
        return sniffed

    # Plain text only says "not binary": a configured or named type is more specific
    if override:
        return override

    if file_name:
        guessed, _ = mimetypes.guess_type(file_name)
        if guessed:
            return guessed

    return sniffed or MIMETYPE_OCTET_STREAM
