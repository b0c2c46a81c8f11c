# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Target ingestion and URL normalization.

URL lists come from files or stdin and are frequently produced on Windows
(UTF-16 with a byte-order mark) or by tools that leave NUL bytes and stray
carriage returns behind. Decoding is chosen once by sniffing the leading bytes;
everything downstream sees plain ``str`` lines.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Iterable, Iterator
from typing import BinaryIO, TextIO
from urllib.parse import urlsplit

from .errors import InputError, NormalizeError

logger = logging.getLogger(__name__)

_BOM_ENCODINGS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)
_SCHEMES = ("http://", "https://")


def sniff_encoding(data: bytes) -> str:
    """Pick a codec from the first bytes of ``data``."""
    for bom, encoding in _BOM_ENCODINGS:
        if data.startswith(bom):
            return encoding
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return "utf-16-le"
    return "utf-8"


def decode_input(data: bytes) -> str:
    encoding = sniff_encoding(data)
    if encoding in ("utf-16-le", "utf-16-be"):
        data = data[2:] if data[:2] in (codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE) else data
        if len(data) % 2:
            data = data[:-1]
    return data.decode(encoding, errors="replace")


def iter_clean_lines(text: str) -> Iterator[str]:
    """Yield stripped, non-empty lines with NUL and BOM characters removed."""
    for line in text.replace("\x00", "").replace("\ufeff", "").splitlines():
        line = line.strip()
        if line:
            yield line


def read_lines(path: str) -> list[str]:
    """Read candidate URLs from a file."""
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise InputError(f"Reading input: {exc}") from exc
    return list(iter_clean_lines(decode_input(data)))


def read_stream_lines(stream: BinaryIO | TextIO) -> list[str]:
    """Read candidate URLs from a line-oriented stream such as stdin."""
    source = getattr(stream, "buffer", stream)
    try:
        data = source.read()
    except (OSError, ValueError) as exc:
        raise InputError(f"Reading input: {exc}") from exc
    text = data if isinstance(data, str) else decode_input(data)
    return list(iter_clean_lines(text))


def normalize_url(raw: str) -> str:
    """
    Turn one input line into an absolute http(s) URL.

    Example:
      example.com/admin -> https://example.com/admin
    """
    url = (raw or "").strip()
    if not url:
        raise NormalizeError("empty URL")
    url = url.replace("\ufeff", "").replace("\x00", "")
    if not url.startswith(_SCHEMES):
        url = "https://" + url
    url = url.replace("\r", "").replace("\n", "")

    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        # Accessing .port validates it (raises ValueError when out of range).
        parts.port  # noqa: B018
    except ValueError as exc:
        raise NormalizeError(f"invalid URL {raw!r}: {exc}") from exc
    if not hostname:
        raise NormalizeError(f"invalid URL {raw!r}: missing host")
    return parts.geturl()


def normalize_urls(lines: Iterable[str]) -> list[str]:
    """Normalize every line; blank lines are dropped silently, invalid ones logged and skipped."""
    urls: list[str] = []
    for line in lines:
        if not line or not line.strip(" \t\r\n\x00"):
            continue
        try:
            urls.append(normalize_url(line))
        except NormalizeError as exc:
            logger.warning("Skipping %r: %s", line, exc)
    return urls


__all__ = [
    "decode_input",
    "iter_clean_lines",
    "normalize_url",
    "normalize_urls",
    "read_lines",
    "read_stream_lines",
    "sniff_encoding",
]
