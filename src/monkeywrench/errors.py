# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from enum import Enum

import httpx


class MonkeyWrenchError(Exception):
    """Base class for errors raised by MonkeyWrench."""


class ConfigError(MonkeyWrenchError):
    """Fatal configuration problem detected before any probing starts."""


class InputError(MonkeyWrenchError):
    """The URL source could not be read."""


class NormalizeError(MonkeyWrenchError):
    """A single input line could not be turned into a usable URL."""


class ProbeError(MonkeyWrenchError):
    """A URL could not be probed at all (e.g. no request can be built for it)."""


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, httpx.TooManyRedirects):
        return ErrorCategory.TOO_MANY_REDIRECTS

    # httpx wraps the ssl/socket error; inspect the cause before the generic bucket.
    cause = exc.__cause__ or exc.__context__
    if isinstance(exc, (ssl.SSLError, ssl.CertificateError)) or isinstance(cause, ssl.SSLError):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)) or isinstance(cause, socket.gaierror):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "request timed out",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.TOO_MANY_REDIRECTS: "redirect limit exceeded",
        ErrorCategory.UNKNOWN_ERROR: "network error",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "network error")


__all__ = [
    "ConfigError",
    "ErrorCategory",
    "InputError",
    "MonkeyWrenchError",
    "NormalizeError",
    "ProbeError",
    "categorize_exception",
    "error_category_to_reason",
]
