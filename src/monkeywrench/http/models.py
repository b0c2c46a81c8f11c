# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across MonkeyWrench."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Ordered (name, value) pairs. Names may repeat: a header added twice is sent twice.
HeaderList = list[tuple[str, str]]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: HeaderList = field(default_factory=list)
    timeout: float | None = None
    allow_redirects: bool = True

    def add_header(self, name: str, value: str) -> None:
        """Append a header, keeping any existing header of the same name."""
        self.headers.append((name, value))


@dataclass
class HttpResponse:
    """Normalized HTTP response with the metadata the probe engine needs."""

    ok: bool
    status_code: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    method: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)
