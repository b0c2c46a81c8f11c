# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header list utilities.

Requests carry headers as ordered (name, value) pairs rather than a dict so that
a custom header sharing its name with a catalog header is appended, not merged.
Servers that only read the first value of a repeated header therefore see the
catalog value. Header names are compared case-insensitively (RFC 9110).
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import HeaderList

DEFAULT_ACCEPT = "*/*"


def has_header(headers: Iterable[tuple[str, str]], name: str) -> bool:
    lower = name.lower()
    return any(key.lower() == lower for key, _ in headers)


def apply_default_headers(headers: Iterable[tuple[str, str]], user_agent: str) -> HeaderList:
    """
    Return a copy of ``headers`` with client defaults appended when absent.

    The raw request dump uses the same helper so it shows what was actually sent.
    """
    out: HeaderList = list(headers)
    if not has_header(out, "User-Agent"):
        out.append(("User-Agent", user_agent))
    if not has_header(out, "Accept"):
        out.append(("Accept", DEFAULT_ACCEPT))
    return out


__all__ = ["DEFAULT_ACCEPT", "apply_default_headers", "has_header"]
