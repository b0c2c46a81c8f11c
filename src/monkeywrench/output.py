# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Rendering of accepted probe results."""

from __future__ import annotations

import logging
import sys
import threading
from typing import TextIO
from urllib.parse import urlsplit

import yaml
from colorama import Fore, Style

from .config import DEFAULT_USER_AGENT, ProbeConfig
from .http.headers import apply_default_headers
from .http.models import HttpRequest
from .probe.models import ProbeResult

logger = logging.getLogger(__name__)

YAML_BANNER = "Response in YAML format:"


def status_color(status: int) -> str:
    if status >= 500:
        return Fore.RED
    if status >= 400:
        return Fore.YELLOW
    if status >= 300:
        return Fore.BLUE
    if status >= 200:
        return Fore.GREEN
    return ""


def format_status_line(result: ProbeResult) -> str:
    """``<method> | <status> | <url> | <header>: <value> | Size: <n>``, coloured by status class."""
    line = (
        f"{result.method} | {result.status} | {result.url} | "
        f"{result.header_name}: {result.header_value} | Size: {result.size}"
    )
    color = status_color(result.status)
    return f"{color}{line}{Style.RESET_ALL}" if color else line


def format_yaml(result: ProbeResult) -> str:
    return yaml.safe_dump({"status": result.status, "body": result.body}, sort_keys=False, allow_unicode=True)


def format_raw_request(request: HttpRequest, user_agent: str = DEFAULT_USER_AGENT) -> str:
    """Render a request the way an intercepting proxy shows it: request line, Host, headers, blank line."""
    parts = urlsplit(request.url)
    target = parts.path or "/"
    if parts.query:
        target = f"{target}?{parts.query}"
    lines = [f"{request.method} {target} HTTP/1.1", f"Host: {parts.netloc}"]
    lines.extend(f"{name}: {value}" for name, value in apply_default_headers(request.headers, user_agent))
    lines.append("")
    return "\n".join(lines) + "\n"


class ResultSink:
    """Thread-safe writer for accepted results; one lock keeps each result's block contiguous."""

    def __init__(self, config: ProbeConfig, stream: TextIO | None = None, *, user_agent: str = DEFAULT_USER_AGENT):
        self.config = config
        self.stream = stream or sys.stdout
        self.user_agent = user_agent
        self._lock = threading.Lock()

    def render(self, result: ProbeResult) -> str:
        chunks: list[str] = []
        if self.config.yaml_output:
            chunks.append(f"{YAML_BANNER}\n{format_yaml(result)}\n")
        if self.config.simple:
            chunks.append(f"{result.url}\n")
        else:
            chunks.append(f"{format_status_line(result)}\n")
        if self.config.print_requests:
            chunks.append(format_raw_request(result.request, self.user_agent))
        return "".join(chunks)

    def emit(self, result: ProbeResult) -> None:
        text = self.render(result)
        with self._lock:
            self.stream.write(text)
            self.stream.flush()
        logger.debug("Request completed: %s", result.url)


__all__ = [
    "ResultSink",
    "YAML_BANNER",
    "format_raw_request",
    "format_status_line",
    "format_yaml",
    "status_color",
]
