# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for MonkeyWrench."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .errors import ConfigError
from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"MonkeyWrench/{__version__} (403 bypass probe)"
DEFAULT_TIMEOUT = 15.0
DEFAULT_WORKERS = 10
MIN_WORKERS = 1
MAX_WORKERS = 100


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = False
    max_redirects: int = 10
    # 0 reads whole bodies; a positive cap marks larger responses as truncated.
    max_body_bytes: int = 0

    @classmethod
    def from_env(cls) -> HttpSettings:
        """Create settings from environment variables (evaluated at call time)."""
        timeout = _float_env("MONKEYWRENCH_HTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        max_body_bytes = _int_env("MONKEYWRENCH_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes < 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            timeout=timeout,
            user_agent=os.getenv("MONKEYWRENCH_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("MONKEYWRENCH_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_redirects=max(0, _int_env("MONKEYWRENCH_HTTP_MAX_REDIRECTS", cls.max_redirects)),
            max_body_bytes=max_body_bytes,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


class ProbeMode(str, Enum):
    FULL = "full"
    HEADERS = "headers"


def clamp_workers(workers: int) -> int:
    return max(MIN_WORKERS, min(MAX_WORKERS, int(workers)))


def parse_int_list(value: str | None, *, option: str = "value") -> frozenset[int]:
    """
    Parse a comma separated integer list such as ``"403,404"``.

    An empty string yields an empty set. Any piece that is not an integer
    (including an empty piece from a trailing comma) raises ConfigError.
    """
    if not value:
        return frozenset()
    numbers: set[int] = set()
    for piece in value.split(","):
        piece = piece.strip()
        try:
            numbers.add(int(piece))
        except ValueError:
            raise ConfigError(f"Invalid {option} value: {piece!r} is not an integer") from None
    return frozenset(numbers)


def parse_custom_headers(raw: str | None) -> dict[str, str]:
    """
    Parse ``"Key: Value, Key2: Value2"`` into an ordered name -> value mapping.

    Pairs without a colon are reported as warnings and skipped. A later pair
    with the same name replaces the earlier one.
    """
    headers: dict[str, str] = {}
    if not raw:
        return headers
    for pair in raw.split(","):
        name, sep, value = pair.partition(":")
        if not sep:
            logger.warning("Invalid header format: %s", pair)
            continue
        headers[name.strip()] = value.strip()
    return headers


@dataclass(frozen=True)
class RuleSet:
    """Filter (exclude) and match (require) sets, one pair per response metric."""

    filter_size: frozenset[int] = frozenset()
    filter_words: frozenset[int] = frozenset()
    filter_status: frozenset[int] = frozenset()
    filter_lines: frozenset[int] = frozenset()
    match_size: frozenset[int] = frozenset()
    match_words: frozenset[int] = frozenset()
    match_status: frozenset[int] = frozenset()
    match_lines: frozenset[int] = frozenset()

    @classmethod
    def from_strings(
        cls,
        *,
        filter_size: str | None = None,
        filter_words: str | None = None,
        filter_status: str | None = None,
        filter_lines: str | None = None,
        match_size: str | None = None,
        match_words: str | None = None,
        match_status: str | None = None,
        match_lines: str | None = None,
    ) -> RuleSet:
        return cls(
            filter_size=parse_int_list(filter_size, option="filter size"),
            filter_words=parse_int_list(filter_words, option="filter words"),
            filter_status=parse_int_list(filter_status, option="filter status"),
            filter_lines=parse_int_list(filter_lines, option="filter lines"),
            match_size=parse_int_list(match_size, option="match size"),
            match_words=parse_int_list(match_words, option="match words"),
            match_status=parse_int_list(match_status, option="match status"),
            match_lines=parse_int_list(match_lines, option="match lines"),
        )


@dataclass(frozen=True)
class ProbeConfig:
    """Immutable per-run probe configuration shared by every worker."""

    method: str = "GET"
    custom_headers: Mapping[str, str] = field(default_factory=dict)
    rules: RuleSet = field(default_factory=RuleSet)
    timeout: float = DEFAULT_TIMEOUT
    print_requests: bool = False
    yaml_output: bool = False
    simple: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", (self.method or "GET").upper())
        object.__setattr__(self, "custom_headers", MappingProxyType(dict(self.custom_headers)))


__all__ = [
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "DEFAULT_WORKERS",
    "HttpSettings",
    "MAX_WORKERS",
    "MIN_WORKERS",
    "ProbeConfig",
    "ProbeMode",
    "RuleSet",
    "clamp_workers",
    "load_http_settings",
    "parse_custom_headers",
    "parse_int_list",
]
