# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for MonkeyWrench."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("MONKEYWRENCH_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "[%(levelname)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.INFO),
        format=LOG_FORMAT,
    )
    # httpx logs every request at INFO; keep our own traces readable.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def cli_log_level(debug: bool) -> str:
    """Only --debug enables DEBUG; MONKEYWRENCH_LOG_LEVEL can quiet the CLI but not open debug traces."""
    if debug:
        return "DEBUG"
    level = os.getenv("MONKEYWRENCH_LOG_LEVEL", "INFO").upper()
    return "INFO" if level == "DEBUG" else level


__all__ = ["cli_log_level", "setup_logging"]
