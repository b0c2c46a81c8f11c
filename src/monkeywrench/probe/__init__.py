# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bypass-header probing: catalog, response classification and the per-URL engine."""

from .catalog import BYPASS_HEADERS, BypassHeader
from .classifier import ResponseMetrics, classify, line_count, word_count
from .engine import ProbeEngine
from .models import ProbeResult

__all__ = [
    "BYPASS_HEADERS",
    "BypassHeader",
    "ProbeEngine",
    "ProbeResult",
    "ResponseMetrics",
    "classify",
    "line_count",
    "word_count",
]
