# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
    MonkeyWrench, HTTP access-control bypass prober.
    Copyright (C) 2025  Theori Inc.

    This program is free software: you can redistribute it and/or modify
    it under the terms of the GNU Affero General Public License as published
    by the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This program is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    GNU Affero General Public License for more details.

    You should have received a copy of the GNU Affero General Public License
    along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

"""
MonkeyWrench package entrypoint.

Each target URL is requested once per entry of a catalog of spoofed proxy and
routing headers; responses are filtered by size, word, line and status rules
and the survivors are reported. HTTP behavior is abstracted behind an
injectable client interface and the work is spread over a bounded thread pool.
"""

from .config import HttpSettings, ProbeConfig, ProbeMode, RuleSet, load_http_settings
from .dispatch import Dispatcher, DispatcherState, RateLimiter
from .errors import ConfigError, ErrorCategory, InputError, MonkeyWrenchError, NormalizeError, ProbeError
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, StubHttpClient, create_default_http_client
from .log import setup_logging
from .output import ResultSink
from .probe import BYPASS_HEADERS, BypassHeader, ProbeEngine, ProbeResult, ResponseMetrics, classify
from .runtime import MonkeyWrench
from .stats import RequestStats, StatsSnapshot
from .targets import normalize_url, read_lines, read_stream_lines
from .version import __version__

__all__ = [
    "BYPASS_HEADERS",
    "BypassHeader",
    "ConfigError",
    "Dispatcher",
    "DispatcherState",
    "ErrorCategory",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "InputError",
    "MonkeyWrench",
    "MonkeyWrenchError",
    "NormalizeError",
    "ProbeConfig",
    "ProbeEngine",
    "ProbeError",
    "ProbeMode",
    "ProbeResult",
    "RateLimiter",
    "RequestStats",
    "ResponseMetrics",
    "ResultSink",
    "RuleSet",
    "StatsSnapshot",
    "StubHttpClient",
    "__version__",
    "classify",
    "create_default_http_client",
    "load_http_settings",
    "normalize_url",
    "read_lines",
    "read_stream_lines",
    "setup_logging",
]
