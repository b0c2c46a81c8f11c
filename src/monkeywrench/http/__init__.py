# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubHttpClient
from .client import HttpClient, create_default_http_client
from .headers import apply_default_headers, has_header
from .httpx_client import HttpxClient
from .models import HeaderList, HttpRequest, HttpResponse

__all__ = [
    "HeaderList",
    "HttpClient",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "StubHttpClient",
    "apply_default_headers",
    "create_default_http_client",
    "has_header",
]
