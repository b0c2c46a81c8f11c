# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process HttpClient implementations."""

from __future__ import annotations

import threading
from collections.abc import Callable

from .client import HttpClient
from .models import HttpRequest, HttpResponse

Responder = Callable[[HttpRequest], HttpResponse]


class StubHttpClient(HttpClient):
    """Deterministic, programmable HttpClient for tests and dry runs.

    Responses are looked up by URL; ``responder`` (when given) takes precedence
    and can vary the answer per header. Recording is thread-safe so the stub can
    sit behind the worker pool.
    """

    def __init__(
        self,
        responses: dict[str, HttpResponse] | None = None,
        responder: Responder | None = None,
    ):
        self._responses = responses or {}
        self._responder = responder
        self._lock = threading.Lock()
        self.requests: list[HttpRequest] = []
        self.closed = False

    def request(self, request: HttpRequest) -> HttpResponse:
        with self._lock:
            self.requests.append(request)
        if self._responder is not None:
            return self._responder(request)
        if request.url in self._responses:
            return self._responses[request.url]
        return HttpResponse(ok=False, status_code=None, error_message="No stubbed response configured")

    def close(self) -> None:
        self.closed = True
