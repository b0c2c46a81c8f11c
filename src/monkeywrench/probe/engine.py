# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-URL probe: one request per catalog header, classified and reported."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

import httpx

from ..config import ProbeConfig
from ..errors import ErrorCategory, ProbeError, error_category_to_reason
from ..http.client import HttpClient
from ..http.models import HttpRequest, HttpResponse
from ..stats import RequestStats, StatEvent
from .catalog import BYPASS_HEADERS, BypassHeader
from .classifier import ResponseMetrics, classify
from .models import ProbeResult

logger = logging.getLogger(__name__)

_SKIP_URLS = frozenset({"", "\x00"})


class ResultHandler(Protocol):
    def emit(self, result: ProbeResult) -> None: ...


class ProbeEngine:
    """
    Sends the whole bypass catalog against a URL.

    Every header is tried even after one gets through: the point is to list
    which headers bypass the restriction. Transport failures are logged and
    the next header is attempted; nothing is retried.
    """

    def __init__(
        self,
        http_client: HttpClient,
        config: ProbeConfig,
        sink: ResultHandler,
        *,
        stats: RequestStats | None = None,
        catalog: Sequence[BypassHeader] = BYPASS_HEADERS,
    ):
        self.http_client = http_client
        self.config = config
        self.sink = sink
        self.stats = stats
        self.catalog = tuple(catalog)

    def probe(self, url: str) -> None:
        if url in _SKIP_URLS:
            return
        self._validate(url)
        logger.debug("Using HTTP method: %s", self.config.method)

        for header in self.catalog:
            self._probe_header(url, header)

    def build_request(self, url: str, header: BypassHeader) -> HttpRequest:
        """Fresh request carrying one catalog header followed by the custom headers."""
        request = HttpRequest(url=url, method=self.config.method, timeout=self.config.timeout)
        request.add_header(header.name, header.value)
        for name, value in self.config.custom_headers.items():
            request.add_header(name, value)
        return request

    def _validate(self, url: str) -> None:
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise ProbeError(f"creating request: {exc}") from exc
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ProbeError(f"creating request: unsupported URL {url!r}")

    def _probe_header(self, url: str, header: BypassHeader) -> None:
        request = self.build_request(url, header)
        logger.debug("Sending %s %s with %s: %s", request.method, url, header.name, header.value)
        self._record(StatEvent.SENT)
        response = self.http_client.request(request)

        if not response.ok or response.status_code is None:
            self._record(StatEvent.FAILED)
            self._log_failure(url, header, response)
            return

        if response.method and response.method != request.method:
            logger.error("Method changed during request: expected %s, got %s", request.method, response.method)
            return

        if response.meta.get("body_truncated"):
            logger.warning(
                "%s with %s: %s not classified: body exceeds %d bytes",
                url,
                header.name,
                header.value,
                response.meta.get("body_bytes_limit", 0),
            )
            return

        metrics = ResponseMetrics.from_body(response.status_code, response.content, response.text)
        if not classify(metrics, self.config.rules):
            return

        self._record(StatEvent.ACCEPTED)
        self.sink.emit(
            ProbeResult(
                url=url,
                method=request.method,
                header_name=header.name,
                header_value=header.value,
                metrics=metrics,
                body=response.text,
                request=request,
            )
        )

    def _log_failure(self, url: str, header: BypassHeader, response: HttpResponse) -> None:
        category = response.meta.get("error_category", ErrorCategory.UNKNOWN_ERROR)
        logger.error(
            "%s with %s: %s failed (%s): %s",
            url,
            header.name,
            header.value,
            error_category_to_reason(category),
            response.error_message or "no response",
        )

    def _record(self, event: StatEvent) -> None:
        if self.stats is not None:
            self.stats.record(event)


__all__ = ["ProbeEngine", "ResultHandler"]
