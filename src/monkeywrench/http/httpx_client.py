# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import categorize_exception
from .client import HttpClient
from .headers import apply_default_headers
from .models import HttpRequest, HttpResponse


class HttpxClient(HttpClient):
    """
    Synchronous httpx client wrapper, shared by all worker threads.

    Redirects are followed here rather than by httpx: httpx rewrites POST to GET
    on 301/302 and everything but HEAD to GET on 303, while a bypass probe has to
    keep the configured method for the whole chain.
    """

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=False,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = apply_default_headers(request.headers, self.settings.user_agent)
        timeout = request.timeout if request.timeout is not None else self.settings.timeout
        method = request.method

        try:
            url = httpx.URL(request.url)
            for _ in range(self.settings.max_redirects + 1):
                with self._client.stream(
                    method,
                    url,
                    headers=headers,
                    timeout=timeout,
                    follow_redirects=False,
                ) as resp:
                    if request.allow_redirects and resp.is_redirect:
                        url = resp.url.join(resp.headers["location"])
                        continue
                    content, truncated = self._read_body(resp)
                    encoding = resp.encoding or "utf-8"
                    try:
                        text = content.decode(encoding, errors="replace")
                    except LookupError:
                        text = content.decode("utf-8", errors="replace")

                return HttpResponse(
                    ok=True,
                    status_code=resp.status_code,
                    headers=dict(resp.headers),
                    text=text,
                    content=content,
                    url=str(resp.url),
                    method=resp.request.method,
                    meta={
                        "body_truncated": truncated,
                        "body_bytes_limit": self.settings.max_body_bytes,
                    },
                )
            raise httpx.TooManyRedirects(f"Exceeded maximum allowed redirects ({self.settings.max_redirects}).")
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                method=method,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                meta={"error_category": categorize_exception(exc)},
            )

    def _read_body(self, resp: httpx.Response) -> tuple[bytes, bool]:
        max_body_bytes = self.settings.max_body_bytes
        if max_body_bytes <= 0:
            return resp.read(), False
        content = bytearray()
        for chunk in resp.iter_bytes():
            if not chunk:
                continue
            remaining = max_body_bytes - len(content)
            if len(chunk) > remaining:
                content.extend(chunk[:remaining])
                return bytes(content), True
            content.extend(chunk)
        return bytes(content), False

    def close(self) -> None:
        self._client.close()
