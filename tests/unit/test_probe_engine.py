# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import threading

import pytest

from monkeywrench.config import ProbeConfig, RuleSet
from monkeywrench.errors import ErrorCategory, ProbeError
from monkeywrench.http.adapters import StubHttpClient
from monkeywrench.http.models import HttpRequest, HttpResponse
from monkeywrench.probe.catalog import BYPASS_HEADERS, BypassHeader
from monkeywrench.probe.engine import ProbeEngine
from monkeywrench.stats import RequestStats

URL = "https://example.com/admin"


class CollectingSink:
    def __init__(self):
        self.results = []
        self._lock = threading.Lock()

    def emit(self, result):
        with self._lock:
            self.results.append(result)


def ok(status=200, body="ok", method="GET"):
    return HttpResponse(ok=True, status_code=status, text=body, content=body.encode(), url=URL, method=method)


def _engine(responder, **config_kwargs):
    client = StubHttpClient(responder=responder)
    sink = CollectingSink()
    engine = ProbeEngine(client, ProbeConfig(**config_kwargs), sink)
    return engine, client, sink


def _first_header(request: HttpRequest) -> str:
    return request.headers[0][0]


def test_catalog_is_fixed_and_ordered():
    names = [header.name for header in BYPASS_HEADERS]
    assert len(names) == 19
    assert names[0] == "X-Forwarded-For"
    assert "X-Original-URL" in names
    assert "X-Rewrite-URL" in names
    assert all(isinstance(header, BypassHeader) for header in BYPASS_HEADERS)


def test_probe_tries_whole_catalog_in_order():
    engine, client, sink = _engine(lambda request: ok())
    engine.probe(URL)

    assert [_first_header(r) for r in client.requests] == [h.name for h in BYPASS_HEADERS]
    assert len(sink.results) == len(BYPASS_HEADERS)
    assert all(r.url == URL for r in client.requests)


def test_each_request_is_fresh():
    engine, client, _ = _engine(lambda request: ok(), custom_headers={"X-Test": "1"})
    engine.probe(URL)

    assert len({id(r) for r in client.requests}) == len(BYPASS_HEADERS)
    for request, header in zip(client.requests, BYPASS_HEADERS):
        assert request.headers == [(header.name, header.value), ("X-Test", "1")]


def test_custom_header_is_appended_after_catalog_header():
    engine, client, _ = _engine(lambda request: ok(), custom_headers={"X-Forwarded-For": "10.0.0.1"})
    engine.probe(URL)

    first = client.requests[0]
    assert first.headers == [("X-Forwarded-For", "127.0.0.1"), ("X-Forwarded-For", "10.0.0.1")]


def test_method_is_uppercased_and_timeout_applied():
    engine, client, sink = _engine(lambda request: ok(method="POST"), method="post", timeout=3.0)
    engine.probe(URL)

    assert {r.method for r in client.requests} == {"POST"}
    assert {r.timeout for r in client.requests} == {3.0}
    assert {r.method for r in sink.results} == {"POST"}


@pytest.mark.parametrize("url", ["", "\x00"])
def test_empty_and_nul_urls_are_skipped(url):
    engine, client, sink = _engine(lambda request: ok())
    engine.probe(url)
    assert client.requests == []
    assert sink.results == []


@pytest.mark.parametrize("url", ["ftp://example.com/file", "https://", "not a url"])
def test_unbuildable_url_raises_probe_error(url):
    engine, client, _ = _engine(lambda request: ok())
    with pytest.raises(ProbeError):
        engine.probe(url)
    assert client.requests == []


def test_transport_failure_is_logged_and_next_header_tried(caplog):
    def responder(request):
        if _first_header(request) == "X-Forwarded-For":
            return HttpResponse(
                ok=False,
                error_message="connection refused",
                error_type="ConnectError",
                meta={"error_category": ErrorCategory.CONNECTION_ERROR},
            )
        return ok()

    engine, client, sink = _engine(responder)
    with caplog.at_level(logging.ERROR, logger="monkeywrench.probe.engine"):
        engine.probe(URL)

    assert len(client.requests) == len(BYPASS_HEADERS)
    assert len(sink.results) == len(BYPASS_HEADERS) - 1
    assert URL in caplog.text
    assert "connection refused" in caplog.text
    assert "network connectivity issue" in caplog.text


def test_filter_status_reports_only_bypassing_header():
    def responder(request):
        if _first_header(request) == "X-Original-URL":
            return ok(200, "welcome")
        return ok(403, "forbidden")

    engine, _, sink = _engine(responder, rules=RuleSet(filter_status=frozenset({403})))
    engine.probe(URL)

    assert len(sink.results) == 1
    result = sink.results[0]
    assert result.header_name == "X-Original-URL"
    assert result.header_value == "/original-url"
    assert result.status == 200
    assert result.body == "welcome"
    assert result.request.headers[0] == ("X-Original-URL", "/original-url")


def test_match_size_keeps_exact_length_only():
    def responder(request):
        size = 512 if _first_header(request) == "Client-IP" else 511
        return ok(200, "x" * size)

    engine, _, sink = _engine(responder, rules=RuleSet(match_size=frozenset({512})))
    engine.probe(URL)

    assert [r.header_name for r in sink.results] == ["Client-IP"]
    assert sink.results[0].size == 512



def test_truncated_body_is_not_classified(caplog):
    def responder(request):
        response = ok(200, "x" * 512)
        response.meta = {"body_truncated": True, "body_bytes_limit": 512}
        return response

    engine, _, sink = _engine(responder, rules=RuleSet(match_size=frozenset({512})))
    with caplog.at_level(logging.WARNING):
        engine.probe(URL)

    assert sink.results == []
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == len(BYPASS_HEADERS)
    assert "body exceeds 512 bytes" in warnings[0].getMessage()

def test_non_2xx_responses_are_not_errors(caplog):
    engine, _, sink = _engine(lambda request: ok(500, "boom"))
    with caplog.at_level(logging.ERROR):
        engine.probe(URL)
    assert len(sink.results) == len(BYPASS_HEADERS)
    assert caplog.text == ""


def test_method_change_is_rejected(caplog):
    engine, _, sink = _engine(lambda request: ok(method="GET"), method="PUT")
    with caplog.at_level(logging.ERROR):
        engine.probe(URL)
    assert sink.results == []
    assert "Method changed during request" in caplog.text


def test_stats_are_recorded():
    def responder(request):
        if _first_header(request) == "Host":
            return HttpResponse(ok=False, error_message="timeout")
        if _first_header(request) == "Referer":
            return ok(200)
        return ok(403)

    stats = RequestStats()
    client = StubHttpClient(responder=responder)
    engine = ProbeEngine(
        client,
        ProbeConfig(rules=RuleSet(match_status=frozenset({200}))),
        CollectingSink(),
        stats=stats,
    )
    engine.probe(URL)
    snapshot = stats.stop()

    assert snapshot.sent == len(BYPASS_HEADERS)
    assert snapshot.failed == 1
    assert snapshot.accepted == 1


def test_custom_catalog():
    catalog = [BypassHeader("X-Only", "1")]
    client = StubHttpClient(responder=lambda request: ok())
    engine = ProbeEngine(client, ProbeConfig(), CollectingSink(), catalog=catalog)
    engine.probe(URL)
    assert [r.headers for r in client.requests] == [[("X-Only", "1")]]
