# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import importlib
import logging
import socket
import ssl

import httpx
import pytest

from monkeywrench import config
from monkeywrench.config import DEFAULT_USER_AGENT, ProbeConfig, RuleSet, clamp_workers, parse_custom_headers, parse_int_list
from monkeywrench.errors import ConfigError, ErrorCategory, categorize_exception, error_category_to_reason


def test_http_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("MONKEYWRENCH_HTTP_TIMEOUT", "5.5")
    monkeypatch.setenv("MONKEYWRENCH_USER_AGENT", "CustomAgent/1.0")
    monkeypatch.setenv("MONKEYWRENCH_HTTP_VERIFY_SSL", "yes")
    monkeypatch.setenv("MONKEYWRENCH_HTTP_MAX_REDIRECTS", "3")
    monkeypatch.setenv("MONKEYWRENCH_HTTP_MAX_BODY_BYTES", "1024")

    importlib.reload(config)
    settings = config.load_http_settings()

    assert settings.timeout == 5.5
    assert settings.user_agent == "CustomAgent/1.0"
    assert settings.verify_ssl is True
    assert settings.max_redirects == 3
    assert settings.max_body_bytes == 1024


def test_http_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("MONKEYWRENCH_HTTP_TIMEOUT", "not-a-number")
    monkeypatch.setenv("MONKEYWRENCH_HTTP_MAX_REDIRECTS", "ten")
    monkeypatch.setenv("MONKEYWRENCH_HTTP_MAX_BODY_BYTES", "-5")

    importlib.reload(config)
    settings = config.load_http_settings()

    assert settings.timeout == config.HttpSettings.timeout == 15.0
    assert settings.max_redirects == config.HttpSettings.max_redirects
    assert settings.max_body_bytes == config.HttpSettings.max_body_bytes
    assert settings.verify_ssl is False
    assert DEFAULT_USER_AGENT in settings.user_agent


def test_load_http_settings_reads_env_at_call_time(monkeypatch):
    importlib.reload(config)
    monkeypatch.setenv("MONKEYWRENCH_HTTP_TIMEOUT", "7.7")
    assert config.load_http_settings().timeout == 7.7
    monkeypatch.setenv("MONKEYWRENCH_HTTP_TIMEOUT", "8.8")
    assert config.load_http_settings().timeout == 8.8


def test_parse_int_list():
    assert parse_int_list("") == frozenset()
    assert parse_int_list(None) == frozenset()
    assert parse_int_list("403, 404,500") == {403, 404, 500}


@pytest.mark.parametrize("raw", ["40x", "403,", "1.5", "two"])
def test_parse_int_list_rejects_non_integers(raw):
    with pytest.raises(ConfigError):
        parse_int_list(raw, option="filter status")


def test_rule_set_from_strings():
    rules = RuleSet.from_strings(filter_status="403", match_size="512,1024")
    assert rules.filter_status == {403}
    assert rules.match_size == {512, 1024}
    assert rules.filter_words == frozenset()

    with pytest.raises(ConfigError, match="match lines"):
        RuleSet.from_strings(match_lines="abc")


def test_parse_custom_headers_keeps_order_and_values():
    headers = parse_custom_headers("User-Agent: Mozilla, X-Test: a:b ,X-Empty:")
    assert list(headers.items()) == [("User-Agent", "Mozilla"), ("X-Test", "a:b"), ("X-Empty", "")]


def test_parse_custom_headers_skips_malformed_pairs(caplog):
    with caplog.at_level(logging.WARNING, logger="monkeywrench.config"):
        headers = parse_custom_headers("BadHeader")
    assert headers == {}
    assert "Invalid header format: BadHeader" in caplog.text

    assert parse_custom_headers("BadHeader, X-Ok: 1") == {"X-Ok": "1"}


def test_clamp_workers():
    assert clamp_workers(0) == 1
    assert clamp_workers(-3) == 1
    assert clamp_workers(500) == 100
    assert clamp_workers(10) == 10


def test_probe_config_is_read_only_and_uppercases_method():
    source = {"X-Test": "1"}
    cfg = ProbeConfig(method="post", custom_headers=source)
    assert cfg.method == "POST"
    source["X-Other"] = "2"
    assert dict(cfg.custom_headers) == {"X-Test": "1"}
    with pytest.raises(TypeError):
        cfg.custom_headers["X-New"] = "3"  # type: ignore[index]
    with pytest.raises(AttributeError):
        cfg.method = "GET"  # type: ignore[misc]


def test_categorize_exception():
    assert categorize_exception(httpx.ReadTimeout("slow")) is ErrorCategory.TIMEOUT
    assert categorize_exception(httpx.ConnectError("refused")) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(httpx.TooManyRedirects("loop")) is ErrorCategory.TOO_MANY_REDIRECTS
    assert categorize_exception(ssl.SSLError("bad cert")) is ErrorCategory.SSL_ERROR
    assert categorize_exception(socket.gaierror("no such host")) is ErrorCategory.DNS_ERROR
    assert categorize_exception(ConnectionResetError()) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(RuntimeError("boom")) is ErrorCategory.UNKNOWN_ERROR


def test_categorize_exception_inspects_cause():
    try:
        try:
            raise ssl.SSLError("handshake failure")
        except ssl.SSLError as inner:
            raise httpx.ConnectError("tls") from inner
    except httpx.ConnectError as exc:
        assert categorize_exception(exc) is ErrorCategory.SSL_ERROR


def test_error_category_to_reason():
    assert error_category_to_reason(ErrorCategory.TIMEOUT) == "request timed out"
    assert error_category_to_reason(None) == ""
