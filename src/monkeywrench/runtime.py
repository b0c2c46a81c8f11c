# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level MonkeyWrench facade wiring targets, the probe engine and the worker pool."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from contextlib import suppress
from typing import TextIO

from .config import DEFAULT_WORKERS, HttpSettings, ProbeConfig, ProbeMode, load_http_settings
from .dispatch import Dispatcher
from .http.client import HttpClient, create_default_http_client
from .output import ResultSink
from .probe.engine import ProbeEngine
from .stats import RequestStats, StatsSnapshot
from .targets import normalize_urls

logger = logging.getLogger(__name__)

ProbeStrategy = Callable[[ProbeEngine, str], None]

STATS_REPORT_INTERVAL = 5.0


def probe_all_headers(engine: ProbeEngine, url: str) -> None:
    engine.probe(url)


# Both modes currently run the full header catalog; new modes register here.
STRATEGIES: dict[ProbeMode, ProbeStrategy] = {
    ProbeMode.FULL: probe_all_headers,
    ProbeMode.HEADERS: probe_all_headers,
}


class MonkeyWrench:
    """
    Run coordinator: one shared HTTP client and one read-only ProbeConfig for every worker.
    """

    def __init__(
        self,
        config: ProbeConfig,
        *,
        http_client: HttpClient | None = None,
        http_settings: HttpSettings | None = None,
        workers: int = DEFAULT_WORKERS,
        rate: float = 0.0,
        shared_rate_limit: bool = False,
        stream: TextIO | None = None,
    ):
        self.config = config
        self.http_settings = http_settings or load_http_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)
        self.workers = workers
        self.rate = rate
        self.shared_rate_limit = shared_rate_limit
        self.sink = ResultSink(config, stream, user_agent=self.http_settings.user_agent)
        self.stats = RequestStats(report_interval=STATS_REPORT_INTERVAL if config.debug else None)
        self.engine = ProbeEngine(self.http_client, config, self.sink, stats=self.stats)
        self.dispatcher: Dispatcher | None = None

    def run(
        self,
        raw_urls: Iterable[str],
        mode: ProbeMode | str = ProbeMode.FULL,
        cancel: threading.Event | None = None,
    ) -> StatsSnapshot:
        strategy = STRATEGIES[ProbeMode(mode)]
        urls = normalize_urls(raw_urls)
        logger.debug("Probing %d URL(s) in %s mode", len(urls), ProbeMode(mode).value)

        self.dispatcher = Dispatcher(self.workers, self.rate, shared_rate_limit=self.shared_rate_limit)
        self.stats.start()
        try:
            self.dispatcher.run(urls, lambda url: strategy(self.engine, url), cancel)
        finally:
            snapshot = self.stats.stop()
        logger.debug(
            "Done: %d request(s), %d failed, %d reported, %.1f req/s",
            snapshot.sent,
            snapshot.failed,
            snapshot.accepted,
            snapshot.requests_per_second,
        )
        return snapshot

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> MonkeyWrench:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["MonkeyWrench", "STRATEGIES", "probe_all_headers"]
