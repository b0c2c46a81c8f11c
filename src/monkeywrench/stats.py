# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Run-wide request counters.

Workers never share a counter: they push events onto a queue and a single
collector thread owns the tallies. Totals are read only after the collector
has been stopped and joined.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections import Counter
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class StatEvent(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    ACCEPTED = "accepted"


_STOP = object()


@dataclass(frozen=True)
class StatsSnapshot:
    sent: int
    failed: int
    accepted: int
    elapsed: float

    @property
    def requests_per_second(self) -> float:
        return self.sent / self.elapsed if self.elapsed > 0 else 0.0


class RequestStats:
    """Message-passing accumulator for request/result counts."""

    def __init__(self, report_interval: float | None = None):
        self._events: queue.Queue[object] = queue.Queue()
        self._counts: Counter[StatEvent] = Counter()
        self._report_interval = report_interval
        self._thread: threading.Thread | None = None
        self._started_at = time.monotonic()
        self._stopped_at: float | None = None

    def start(self) -> RequestStats:
        self._started_at = time.monotonic()
        self._thread = threading.Thread(target=self._collect, name="monkeywrench-stats", daemon=True)
        self._thread.start()
        return self

    def record(self, event: StatEvent) -> None:
        self._events.put(event)

    def stop(self) -> StatsSnapshot:
        self._events.put(_STOP)
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        else:
            self._collect()
        self._stopped_at = time.monotonic()
        return self.snapshot()

    def snapshot(self) -> StatsSnapshot:
        end = self._stopped_at if self._stopped_at is not None else time.monotonic()
        return StatsSnapshot(
            sent=self._counts[StatEvent.SENT],
            failed=self._counts[StatEvent.FAILED],
            accepted=self._counts[StatEvent.ACCEPTED],
            elapsed=end - self._started_at,
        )

    def _collect(self) -> None:
        last_report = time.monotonic()
        while True:
            try:
                event = self._events.get(timeout=self._report_interval)
            except queue.Empty:
                event = None
            if event is _STOP:
                return
            if isinstance(event, StatEvent):
                self._counts[event] += 1
            if self._report_interval and time.monotonic() - last_report >= self._report_interval:
                last_report = time.monotonic()
                snap = self.snapshot()
                logger.debug("%.1f req/s (sent=%d failed=%d accepted=%d)", snap.requests_per_second, snap.sent, snap.failed, snap.accepted)


__all__ = ["RequestStats", "StatEvent", "StatsSnapshot"]
