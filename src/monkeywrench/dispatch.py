# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Bounded worker pool with per-worker rate limiting and cooperative cancellation.

A producer thread feeds URLs into a queue sized to the worker count; a fixed
number of worker threads take jobs, run the probe callback and then wait for
their rate-limiter tick. Closing the queue is signalled with one sentinel per
worker. Cancellation is checked while a worker waits for a job or a tick; a
callback that is already running is never interrupted.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Iterable
from enum import Enum

from .config import DEFAULT_WORKERS, clamp_workers

logger = logging.getLogger(__name__)

_CLOSED = object()
DEFAULT_POLL_INTERVAL = 0.1


class DispatcherState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


class RateLimiter:
    """
    Periodic ticker with a period of ``1 / rate`` seconds.

    Like a ticker with a one-slot buffer: a caller that comes back late gets a
    tick immediately, and the following tick stays on the original schedule.
    Ticks are handed out under a lock, so one limiter can be shared by several
    workers to cap their combined rate.
    """

    def __init__(self, rate: float, *, clock: Callable[[], float] = time.monotonic):
        if rate <= 0:
            raise ValueError("rate must be positive")
        self.period = 1.0 / rate
        self._clock = clock
        self._lock = threading.Lock()
        self._start = clock()
        self._next = self._start + self.period

    def reserve(self) -> float:
        """Claim the next tick and return the clock time it fires at."""
        with self._lock:
            now = self._clock()
            if self._next <= now:
                elapsed_ticks = int((now - self._start) / self.period)
                self._next = self._start + (elapsed_ticks + 1) * self.period
                return now
            slot = self._next
            self._next += self.period
            return slot

    def wait(self, cancel: threading.Event | None = None) -> bool:
        """Block until the next tick. Returns False if cancelled while waiting."""
        delay = self.reserve() - self._clock()
        if delay <= 0:
            return not (cancel and cancel.is_set())
        if cancel is None:
            time.sleep(delay)
            return True
        return not cancel.wait(delay)


class Dispatcher:
    """
    Runs a callback once per URL on a fixed pool of worker threads.

    With ``shared_rate_limit=False`` (the default) every worker owns its own
    limiter, so the effective rate is roughly ``rate * workers``. Pass
    ``shared_rate_limit=True`` to make ``rate`` a cap on the whole pool.
    """

    def __init__(
        self,
        workers: int = DEFAULT_WORKERS,
        rate: float = 0.0,
        *,
        shared_rate_limit: bool = False,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.workers = clamp_workers(workers)
        self.rate = max(0.0, float(rate))
        self.shared_rate_limit = shared_rate_limit
        self.poll_interval = poll_interval
        self.state = DispatcherState.CREATED

    def run(
        self,
        urls: Iterable[str],
        fn: Callable[[str], object],
        cancel: threading.Event | None = None,
    ) -> None:
        if self.state is not DispatcherState.CREATED:
            raise RuntimeError("Dispatcher.run() can only be called once")
        cancel = cancel or threading.Event()
        jobs: queue.Queue[object] = queue.Queue(maxsize=self.workers)
        shared_limiter = RateLimiter(self.rate) if self.rate > 0 and self.shared_rate_limit else None

        self.state = DispatcherState.RUNNING
        threads = [
            threading.Thread(
                target=self._work,
                args=(jobs, fn, cancel, shared_limiter or self._own_limiter()),
                name=f"monkeywrench-worker-{index}",
                daemon=True,
            )
            for index in range(self.workers)
        ]
        for thread in threads:
            thread.start()
        producer = threading.Thread(
            target=self._produce,
            args=(urls, jobs, cancel),
            name="monkeywrench-producer",
            daemon=True,
        )
        producer.start()

        for thread in threads:
            thread.join()
        # Workers that exited on cancellation may leave the producer blocked on a full queue.
        producer.join()
        self.state = DispatcherState.DONE

    def _own_limiter(self) -> RateLimiter | None:
        return RateLimiter(self.rate) if self.rate > 0 else None

    def _produce(self, urls: Iterable[str], jobs: queue.Queue[object], cancel: threading.Event) -> None:
        try:
            for url in urls:
                if cancel.is_set() or not self._put(jobs, url, cancel):
                    return
        finally:
            self.state = DispatcherState.DRAINING
            for _ in range(self.workers):
                if not self._put(jobs, _CLOSED, cancel):
                    break

    def _put(self, jobs: queue.Queue[object], item: object, cancel: threading.Event) -> bool:
        while True:
            try:
                jobs.put(item, timeout=self.poll_interval)
                return True
            except queue.Full:
                if cancel.is_set():
                    return False

    def _work(
        self,
        jobs: queue.Queue[object],
        fn: Callable[[str], object],
        cancel: threading.Event,
        limiter: RateLimiter | None,
    ) -> None:
        while not cancel.is_set():
            try:
                item = jobs.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            if item is _CLOSED:
                return
            url = str(item)
            try:
                fn(url)
            except Exception as exc:  # noqa: BLE001
                logger.error("Processing URL %s: %s", url, exc)
            if limiter is not None and not limiter.wait(cancel):
                return


__all__ = ["DEFAULT_POLL_INTERVAL", "Dispatcher", "DispatcherState", "RateLimiter"]
