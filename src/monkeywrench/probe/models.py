# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe result model."""

from __future__ import annotations

from dataclasses import dataclass

from ..http.models import HttpRequest
from .classifier import ResponseMetrics


@dataclass
class ProbeResult:
    """One accepted response for a (URL, bypass header) pair."""

    url: str
    method: str
    header_name: str
    header_value: str
    metrics: ResponseMetrics
    body: str
    request: HttpRequest

    @property
    def status(self) -> int:
        return self.metrics.status

    @property
    def size(self) -> int:
        return self.metrics.size


__all__ = ["ProbeResult"]
