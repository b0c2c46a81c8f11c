# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Response metrics and filter/match classification."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import RuleSet


def word_count(text: str) -> int:
    return len(text.split())


def line_count(text: str) -> int:
    # Segments between "\n", so "" is one line and "a\n" is two.
    return len(text.split("\n"))


@dataclass(frozen=True)
class ResponseMetrics:
    status: int
    size: int
    words: int
    lines: int

    @classmethod
    def from_body(cls, status: int, content: bytes, text: str) -> ResponseMetrics:
        return cls(status=status, size=len(content), words=word_count(text), lines=line_count(text))


def classify(metrics: ResponseMetrics, rules: RuleSet) -> bool:
    """
    Return True when a response should be reported.

    Filters run first: a non-empty filter set containing the metric rejects.
    Matches run second: a non-empty match set missing the metric rejects.
    Every metric is checked on its own; one rejection is final.
    """
    filters = (
        (rules.filter_size, metrics.size),
        (rules.filter_words, metrics.words),
        (rules.filter_status, metrics.status),
        (rules.filter_lines, metrics.lines),
    )
    for values, metric in filters:
        if values and metric in values:
            return False

    matches = (
        (rules.match_size, metrics.size),
        (rules.match_words, metrics.words),
        (rules.match_status, metrics.status),
        (rules.match_lines, metrics.lines),
    )
    for values, metric in matches:
        if values and metric not in values:
            return False

    return True


__all__ = ["ResponseMetrics", "classify", "line_count", "word_count"]
