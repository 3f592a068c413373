"""Counters and response-time histograms for the actions server."""

from __future__ import annotations

import bisect
import time
from collections import Counter
from dataclasses import dataclass, field
from http import HTTPStatus

RESPONSE_TIME_NAME = "bdjuno_action_response_time"
RESPONSE_TIME_HELP = "Time it has taken to execute an action"
COUNTER_NAME = "bdjuno_actions_total_count"
COUNTER_HELP = "Total number of actions executed."
ERROR_COUNTER_NAME = "bdjuno_actions_error_count"
ERROR_COUNTER_HELP = "Total number of errors emitted."
DEFAULT_BUCKETS = (0.5, 1.0, 2.0, 3.0, 4.0, 5.0)


@dataclass
class Histogram:
    """A cumulative histogram: each bucket counts the observations not above its bound."""

    buckets: tuple[float, ...] = DEFAULT_BUCKETS
    counts: list[int] = field(init=False)
    count: int = field(default=0, init=False)
    total: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self.buckets = tuple(sorted(float(bound) for bound in self.buckets))
        self.counts = [0] * len(self.buckets)

    def observe(self, value: float) -> None:
        """Record one observation."""
        first = bisect.bisect_left(self.buckets, value)
        for index in range(first, len(self.buckets)):
            self.counts[index] += 1
        self.count += 1
        self.total += value


@dataclass
class ActionMetrics:
    """Totals of executed actions, errors and response times, by path."""

    requests: Counter = field(default_factory=Counter)
    errors: Counter = field(default_factory=Counter)
    response_times: dict[str, Histogram] = field(default_factory=dict)

    def success(self, path: str) -> None:
        """Count a successful execution of the action at path."""
        self.requests[(path, str(HTTPStatus.OK.value))] += 1

    def error(self, path: str) -> None:
        """Count a failed execution of the action at path."""
        self.errors[(path, str(HTTPStatus.INTERNAL_SERVER_ERROR.value))] += 1

    def observe_response_time(self, path: str, start: float) -> float:
        """Record the time since ``start`` (a ``time.monotonic`` value) and return it."""
        elapsed = time.monotonic() - start
        self.response_times.setdefault(path, Histogram()).observe(elapsed)
        return elapsed


ACTION_METRICS = ActionMetrics()