"""
Request counters for the mock cluster.

Provides monotonic counters without requiring a metrics library:
- one counter per (name, user agent, path)
- snapshot(): totals per counter name, summed over attributes
- series(): every labelled point
- prometheus_format(): Prometheus text exposition format
- print_snapshot(): one JSON line, the format of the periodic stdout printer

Counters only go up. Collectors diff repeated snapshots themselves.

Usage:
    registry = MetricsRegistry()
    registry.increment("bulk.create.ok", user_agent="Filebeat/8.12.0", path="/_bulk")
    registry.snapshot()["bulk.create.ok"]
"""

from __future__ import annotations

import json
import sys
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TextIO, Tuple

# Declared up front; per-outcome names for statuses returned by a decision
# callback are created on first use.
COUNTER_NAMES: Tuple[str, ...] = (
    "root.total",
    "license.total",
    "bulk.total",
    "bulk.too_large",
    "bulk.create.total",
    "bulk.create.ok",
    "bulk.create.duplicate",
    "bulk.create.too_many",
    "bulk.create.non_index",
    "bulk.index.total",
    "bulk.update.total",
    "bulk.delete.total",
)

OUTCOME_CLASSES: Dict[int, str] = {
    200: "ok",
    201: "ok",
    406: "non_index",
    409: "duplicate",
    429: "too_many",
}

Attributes = Tuple[Tuple[str, str], ...]


def outcome_class(status: int) -> str:
    """Counter suffix for an action status."""
    return OUTCOME_CLASSES.get(status, f"status_{status}")


def request_attributes(user_agent: Optional[str], path: str) -> Attributes:
    return (("user_agent", user_agent or ""), ("path", path))


@dataclass
class CounterValue:
    """Thread-safe counter."""
    value: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self.value += amount

    def get(self) -> int:
        with self._lock:
            return self.value


@dataclass(frozen=True)
class MetricPoint:
    """One labelled counter value."""

    name: str
    attributes: Attributes
    value: int

    def labels(self) -> Dict[str, str]:
        return dict(self.attributes)


class MetricsRegistry:
    """
    Registry of monotonic counters keyed by name and request attributes.

    Thread-safe for concurrent updates from request handlers running on the
    thread pool.
    """

    def __init__(self, names: Tuple[str, ...] = COUNTER_NAMES) -> None:
        self._names: List[str] = list(names)
        self._counters: Dict[str, Dict[Attributes, CounterValue]] = {
            name: defaultdict(CounterValue) for name in names
        }
        self._lock = threading.Lock()

    def _counter(self, name: str, attributes: Attributes) -> CounterValue:
        with self._lock:
            series = self._counters.get(name)
            if series is None:
                series = self._counters[name] = defaultdict(CounterValue)
                self._names.append(name)
            return series[attributes]

    def increment(
        self,
        name: str,
        user_agent: Optional[str] = None,
        path: str = "",
        amount: int = 1,
    ) -> None:
        """Add ``amount`` to the counter for this name and request."""
        if amount < 0:
            raise ValueError("counters cannot be decremented")
        self._counter(name, request_attributes(user_agent, path)).inc(amount)

    def get(self, name: str, user_agent: Optional[str] = None, path: Optional[str] = None) -> int:
        """Total for ``name``, optionally restricted to one user agent and/or path."""
        total = 0
        for point in self.series():
            if point.name != name:
                continue
            labels = point.labels()
            if user_agent is not None and labels["user_agent"] != user_agent:
                continue
            if path is not None and labels["path"] != path:
                continue
            total += point.value
        return total

    def series(self) -> List[MetricPoint]:
        """Every labelled point, in counter declaration order."""
        with self._lock:
            items = [
                (name, list(self._counters[name].items())) for name in self._names
            ]
        return [
            MetricPoint(name=name, attributes=attrs, value=counter.get())
            for name, points in items
            for attrs, counter in points
        ]

    def snapshot(self) -> Dict[str, int]:
        """Totals per counter name, summed over attributes."""
        with self._lock:
            names = list(self._names)
        totals = {name: 0 for name in names}
        for point in self.series():
            totals[point.name] += point.value
        return totals

    def print_snapshot(self, stream: Optional[TextIO] = None) -> bool:
        """
        Write non-zero totals as one JSON line: ``{"bulk.total": {"count": 3}}``.

        Returns:
            True if a line was written.
        """
        out = {name: {"count": count} for name, count in self.snapshot().items() if count}
        if not out:
            return False
        stream = stream or sys.stdout
        stream.write(json.dumps(out) + "\n")
        stream.flush()
        return True

    def prometheus_format(self) -> str:
        """
        Export counters in Prometheus text exposition format.

        ``bulk.create.ok`` becomes ``mockes_bulk_create_ok_total``.
        """
        lines = []
        by_name: Dict[str, List[MetricPoint]] = defaultdict(list)
        for point in self.series():
            by_name[point.name].append(point)

        for name, points in by_name.items():
            metric = "mockes_" + name.replace(".", "_")
            if not metric.endswith("_total"):
                metric += "_total"
            lines.append(f"# HELP {metric} Count of {name}")
            lines.append(f"# TYPE {metric} counter")
            for point in points:
                labels = ",".join(
                    f'{key}="{_escape(value)}"' for key, value in point.attributes
                )
                lines.append(f"{metric}{{{labels}}} {point.value}")
            lines.append("")
        return "\n".join(lines)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
