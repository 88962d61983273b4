"""Tests for the metrics registry and periodic printer."""

import asyncio
import io
import json
import threading

import pytest

from mockes.metrics import COUNTER_NAMES, MetricsRegistry, outcome_class
from mockes.server.printer import MetricsPrinter


def test_declared_counters_start_at_zero() -> None:
    registry = MetricsRegistry()

    snapshot = registry.snapshot()

    assert set(COUNTER_NAMES) <= set(snapshot)
    assert all(value == 0 for value in snapshot.values())


def test_increment_by_attributes() -> None:
    registry = MetricsRegistry()

    registry.increment("bulk.total", user_agent="a", path="/_bulk")
    registry.increment("bulk.total", user_agent="a", path="/_bulk")
    registry.increment("bulk.total", user_agent="b", path="/_bulk")

    assert registry.get("bulk.total") == 3
    assert registry.get("bulk.total", user_agent="a") == 2
    assert registry.get("bulk.total", user_agent="b", path="/") == 0
    labels = sorted(p.labels()["user_agent"] for p in registry.series() if p.name == "bulk.total")
    assert labels == ["a", "b"]


def test_unknown_counters_are_created() -> None:
    registry = MetricsRegistry()

    registry.increment("bulk.update.status_503", path="/_bulk")

    assert registry.snapshot()["bulk.update.status_503"] == 1


def test_counters_cannot_decrease() -> None:
    with pytest.raises(ValueError):
        MetricsRegistry().increment("root.total", amount=-1)


def test_concurrent_increments_are_not_lost() -> None:
    registry = MetricsRegistry()

    def worker() -> None:
        for _ in range(2000):
            registry.increment("bulk.create.ok", user_agent="ua", path="/_bulk")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert registry.get("bulk.create.ok") == 16000


def test_outcome_class() -> None:
    assert outcome_class(200) == "ok"
    assert outcome_class(409) == "duplicate"
    assert outcome_class(429) == "too_many"
    assert outcome_class(406) == "non_index"
    assert outcome_class(500) == "status_500"


def test_print_snapshot_skips_zero_counters() -> None:
    registry = MetricsRegistry()
    out = io.StringIO()

    assert registry.print_snapshot(out) is False
    registry.increment("root.total", user_agent="x", path="/")
    registry.increment("root.total", user_agent="y", path="/")
    assert registry.print_snapshot(out) is True

    assert json.loads(out.getvalue()) == {"root.total": {"count": 2}}


def test_prometheus_format() -> None:
    registry = MetricsRegistry()
    registry.increment("bulk.create.ok", user_agent='quote"ua', path="/_bulk")

    text = registry.prometheus_format()

    assert "# TYPE mockes_bulk_create_ok_total counter" in text
    assert 'mockes_bulk_create_ok_total{user_agent="quote\\"ua",path="/_bulk"} 1' in text
    assert "mockes_bulk_create_total_total" not in text


@pytest.mark.asyncio
async def test_metrics_printer_writes_periodically() -> None:
    registry = MetricsRegistry()
    registry.increment("license.total", path="/_license")
    out = io.StringIO()
    printer = MetricsPrinter(registry, interval=0.01, stream=out)

    await printer.start()
    await asyncio.sleep(0.05)
    await printer.stop()

    lines = [json.loads(line) for line in out.getvalue().splitlines()]
    assert lines
    assert lines[0] == {"license.total": {"count": 1}}
    assert not printer.running


@pytest.mark.asyncio
async def test_metrics_printer_disabled_with_zero_interval() -> None:
    printer = MetricsPrinter(MetricsRegistry(), interval=0)

    await printer.start()

    assert not printer.running
    await printer.stop()
