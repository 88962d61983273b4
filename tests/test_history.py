"""Tests for the request history ring."""

import threading

import pytest

from mockes.history import RequestHistory, RequestRecord


def test_capacity_two_keeps_last_two() -> None:
    history = RequestHistory(2)

    history.record("GET", "/", "")
    history.record("POST", "/_bulk", "one")
    history.record("POST", "/_bulk", "two")

    assert history.snapshot() == [
        RequestRecord("POST", "/_bulk", "one"),
        RequestRecord("POST", "/_bulk", "two"),
    ]
    assert len(history) == 2


def test_partial_ring_is_oldest_first() -> None:
    history = RequestHistory(5)

    history.record("GET", "/a")
    history.record("GET", "/b")

    assert [r.uri for r in history.snapshot()] == ["/a", "/b"]


def test_wraparound_many_times() -> None:
    history = RequestHistory(3)

    for i in range(10):
        history.record("GET", f"/{i}")

    assert [r.uri for r in history.snapshot()] == ["/7", "/8", "/9"]


def test_zero_capacity_records_nothing() -> None:
    history = RequestHistory(0)

    history.record("GET", "/")

    assert history.snapshot() == []
    assert len(history) == 0


def test_negative_capacity_rejected() -> None:
    with pytest.raises(ValueError):
        RequestHistory(-1)


def test_snapshot_is_a_copy() -> None:
    history = RequestHistory(2)
    history.record("GET", "/")

    snap = history.snapshot()
    snap.clear()

    assert len(history.snapshot()) == 1


def test_record_to_dict() -> None:
    assert RequestRecord("GET", "/_license").to_dict() == {
        "method": "GET",
        "uri": "/_license",
        "body": "",
    }


def test_concurrent_records_fill_ring() -> None:
    history = RequestHistory(50)

    def worker(n: int) -> None:
        for i in range(100):
            history.record("POST", f"/{n}/{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    records = history.snapshot()
    assert len(records) == 50
    assert len({r.uri for r in records}) == 50
