"""Tests for odds tables and outcome sampling."""

import random
import threading
from collections import Counter

import pytest

from mockes.exceptions import ConfigError
from mockes.odds import (
    STATUS_CONFLICT,
    STATUS_NOT_ACCEPTABLE,
    STATUS_OK,
    STATUS_TOO_LARGE,
    STATUS_TOO_MANY_REQUESTS,
    TABLE_SIZE,
    OddsConfiguration,
    build_table,
)
from mockes.sampler import sample


def test_default_tables_are_all_success() -> None:
    snap = OddsConfiguration().snapshot()

    assert snap.action_table == (STATUS_OK,) * TABLE_SIZE
    assert snap.request_table == (STATUS_OK,) * TABLE_SIZE


def test_action_table_layout() -> None:
    snap = OddsConfiguration(
        percent_duplicate=10, percent_too_many=20, percent_non_index=30
    ).snapshot()
    table = snap.action_table

    assert len(table) == TABLE_SIZE
    assert set(table[:10]) == {STATUS_CONFLICT}
    assert set(table[10:30]) == {STATUS_TOO_MANY_REQUESTS}
    assert set(table[30:60]) == {STATUS_NOT_ACCEPTABLE}
    assert set(table[60:]) == {STATUS_OK}


def test_request_table_layout() -> None:
    table = OddsConfiguration(percent_too_large=25).snapshot().request_table

    assert Counter(table) == {STATUS_TOO_LARGE: 25, STATUS_OK: 75}
    assert table[:25] == (STATUS_TOO_LARGE,) * 25


def test_full_table_has_no_success_slots() -> None:
    table = OddsConfiguration(
        percent_duplicate=50, percent_too_many=25, percent_non_index=25
    ).snapshot().action_table

    assert STATUS_OK not in table


@pytest.mark.parametrize(
    "kwargs",
    [
        {"percent_duplicate": 50, "percent_too_many": 40, "percent_non_index": 11},
        {"percent_duplicate": 101},
        {"percent_too_large": 101},
        {"percent_duplicate": -1},
    ],
)
def test_invalid_percentages_raise(kwargs) -> None:
    with pytest.raises(ConfigError):
        OddsConfiguration(**kwargs)


def test_failed_configure_keeps_previous_tables() -> None:
    odds = OddsConfiguration(percent_duplicate=5, percent_too_large=7)
    before = odds.snapshot()
    knobs = odds.percentages()

    with pytest.raises(ConfigError):
        odds.configure(percent_duplicate=60, percent_too_many=30, percent_non_index=20)
    with pytest.raises(ConfigError):
        odds.configure(percent_too_large=200)

    assert odds.snapshot() is before
    assert odds.percentages() == knobs


def test_configure_replaces_both_tables() -> None:
    odds = OddsConfiguration(percent_duplicate=100)
    old = odds.snapshot()

    new = odds.configure(percent_too_many=100, percent_too_large=100)

    assert odds.snapshot() is new
    assert set(new.action_table) == {STATUS_TOO_MANY_REQUESTS}
    assert set(new.request_table) == {STATUS_TOO_LARGE}
    # Snapshots already handed out are not touched.
    assert set(old.action_table) == {STATUS_CONFLICT}


def test_build_table_rejects_overflow() -> None:
    with pytest.raises(ConfigError):
        build_table((STATUS_CONFLICT, 60), (STATUS_TOO_LARGE, 41))


def test_sample_frequencies_converge() -> None:
    odds = OddsConfiguration(
        percent_duplicate=10, percent_too_many=20, percent_non_index=30, percent_too_large=15
    )
    snap = odds.snapshot()
    rng = random.Random(1234)
    trials = 100_000

    actions = Counter(sample(snap.action_table, rng) for _ in range(trials))
    requests = Counter(sample(snap.request_table, rng) for _ in range(trials))

    def freq(counts: Counter, status: int) -> float:
        return counts[status] / trials

    assert freq(actions, STATUS_CONFLICT) == pytest.approx(0.10, abs=0.01)
    assert freq(actions, STATUS_TOO_MANY_REQUESTS) == pytest.approx(0.20, abs=0.01)
    assert freq(actions, STATUS_NOT_ACCEPTABLE) == pytest.approx(0.30, abs=0.01)
    assert freq(actions, STATUS_OK) == pytest.approx(0.40, abs=0.01)
    assert freq(requests, STATUS_TOO_LARGE) == pytest.approx(0.15, abs=0.01)


def test_readers_never_see_partial_tables() -> None:
    odds = OddsConfiguration(percent_duplicate=100)
    stop = threading.Event()
    bad: list = []

    def reader() -> None:
        while not stop.is_set():
            table = odds.snapshot().action_table
            if len(set(table)) != 1:
                bad.append(table)

    def writer() -> None:
        for i in range(500):
            if i % 2:
                odds.configure(percent_duplicate=100)
            else:
                odds.configure(percent_too_many=100)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()
    writer()
    stop.set()
    for t in readers:
        t.join()

    assert bad == []
