"""
Odds tables for error injection.

Each table is a 100-slot tuple of HTTP status codes, one slot per percentage
point. Sampling a uniform slot therefore yields each status with exactly its
configured percentage.

Two tables are kept:
- action table: outcome of a bulk ``create`` action
  (409 duplicate, 429 too many requests, 406 non-index, else 200)
- request table: outcome of a whole bulk request (413 too large, else 200)

Tables are never mutated in place. ``configure()`` builds a fresh pair and
swaps it in, so a reader holding a snapshot always sees a complete table.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Tuple

from mockes.exceptions import ConfigError

TABLE_SIZE = 100

STATUS_OK = 200
STATUS_NOT_ACCEPTABLE = 406
STATUS_CONFLICT = 409
STATUS_TOO_LARGE = 413
STATUS_TOO_MANY_REQUESTS = 429

OutcomeTable = Tuple[int, ...]


def build_table(*weights: Tuple[int, int]) -> OutcomeTable:
    """
    Build a 100-slot table from ``(status, percent)`` pairs.

    Slots are filled in the order given; remaining slots hold 200.

    Raises:
        ConfigError: If the percentages are negative or sum above 100.
    """
    slots = []
    for status, percent in weights:
        if percent < 0:
            raise ConfigError(
                f"percentage for status {status} cannot be negative",
                details={"status": status, "percent": percent},
            )
        slots.extend([status] * percent)
    if len(slots) > TABLE_SIZE:
        raise ConfigError(
            f"total of percents can't be greater than {TABLE_SIZE}",
            details={"total": len(slots)},
        )
    slots.extend([STATUS_OK] * (TABLE_SIZE - len(slots)))
    return tuple(slots)


@dataclass(frozen=True)
class OddsSnapshot:
    """Consistent pair of tables taken by one bulk request."""

    action_table: OutcomeTable
    request_table: OutcomeTable


class OddsConfiguration:
    """
    Holder for the action and request odds tables.

    Readers call ``snapshot()`` once per request and sample from the returned
    object for the whole request. Writers go through ``configure()``, which
    validates first and swaps both tables in one assignment under the write
    lock, so a failed call leaves the previous configuration untouched.

    Example:
        odds = OddsConfiguration(percent_duplicate=10)
        odds.configure(percent_too_many=50)
        status = sample(odds.snapshot().action_table)
    """

    def __init__(
        self,
        percent_duplicate: int = 0,
        percent_too_many: int = 0,
        percent_non_index: int = 0,
        percent_too_large: int = 0,
    ) -> None:
        self._write_lock = threading.Lock()
        self._percentages: Dict[str, int] = {}
        self._snapshot: OddsSnapshot
        self.configure(
            percent_duplicate=percent_duplicate,
            percent_too_many=percent_too_many,
            percent_non_index=percent_non_index,
            percent_too_large=percent_too_large,
        )

    def configure(
        self,
        percent_duplicate: int = 0,
        percent_too_many: int = 0,
        percent_non_index: int = 0,
        percent_too_large: int = 0,
    ) -> OddsSnapshot:
        """
        Rebuild both tables from percentages.

        Returns:
            The snapshot now in effect.

        Raises:
            ConfigError: If ``dup + too_many + non_index > 100`` or
                ``too_large > 100``.
        """
        action_total = percent_duplicate + percent_too_many + percent_non_index
        if action_total > TABLE_SIZE:
            raise ConfigError(
                "total of create action percentages must not be more than "
                f"{TABLE_SIZE} (d: {percent_duplicate}, t: {percent_too_many}, "
                f"n: {percent_non_index})",
                details={
                    "percent_duplicate": percent_duplicate,
                    "percent_too_many": percent_too_many,
                    "percent_non_index": percent_non_index,
                },
            )
        if percent_too_large > TABLE_SIZE:
            raise ConfigError(
                f"percent too large cannot be greater than {TABLE_SIZE}",
                details={"percent_too_large": percent_too_large},
            )

        action_table = build_table(
            (STATUS_CONFLICT, percent_duplicate),
            (STATUS_TOO_MANY_REQUESTS, percent_too_many),
            (STATUS_NOT_ACCEPTABLE, percent_non_index),
        )
        request_table = build_table((STATUS_TOO_LARGE, percent_too_large))
        snapshot = OddsSnapshot(action_table=action_table, request_table=request_table)

        with self._write_lock:
            self._snapshot = snapshot
            self._percentages = {
                "percent_duplicate": percent_duplicate,
                "percent_too_many": percent_too_many,
                "percent_non_index": percent_non_index,
                "percent_too_large": percent_too_large,
            }
        return snapshot

    def snapshot(self) -> OddsSnapshot:
        """Current tables. Safe to call concurrently with ``configure()``."""
        return self._snapshot

    def percentages(self) -> Dict[str, int]:
        """Knob values that produced the current tables."""
        with self._write_lock:
            return dict(self._percentages)
