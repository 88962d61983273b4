"""
Ring buffer of the last N requests, served on ``/_history``.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RequestRecord:
    """A request as seen by the mock."""

    method: str
    uri: str
    body: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RequestHistory:
    """
    Fixed-capacity circular buffer.

    When full, the oldest record is overwritten. A capacity of zero turns
    recording into a no-op.
    """

    def __init__(self, capacity: int = 0) -> None:
        if capacity < 0:
            raise ValueError("history capacity cannot be negative")
        self._capacity = capacity
        self._slots: List[Optional[RequestRecord]] = [None] * capacity
        self._cursor = 0
        self._count = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return self._count

    def record(self, method: str, uri: str, body: str = "") -> None:
        if self._capacity == 0:
            return
        entry = RequestRecord(method=method, uri=uri, body=body)
        with self._lock:
            self._slots[self._cursor] = entry
            self._cursor = (self._cursor + 1) % self._capacity
            if self._count < self._capacity:
                self._count += 1

    def snapshot(self) -> List[RequestRecord]:
        """Copy of the stored records, oldest first."""
        with self._lock:
            if self._count < self._capacity:
                slots = self._slots[: self._count]
            else:
                slots = self._slots[self._cursor :] + self._slots[: self._cursor]
        return [entry for entry in slots if entry is not None]
