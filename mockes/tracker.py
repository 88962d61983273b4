"""
User-Agent tracker.

Counts how often each User-Agent string was seen on the root, license and
bulk endpoints, so tests can check which clients talked to the mock.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict

ENDPOINTS = ("root", "license", "bulk")


@dataclass
class UserAgentMaps:
    """Seen counts per endpoint, ``{user_agent: count}``."""

    root: Dict[str, int] = field(default_factory=dict)
    license: Dict[str, int] = field(default_factory=dict)
    bulk: Dict[str, int] = field(default_factory=dict)


class UserAgentTracker:
    def __init__(self) -> None:
        self._seen: Dict[str, Counter] = {name: Counter() for name in ENDPOINTS}
        self._lock = threading.Lock()

    def seen(self, endpoint: str, agent: str) -> None:
        if endpoint not in self._seen:
            raise KeyError(f"untracked endpoint: {endpoint}")
        with self._lock:
            self._seen[endpoint][agent] += 1

    def root_seen(self, agent: str) -> None:
        self.seen("root", agent)

    def license_seen(self, agent: str) -> None:
        self.seen("license", agent)

    def bulk_seen(self, agent: str) -> None:
        self.seen("bulk", agent)

    def get(self) -> UserAgentMaps:
        """Copy of the current counts."""
        with self._lock:
            return UserAgentMaps(
                root=dict(self._seen["root"]),
                license=dict(self._seen["license"]),
                bulk=dict(self._seen["bulk"]),
            )
