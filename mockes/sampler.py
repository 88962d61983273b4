"""
Outcome sampling and decision strategies.

A handler picks one strategy at construction time:
- ProbabilisticDecider: draws from the odds tables, only ``create`` actions
  get a per-action status.
- CallbackDecider: an embedder-supplied function decides the status of every
  action, whatever its verb.

Both sample the request table to decide whether a bulk request is rejected
as too large.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from mockes.odds import TABLE_SIZE, OddsSnapshot, OutcomeTable
from mockes.protocol import Action

DecisionFunction = Callable[[Action, Optional[bytes]], int]


def sample(table: OutcomeTable, rng: Optional[random.Random] = None) -> int:
    """Return the status in a uniformly chosen slot of ``table``."""
    randrange = rng.randrange if rng is not None else random.randrange
    return table[randrange(TABLE_SIZE)]


class OutcomeDecider(Protocol):
    """Protocol for per-request and per-action outcome strategies."""

    deterministic: bool

    def request_status(self, odds: OddsSnapshot) -> int:
        """Status for the bulk request as a whole (200 or 413)."""
        ...

    def action_status(self, action: Action, odds: OddsSnapshot) -> Optional[int]:
        """
        Status for one action.

        Returns:
            A status code, or None when the action produces no item.
        """
        ...


@dataclass
class ProbabilisticDecider:
    """
    Random draws against the odds tables.

    Example:
        decider = ProbabilisticDecider(rng=random.Random(7))
    """

    rng: Optional[random.Random] = None
    deterministic: bool = field(default=False, init=False)

    def request_status(self, odds: OddsSnapshot) -> int:
        return sample(odds.request_table, self.rng)

    def action_status(self, action: Action, odds: OddsSnapshot) -> Optional[int]:
        if action.verb != "create":
            return None
        return sample(odds.action_table, self.rng)


@dataclass
class CallbackDecider:
    """
    Outcomes chosen by a caller-supplied function.

    The function receives the action and its raw document (None for delete)
    and returns the status for that action.

    Example:
        def decide(action, document):
            return 409 if action.verb == "create" else 200

        decider = CallbackDecider(decide)
    """

    decide: DecisionFunction
    rng: Optional[random.Random] = None
    deterministic: bool = field(default=True, init=False)

    def request_status(self, odds: OddsSnapshot) -> int:
        return sample(odds.request_table, self.rng)

    def action_status(self, action: Action, odds: OddsSnapshot) -> Optional[int]:
        return int(self.decide(action, action.document))
