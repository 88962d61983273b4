"""
Request handling for the mock cluster.

MockHandler owns everything a request touches: odds, outcome strategy,
counters, history and the User-Agent tracker. The HTTP layer only extracts
headers and the body, calls one of the methods below and writes the result.

Bulk processing:
1. Draw the request-level status. 413 ends the request with an empty body
   and no action counters.
2. For each action, ask the decider for a status. Probabilistic mode only
   answers for ``create``; deterministic mode answers for every verb.
3. Every action bumps ``bulk.<verb>.total``; actions with a status also
   bump ``bulk.<verb>.<outcome>`` and add an item to the response.
4. ``errors`` is true when any item status is outside 2xx.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mockes.exceptions import MalformedActionError, UpstreamDecodeError
from mockes.history import RequestHistory, RequestRecord
from mockes.metrics import MetricsRegistry, outcome_class
from mockes.odds import (
    STATUS_CONFLICT,
    STATUS_NOT_ACCEPTABLE,
    STATUS_TOO_LARGE,
    STATUS_TOO_MANY_REQUESTS,
    OddsConfiguration,
    OddsSnapshot,
)
from mockes.protocol import Action, BulkStream
from mockes.sampler import CallbackDecider, DecisionFunction, OutcomeDecider, ProbabilisticDecider
from mockes.tracker import UserAgentTracker
from mockes.useragent import parse_user_agent

logger = logging.getLogger(__name__)

LICENSE_TTL_SECONDS = 24 * 60 * 60

ROOT_PATH = "/"
BULK_PATH = "/_bulk"
LICENSE_PATH = "/_license"

_ERROR_DESCRIPTIONS: Dict[int, Dict[str, str]] = {
    STATUS_CONFLICT: {
        "type": "version_conflict_engine_exception",
        "reason": "version conflict, document already exists",
    },
    STATUS_TOO_MANY_REQUESTS: {
        "type": "es_rejected_execution_exception",
        "reason": "rejected execution of coordinating operation",
    },
    STATUS_NOT_ACCEPTABLE: {
        "type": "document_parsing_exception",
        "reason": "failed to parse document",
    },
}


def is_failure(status: int) -> bool:
    return not 200 <= status < 300


def error_description(status: int, action: Action) -> Dict[str, Any]:
    """ES-shaped ``error`` object for a failed item."""
    error = dict(
        _ERROR_DESCRIPTIONS.get(
            status,
            {"type": "mock_exception", "reason": f"simulated status {status}"},
        )
    )
    if action.doc_id:
        error["reason"] = f"[{action.doc_id}]: {error['reason']}"
    if action.index:
        error["index"] = action.index
    return error


@dataclass
class BulkResult:
    """
    Outcome of one bulk request.

    Attributes:
        status_code: Transport status, 200 or 413.
        errors: True if any item failed.
        items: One entry per action that produced a status, in input order.
    """

    status_code: int = 200
    errors: bool = False
    items: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def rejected(self) -> bool:
        return self.status_code == STATUS_TOO_LARGE

    def body(self) -> Optional[Dict[str, Any]]:
        if self.rejected:
            return None
        response: Dict[str, Any] = {"errors": self.errors}
        if self.items:
            response["items"] = self.items
        return response


class MockHandler:
    """
    Shared state and operations behind every endpoint.

    Pass ``decide`` to run in deterministic mode; the mode cannot be switched
    afterwards. Odds can be reconfigured at any time with ``configure()``.

    Example:
        handler = MockHandler(cluster_uuid="abc", percent_duplicate=10)
        result = handler.bulk(body, user_agent="Filebeat/8.12.0")
    """

    def __init__(
        self,
        *,
        cluster_uuid: str = "",
        license_uid: Optional[str] = None,
        expire: Optional[float] = None,
        delay: float = 0.0,
        percent_duplicate: int = 0,
        percent_too_many: int = 0,
        percent_non_index: int = 0,
        percent_too_large: int = 0,
        history_capacity: int = 0,
        decide: Optional[DecisionFunction] = None,
        decider: Optional[OutcomeDecider] = None,
        metrics: Optional[MetricsRegistry] = None,
    ) -> None:
        if decide is not None and decider is not None:
            raise ValueError("pass either decide or decider, not both")
        self.cluster_uuid = cluster_uuid
        self.license_uid = license_uid or str(uuid.uuid4())
        self.expire = expire if expire is not None else time.time() + LICENSE_TTL_SECONDS
        self.delay = delay
        self.odds = OddsConfiguration(
            percent_duplicate=percent_duplicate,
            percent_too_many=percent_too_many,
            percent_non_index=percent_non_index,
            percent_too_large=percent_too_large,
        )
        if decider is None:
            decider = CallbackDecider(decide) if decide is not None else ProbabilisticDecider()
        self._decider = decider
        self.metrics = metrics or MetricsRegistry()
        self.history = RequestHistory(history_capacity)
        self.user_agents = UserAgentTracker()

    @property
    def deterministic(self) -> bool:
        return self._decider.deterministic

    def configure(
        self,
        percent_duplicate: int = 0,
        percent_too_many: int = 0,
        percent_non_index: int = 0,
        percent_too_large: int = 0,
    ) -> OddsSnapshot:
        """Replace the odds. Raises ConfigError and keeps the old odds on bad input."""
        snapshot = self.odds.configure(
            percent_duplicate=percent_duplicate,
            percent_too_many=percent_too_many,
            percent_non_index=percent_non_index,
            percent_too_large=percent_too_large,
        )
        logger.info("odds reconfigured: %s", self.odds.percentages())
        return snapshot

    def root(self, user_agent: Optional[str] = None, uri: str = ROOT_PATH) -> Dict[str, Any]:
        self.history.record("GET", uri)
        self.metrics.increment("root.total", user_agent, ROOT_PATH)
        self.user_agents.root_seen(user_agent or "")
        return {
            "name": "mock",
            "cluster_uuid": self.cluster_uuid,
            "version": {
                "number": parse_user_agent(user_agent).version,
                "build_flavor": "default",
            },
        }

    def license(self, user_agent: Optional[str] = None, uri: str = LICENSE_PATH) -> Dict[str, Any]:
        self.history.record("GET", uri)
        self.metrics.increment("license.total", user_agent, LICENSE_PATH)
        self.user_agents.license_seen(user_agent or "")
        return {
            "license": {
                "status": "active",
                "uid": self.license_uid,
                "type": "trial",
                "expiry_date_in_millis": int(self.expire * 1000),
            }
        }

    def request_history(self) -> List[RequestRecord]:
        return self.history.snapshot()

    def bulk(
        self,
        body: bytes,
        content_encoding: Optional[str] = None,
        user_agent: Optional[str] = None,
        uri: str = BULK_PATH,
    ) -> BulkResult:
        """
        Process a bulk body and build the aggregate response.

        Raises:
            MalformedActionError: An action line could not be parsed. Counters
                for earlier actions stay incremented.
            UpstreamDecodeError: A gzip body could not be decompressed.
        """
        odds = self.odds.snapshot()
        self.metrics.increment("bulk.total", user_agent, BULK_PATH)
        self.user_agents.bulk_seen(user_agent or "")

        if self._decider.request_status(odds) == STATUS_TOO_LARGE:
            self.metrics.increment("bulk.too_large", user_agent, BULK_PATH)
            self.history.record("POST", uri)
            return BulkResult(status_code=STATUS_TOO_LARGE)

        result = BulkResult()
        with BulkStream(body, content_encoding) as stream:
            try:
                for action in stream:
                    self._apply(action, odds, result, user_agent)
            except (MalformedActionError, UpstreamDecodeError):
                self.history.record("POST", uri, stream.consumed_text)
                raise
            self.history.record("POST", uri, stream.consumed_text)
        return result

    def _apply(
        self,
        action: Action,
        odds: OddsSnapshot,
        result: BulkResult,
        user_agent: Optional[str],
    ) -> None:
        self.metrics.increment(f"bulk.{action.verb}.total", user_agent, BULK_PATH)
        status = self._decider.action_status(action, odds)
        if status is None:
            return
        self.metrics.increment(
            f"bulk.{action.verb}.{outcome_class(status)}", user_agent, BULK_PATH
        )

        item: Dict[str, Any] = {}
        if action.index is not None:
            item["_index"] = action.index
        if action.doc_id is not None:
            item["_id"] = action.doc_id
        item["status"] = status
        if is_failure(status):
            result.errors = True
            item["error"] = error_description(status, action)
        result.items.append({action.verb: item})
