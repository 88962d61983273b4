"""
mockes - An Elasticsearch ingestion endpoint that fails on purpose.

Run from the command line:
    python -m mockes --dup 10 --toomany 5 --history 100

Embed with deterministic outcomes:
    from mockes import MockHandler
    from mockes.server import create_app

    def decide(action, document):
        return 409 if action.verb == "create" else 200

    app = create_app(handler=MockHandler(decide=decide))

Advanced usage via submodules:
    from mockes.odds import OddsConfiguration
    from mockes.protocol import iter_actions
    from mockes.metrics import MetricsRegistry
"""

# =============================================================================
# Core API
# =============================================================================
from mockes.handler import BulkResult, MockHandler  # noqa: F401
from mockes.protocol import Action, iter_actions  # noqa: F401
from mockes.odds import OddsConfiguration  # noqa: F401
from mockes.sampler import CallbackDecider, ProbabilisticDecider, sample  # noqa: F401

# =============================================================================
# Errors
# =============================================================================
from mockes.exceptions import (  # noqa: F401
    ConfigError,
    MalformedActionError,
    MockESError,
    UpstreamDecodeError,
)

__all__ = [
    "Action",
    "BulkResult",
    "CallbackDecider",
    "ConfigError",
    "MalformedActionError",
    "MockESError",
    "MockHandler",
    "OddsConfiguration",
    "ProbabilisticDecider",
    "UpstreamDecodeError",
    "iter_actions",
    "sample",
]
