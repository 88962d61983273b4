from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from mockes.exceptions import ConfigError
from mockes.server.config import Settings, get_settings

logger = logging.getLogger("mockes")


def _parse_args(argv: Optional[List[str]], defaults: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Mock Elasticsearch ingestion endpoint with error injection."
    )
    parser.add_argument(
        "--addr", default=defaults.addr, help="Address to listen on, ip:port."
    )
    parser.add_argument(
        "--dup",
        type=int,
        default=defaults.percent_duplicate,
        help="Percent chance 409 Conflict is returned for a create action.",
    )
    parser.add_argument(
        "--toomany",
        type=int,
        default=defaults.percent_too_many,
        help="Percent chance 429 Too Many Requests is returned for a create action.",
    )
    parser.add_argument(
        "--nonindex",
        type=int,
        default=defaults.percent_non_index,
        help="Percent chance 406 Not Acceptable is returned for a create action.",
    )
    parser.add_argument(
        "--toolarge",
        type=int,
        default=defaults.percent_too_large,
        help="Percent chance 413 Entity Too Large is returned for a _bulk request.",
    )
    parser.add_argument(
        "--history",
        type=int,
        default=defaults.history_capacity,
        help="Number of requests to keep, served on /_history.",
    )
    parser.add_argument(
        "--clusteruuid",
        default=defaults.cluster_uuid,
        help="Cluster UUID of the Elasticsearch being mocked.",
    )
    parser.add_argument(
        "--metrics",
        type=float,
        default=defaults.metrics_interval,
        help="Seconds between metrics printed to stdout, 0 is no metrics.",
    )
    parser.add_argument(
        "--certfile", default=defaults.certfile, help="PEM certificate file, enables TLS."
    )
    parser.add_argument(
        "--keyfile", default=defaults.keyfile, help="PEM private key file, enables TLS."
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=defaults.delay,
        help="Seconds to wait before processing each request, 0 is no delay.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=defaults.verbose,
        help="Log every request with its decoded body.",
    )
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment settings with command line values applied on top."""
    settings = Settings()
    settings.addr = args.addr
    settings.percent_duplicate = args.dup
    settings.percent_too_many = args.toomany
    settings.percent_non_index = args.nonindex
    settings.percent_too_large = args.toolarge
    settings.history_capacity = args.history
    settings.cluster_uuid = args.clusteruuid
    settings.metrics_interval = args.metrics
    settings.certfile = args.certfile or None
    settings.keyfile = args.keyfile or None
    settings.delay = args.delay
    settings.verbose = args.verbose
    settings.validate()
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        args = _parse_args(argv, get_settings())
        settings = settings_from_args(args)
    except ConfigError as e:
        logger.error("invalid configuration: %s", e.message)
        return 2

    if settings.verbose:
        logging.getLogger().setLevel(logging.INFO)

    import uvicorn
    from mockes.server import create_app

    app = create_app(settings=settings)
    scheme = "HTTPS" if settings.tls_enabled else "HTTP"
    logger.info("Starting %s server on %s", scheme, settings.addr)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        ssl_certfile=settings.certfile,
        ssl_keyfile=settings.keyfile,
        log_level="info" if settings.verbose else "warning",
        access_log=settings.verbose,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
