"""
Server configuration from environment variables.

Usage:
    from mockes.server.config import get_settings

    settings = get_settings()
    print(settings.host, settings.port)

Command line flags (see ``mockes.cli``) take these values as defaults.
"""

from functools import lru_cache
from typing import Optional, Tuple
import os

from mockes.exceptions import ConfigError


def _env_truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_number(name: str, default: str, kind=int):
    raw = os.getenv(name, default)
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def split_addr(addr: str) -> Tuple[str, int]:
    """Split ``ip:port`` (``:9200`` listens on all interfaces)."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigError(f"invalid listen address {addr!r}, expected ip:port")
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)


class Settings:
    """Server configuration loaded from environment variables."""

    def __init__(self) -> None:
        # Listener
        self.addr: str = os.getenv("MOCKES_ADDR", ":9200")
        self.certfile: Optional[str] = os.getenv("MOCKES_CERTFILE") or None
        self.keyfile: Optional[str] = os.getenv("MOCKES_KEYFILE") or None

        # Cluster identity
        self.cluster_uuid: str = os.getenv("MOCKES_CLUSTER_UUID", "")

        # Error injection, all in percent
        self.percent_duplicate: int = _env_number("MOCKES_DUP", "0")
        self.percent_too_many: int = _env_number("MOCKES_TOOMANY", "0")
        self.percent_non_index: int = _env_number("MOCKES_NONINDEX", "0")
        self.percent_too_large: int = _env_number("MOCKES_TOOLARGE", "0")

        # Request history kept for /_history
        self.history_capacity: int = _env_number("MOCKES_HISTORY", "0")

        # Seconds between metrics printed to stdout, 0 disables
        self.metrics_interval: float = _env_number("MOCKES_METRICS", "0", float)

        # Seconds to wait before handling each request
        self.delay: float = _env_number("MOCKES_DELAY", "0", float)

        self.verbose: bool = _env_truthy(os.getenv("MOCKES_VERBOSE"))

    @property
    def tls_enabled(self) -> bool:
        return self.certfile is not None and self.keyfile is not None

    @property
    def host(self) -> str:
        return split_addr(self.addr)[0]

    @property
    def port(self) -> int:
        return split_addr(self.addr)[1]

    def validate(self) -> None:
        """
        Check knobs that would otherwise fail later.

        Raises:
            ConfigError: On bad percentages, history size or TLS pair.
        """
        action_total = self.percent_duplicate + self.percent_too_many + self.percent_non_index
        if action_total > 100:
            raise ConfigError(
                "total of create action percentages must not be more than 100 "
                f"(d: {self.percent_duplicate}, t: {self.percent_too_many}, "
                f"n: {self.percent_non_index})"
            )
        if self.percent_too_large > 100:
            raise ConfigError("percentage too large must not be more than 100")
        for name in ("percent_duplicate", "percent_too_many", "percent_non_index",
                     "percent_too_large", "history_capacity"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} cannot be negative")
        if self.metrics_interval < 0 or self.delay < 0:
            raise ConfigError("durations cannot be negative")
        if (self.certfile is None) != (self.keyfile is None):
            raise ConfigError("certfile and keyfile must be given together")
        split_addr(self.addr)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings() -> None:
    """Clear settings cache. For testing only."""
    get_settings.cache_clear()
