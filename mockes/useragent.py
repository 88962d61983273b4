"""User-Agent parsing for the version the root endpoint reports back."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_PRODUCT_RE = re.compile(r"(?P<name>[A-Za-z][\w.\-]*)/(?P<version>\d[\w.\-+]*)")
_VERSION_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?")

# Browsers all claim "Mozilla/5.0" first; the real product comes later.
# Order matters: Edge and Opera also send a Chrome token, Chrome also sends
# a Safari token. Safari puts its version in "Version/".
_BROWSERS = (
    ("Edge", re.compile(r"\bEdge?/(\d[\w.\-+]*)")),
    ("Opera", re.compile(r"\bOPR/(\d[\w.\-+]*)")),
    ("Firefox", re.compile(r"\bFirefox/(\d[\w.\-+]*)")),
    ("Chrome", re.compile(r"\bChrome/(\d[\w.\-+]*)")),
    ("Safari", re.compile(r"\bVersion/(\d[\w.\-+]*).*\bSafari/")),
)


@dataclass(frozen=True)
class ClientIdentity:
    name: str = ""
    major: int = 0
    minor: int = 0
    patch: int = 0

    @property
    def version(self) -> str:
        """``major.minor.patch``; missing parts are zero."""
        return f"{self.major}.{self.minor}.{self.patch}"


def _identity(name: str, version: str) -> ClientIdentity:
    parts = _VERSION_RE.match(version)
    if parts is None:
        return ClientIdentity(name=name)
    major, minor, patch = (int(p) if p else 0 for p in parts.groups())
    return ClientIdentity(name=name, major=major, minor=minor, patch=patch)


def parse_user_agent(user_agent: Optional[str]) -> ClientIdentity:
    """
    Identify the client from its ``product/version`` token.

    The first token names the client, except for browsers, which are
    recognised by their own product token.

    Examples:
        "Elastic-filebeat/8.12.1 (linux; amd64)" -> ("Elastic-filebeat", 8, 12, 1)
        "Go-http-client/1.1" -> ("Go-http-client", 1, 1, 0)
        "Mozilla/5.0 (...) Chrome/120.0.6099.109 Safari/537.36" -> ("Chrome", 120, 0, 6099)
        "" -> ("", 0, 0, 0)
    """
    if not user_agent:
        return ClientIdentity()
    if user_agent.startswith("Mozilla/"):
        for name, pattern in _BROWSERS:
            found = pattern.search(user_agent)
            if found is not None:
                return _identity(name, found.group(1))
    match = _PRODUCT_RE.search(user_agent)
    if match is None:
        return ClientIdentity(name=user_agent.strip())
    return _identity(match.group("name"), match.group("version"))
