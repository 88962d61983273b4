"""
Typed exceptions for mockes.

Provides structured error handling with:
- MockESError: Base exception for all mockes errors
- ConfigError: Invalid odds or listener configuration
- MalformedActionError: A bulk action line could not be understood
- UpstreamDecodeError: A compressed request body could not be decompressed

All exceptions include structured attributes for programmatic handling.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class MockESError(Exception):
    """Base exception for all mockes errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context as key-value pairs
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging or API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(MockESError):
    """Configuration or validation error.

    Raised when:
    - duplicate + too-many + non-index percentages exceed 100
    - the too-large percentage exceeds 100
    - a percentage is negative
    - only one half of the TLS certificate/key pair is given

    The previous odds stay in effect when reconfiguration fails.
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code or "config_error", details=details)


class MalformedActionError(MockESError):
    """A bulk action line is not a single-key JSON object naming a known verb.

    Attributes:
        line: 1-based line number of the offending line in the decoded body
        reason: Short description of what was wrong with it
    """

    def __init__(
        self,
        reason: str,
        *,
        line: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if line is not None:
            details["line"] = line
        self.line = line
        self.reason = reason
        message = f"malformed action on line {line}: {reason}" if line else reason
        super().__init__(message, code="malformed_action", details=details)


class UpstreamDecodeError(MockESError):
    """Request body could not be decompressed.

    Attributes:
        encoding: The Content-Encoding the client declared
    """

    def __init__(
        self,
        message: str,
        *,
        encoding: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if encoding:
            details["encoding"] = encoding
        self.encoding = encoding
        super().__init__(message, code="upstream_decode_error", details=details)


__all__ = [
    "MockESError",
    "ConfigError",
    "MalformedActionError",
    "UpstreamDecodeError",
]
