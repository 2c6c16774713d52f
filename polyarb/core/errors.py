"""
Unified exception definitions for polyarb.

All custom exceptions inherit from PolyarbError for easy catching.

Malformed market fields are never an error: the calculator fills them with
neutral defaults, so there is no record-level exception here.
"""

from typing import Any, Optional


class PolyarbError(Exception):
    """Base exception for all polyarb errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "POLYARB_ERROR"
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for logging/serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(PolyarbError):
    """Configuration-related errors."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="CONFIG_ERROR", **kwargs)


class ProviderError(PolyarbError):
    """Market source errors (API failures, rate limits, etc.)."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        recoverable: bool = True,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["provider"] = provider
        details["recoverable"] = recoverable
        super().__init__(message, code="PROVIDER_ERROR", details=details, **kwargs)
        self.provider = provider
        self.recoverable = recoverable


class FetchError(ProviderError):
    """Network, HTTP status or GraphQL-level failure reaching the market source."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, provider=provider, details=details, **kwargs)
        self.code = "FETCH_ERROR"
        self.status_code = status_code


class RateLimitError(FetchError):
    """API rate limit exceeded."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        retry_after: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["retry_after"] = retry_after
        super().__init__(
            message,
            provider=provider,
            status_code=429,
            recoverable=True,
            details=details,
            **kwargs,
        )
        self.code = "RATE_LIMIT"
        self.retry_after = retry_after


class EmptyResultError(ProviderError):
    """The source answered successfully but returned no markets."""

    def __init__(self, message: str, *, provider: str, **kwargs):
        super().__init__(message, provider=provider, recoverable=True, **kwargs)
        self.code = "EMPTY_RESULT"


class PersistenceError(PolyarbError):
    """Snapshot or report could not be read or written."""

    def __init__(self, message: str, *, path: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["path"] = path
        super().__init__(message, code="PERSISTENCE_ERROR", details=details, **kwargs)
        self.path = path


class SnapshotNotFoundError(PersistenceError):
    """No snapshot has been written yet."""

    def __init__(self, message: str, *, path: Optional[str] = None, **kwargs):
        super().__init__(message, path=path, **kwargs)
        self.code = "SNAPSHOT_NOT_FOUND"
