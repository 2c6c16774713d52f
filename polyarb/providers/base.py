"""
Base classes for market sources.

All market sources must:
- Inherit from MarketSource
- Implement fetch_markets()
- Raise FetchError / EmptyResultError on failure rather than returning junk

HTTP-backed sources inherit from BaseProvider, which adds the shared HTTP
client and error handling.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from polyarb.core.config import Settings, get_settings
from polyarb.core.errors import EmptyResultError, FetchError, ProviderError
from polyarb.core.http import HttpClient, get_http_client
from polyarb.core.logging import LoggerMixin
from polyarb.domain.models import DataSource, RawMarket


class ProviderStatus(str, Enum):
    """Provider health status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


@dataclass
class HealthCheckResult:
    """Result of a provider health check."""
    status: ProviderStatus
    message: str
    latency_ms: Optional[float] = None
    details: Optional[dict[str, Any]] = None


class MarketSource(ABC, LoggerMixin):
    """Anything that can supply a list of raw markets."""

    name: str = "base"
    source: DataSource = DataSource.LIVE

    @abstractmethod
    def fetch_markets(self) -> list[RawMarket]:
        """
        Fetch currently open markets.

        Raises:
            FetchError: The source could not be reached or answered with an error
            EmptyResultError: The source answered with zero markets
        """


class BaseProvider(MarketSource):
    """
    Abstract base class for HTTP market providers.

    Features provided by base class:
    - HTTP client with retry/timeout
    - Logging
    - Error handling patterns
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[HttpClient] = None,
    ):
        """
        Initialize provider.

        Args:
            settings: Application settings. Uses global if not provided.
            http_client: HTTP client. Uses global if not provided.
        """
        self.settings = settings or get_settings()
        self.http = http_client or get_http_client()
        self._last_error: Optional[Exception] = None

    @abstractmethod
    def healthcheck(self) -> HealthCheckResult:
        """Check if the provider is healthy."""

    def _make_request(
        self,
        method: str,
        url: str,
        **kwargs,
    ) -> Any:
        """
        Make HTTP request with error handling.

        Args:
            method: HTTP method (get/post)
            url: Request URL
            **kwargs: Additional arguments for request

        Returns:
            Decoded JSON response

        Raises:
            FetchError: On request failure
        """
        kwargs["provider_name"] = self.name

        if method.lower() == "get":
            call = self.http.get
        elif method.lower() == "post":
            call = self.http.post
        else:
            raise ValueError(f"Unsupported HTTP method: {method}")

        try:
            return call(url, **kwargs)
        except ProviderError as e:
            self._last_error = e
            raise
        except Exception as e:
            self._last_error = e
            raise FetchError(
                f"Request failed: {e}",
                provider=self.name,
                recoverable=True,
            ) from e

    def _require_markets(self, markets: list[Any]) -> list[RawMarket]:
        """Drop non-object records; raise EmptyResultError if nothing is left."""
        records = [m for m in markets if isinstance(m, dict)]
        if len(records) < len(markets):
            self.logger.warning(
                f"Skipped {len(markets) - len(records)} non-object records from {self.name}"
            )
        markets = records
        if not markets:
            raise EmptyResultError(
                f"{self.name} returned no markets",
                provider=self.name,
            )
        self.logger.info(f"Fetched {len(markets)} markets from {self.name}")
        return markets
