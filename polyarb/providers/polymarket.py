"""
Polymarket providers for open-market data.

Supports:
- GraphQL API: active markets with outcome prices and liquidity per outcome
- Gamma API: the same market list over REST
"""

import time
from typing import Any, Optional

from polyarb.core.config import Settings
from polyarb.core.errors import EmptyResultError, FetchError
from polyarb.core.http import HttpClient
from polyarb.domain.models import RawMarket
from polyarb.providers.base import (
    BaseProvider,
    HealthCheckResult,
    ProviderStatus,
)

ACTIVE_MARKETS_QUERY = """
query ActiveMarkets {
  markets(
    first: 100
    where: { closed: false }
    orderBy: updatedAt
    orderDirection: desc
  ) {
    id
    question
    outcomePrices
    updatedAt
    volume
    liquidity {
      YES
      NO
    }
  }
}
"""


class PolymarketProvider(BaseProvider):
    """
    Polymarket GraphQL provider.

    Provides the 100 most recently updated open markets.
    """

    name = "polymarket"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[HttpClient] = None,
        url: Optional[str] = None,
    ):
        super().__init__(settings=settings, http_client=http_client)
        self.url = url or self.settings.polymarket_graphql_url

    def healthcheck(self) -> HealthCheckResult:
        """Check Polymarket API health by running the market query."""
        start_time = time.time()

        try:
            markets = self.fetch_markets()
        except FetchError as e:
            self.logger.warning(f"Polymarket health check failed: {e}")
            return HealthCheckResult(
                status=ProviderStatus.UNAVAILABLE,
                message=f"Polymarket API error: {e}",
            )
        except EmptyResultError as e:
            return HealthCheckResult(
                status=ProviderStatus.DEGRADED,
                message=f"Polymarket API responded without markets: {e}",
            )

        return HealthCheckResult(
            status=ProviderStatus.HEALTHY,
            message="Polymarket API is responding",
            latency_ms=(time.time() - start_time) * 1000,
            details={"markets": len(markets)},
        )

    def fetch_markets(self) -> list[RawMarket]:
        """
        Fetch active markets.

        Returns:
            List of raw market dicts, most recently updated first

        Raises:
            FetchError: Transport failure, HTTP error or GraphQL error payload
            EmptyResultError: Zero markets returned
        """
        self.logger.info("Fetching Polymarket active markets...")
        response = self._make_request(
            "post",
            self.url,
            json={"query": ACTIVE_MARKETS_QUERY},
        )
        return self._require_markets(self._parse_response(response))

    async def afetch_markets(self) -> list[RawMarket]:
        """Async variant of fetch_markets()."""
        self.logger.info("Fetching Polymarket active markets (async)...")
        try:
            response = await self.http.apost(
                self.url,
                json={"query": ACTIVE_MARKETS_QUERY},
                provider_name=self.name,
            )
        except FetchError as e:
            self._last_error = e
            raise
        return self._require_markets(self._parse_response(response))

    def _parse_response(self, response: Any) -> list[RawMarket]:
        """Extract data.markets from a GraphQL response body."""
        if not isinstance(response, dict):
            raise FetchError(
                "Unexpected GraphQL response shape",
                provider=self.name,
                recoverable=False,
            )

        if response.get("errors"):
            self.logger.error(f"GraphQL errors: {response['errors']}")
            raise FetchError(
                "Failed to fetch markets",
                provider=self.name,
                recoverable=False,
                details={"errors": response["errors"]},
            )

        data = response.get("data") or {}
        if not isinstance(data, dict):
            raise FetchError(
                "GraphQL data field is not an object",
                provider=self.name,
                recoverable=False,
            )

        markets = data.get("markets")
        if markets is None:
            return []
        if not isinstance(markets, list):
            raise FetchError(
                "GraphQL markets field is not a list",
                provider=self.name,
                recoverable=False,
            )
        return markets


class GammaMarketsProvider(BaseProvider):
    """
    Polymarket Gamma REST provider.

    Same contract as PolymarketProvider. Gamma encodes outcomePrices as a
    JSON string and liquidity as a single number; both are passed through
    untouched for the calculator to handle.
    """

    name = "polymarket_gamma"

    PAGE_SIZE = 100

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[HttpClient] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__(settings=settings, http_client=http_client)
        self.base_url = (base_url or self.settings.polymarket_gamma_url).rstrip("/")

    def healthcheck(self) -> HealthCheckResult:
        """Check Gamma API health."""
        start_time = time.time()

        try:
            self._make_request("get", f"{self.base_url}/markets", params={"limit": 1})
        except FetchError as e:
            self.logger.warning(f"Gamma health check failed: {e}")
            return HealthCheckResult(
                status=ProviderStatus.UNAVAILABLE,
                message=f"Gamma API error: {e}",
            )

        return HealthCheckResult(
            status=ProviderStatus.HEALTHY,
            message="Gamma API is responding",
            latency_ms=(time.time() - start_time) * 1000,
        )

    def _params(self) -> dict[str, Any]:
        return {
            "closed": "false",
            "limit": self.PAGE_SIZE,
            "order": "updatedAt",
            "ascending": "false",
        }

    def fetch_markets(self) -> list[RawMarket]:
        """Fetch the most recently updated open markets."""
        self.logger.info("Fetching Polymarket active markets (Gamma)...")
        response = self._make_request("get", f"{self.base_url}/markets", params=self._params())
        return self._parse_response(response)

    async def afetch_markets(self) -> list[RawMarket]:
        """Async variant of fetch_markets()."""
        self.logger.info("Fetching Polymarket active markets (Gamma, async)...")
        try:
            response = await self.http.aget(
                f"{self.base_url}/markets",
                params=self._params(),
                provider_name=self.name,
            )
        except FetchError as e:
            self._last_error = e
            raise
        return self._parse_response(response)

    def _parse_response(self, response: Any) -> list[RawMarket]:
        if not isinstance(response, list):
            raise FetchError(
                "Unexpected Gamma response shape",
                provider=self.name,
                recoverable=False,
            )
        return self._require_markets(response)
