"""
Providers module - Market sources

Each provider wraps a market API (or a fixed dataset) and returns raw
market records. All sources implement MarketSource.
"""

from typing import Optional

from polyarb.core.config import Settings, get_settings
from polyarb.providers.base import (
    BaseProvider,
    HealthCheckResult,
    MarketSource,
    ProviderStatus,
)
from polyarb.providers.fallback import FALLBACK_MARKETS, StaticMarketSource
from polyarb.providers.polymarket import GammaMarketsProvider, PolymarketProvider


def create_market_source(settings: Optional[Settings] = None) -> BaseProvider:
    """Create the live market source selected by POLYMARKET_API."""
    settings = settings or get_settings()
    if settings.polymarket_api == "gamma":
        return GammaMarketsProvider(settings=settings)
    return PolymarketProvider(settings=settings)


__all__ = [
    "BaseProvider",
    "HealthCheckResult",
    "MarketSource",
    "ProviderStatus",
    "FALLBACK_MARKETS",
    "StaticMarketSource",
    "GammaMarketsProvider",
    "PolymarketProvider",
    "create_market_source",
]
