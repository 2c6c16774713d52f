"""
Static market source used when the live API is unavailable.

The records are demo data: the report labels them as fallback provenance.
"""

from typing import Optional, Sequence

from polyarb.domain.models import DataSource, RawMarket
from polyarb.providers.base import MarketSource

FALLBACK_MARKETS: tuple[RawMarket, ...] = (
    {
        "id": "demo-fed-cut-dec",
        "question": "Will the Fed cut rates at the December meeting?",
        "outcomePrices": ["0.62", "0.33"],
        "volume": 1843200,
        "liquidity": {"YES": 52000, "NO": 48700},
        "updatedAt": "2026-10-19T08:45:00Z",
    },
    {
        "id": "demo-btc-150k",
        "question": "Will Bitcoin trade above $150k before January 1?",
        "outcomePrices": ["0.18", "0.79"],
        "volume": 962400,
        "liquidity": {"YES": 21000, "NO": 30500},
        "updatedAt": "2026-10-19T08:30:00Z",
    },
    {
        "id": "demo-us-recession",
        "question": "Will the US enter a recession this year?",
        "outcomePrices": ["0.27", "0.71"],
        "volume": 715300,
        "liquidity": {"YES": 18800, "NO": 22100},
        "updatedAt": "2026-10-19T07:55:00Z",
    },
    {
        "id": "demo-eth-etf-flows",
        "question": "Will spot ETH ETFs record net inflows this week?",
        "outcomePrices": ["0.55", "0.41"],
        "volume": 233900,
        "liquidity": {"YES": 9100, "NO": 8700},
        "updatedAt": "2026-10-19T07:40:00Z",
    },
    {
        "id": "demo-cpi-above-3",
        "question": "Will headline CPI print above 3.0% YoY?",
        "outcomePrices": ["0.44", "0.52"],
        "volume": 408750,
        "liquidity": {"YES": 15400, "NO": 16900},
        "updatedAt": "2026-10-19T06:15:00Z",
    },
    {
        "id": "demo-oil-100",
        "question": "Will WTI crude close above $100 this quarter?",
        "outcomePrices": ["0.09", "0.89"],
        "volume": 127600,
        "liquidity": {"YES": 4200, "NO": 11800},
        "updatedAt": "2026-10-19T05:50:00Z",
    },
    {
        "id": "demo-sp500-ath",
        "question": "Will the S&P 500 set a new all-time high this month?",
        "outcomePrices": ["0.71", "0.31"],
        "volume": 551200,
        "liquidity": {"YES": 26300, "NO": 12900},
        "updatedAt": "2026-10-19T05:05:00Z",
    },
    {
        "id": "demo-gold-3000",
        "question": "Will gold trade above $3,000/oz by year end?",
        "outcomePrices": ["0.83", "0.15"],
        "volume": 302450,
        "liquidity": {"YES": 19700, "NO": 5600},
        "updatedAt": "2026-10-18T23:20:00Z",
    },
    {
        "id": "demo-unemployment-4-5",
        "question": "Will the unemployment rate reach 4.5% or higher?",
        "outcomePrices": ["0.35", "0.58"],
        "volume": 86300,
        "liquidity": {"YES": 3100, "NO": 4400},
        "updatedAt": "2026-10-18T21:10:00Z",
    },
    {
        "id": "demo-10y-above-5",
        "question": "Will the 10-year Treasury yield close above 5%?",
        "outcomePrices": ["0.24", "0.78"],
        "volume": 174800,
        "liquidity": {"YES": 6900, "NO": 12500},
        "updatedAt": "2026-10-18T19:45:00Z",
    },
    {
        "id": "demo-shutdown",
        "question": "Will there be a US government shutdown before the deadline?",
        "outcomePrices": ["0.47", "0.49"],
        "volume": 659100,
        "liquidity": {"YES": 24400, "NO": 23800},
        "updatedAt": "2026-10-18T17:30:00Z",
    },
    {
        "id": "demo-sol-flip-bnb",
        "question": "Will Solana's market cap exceed BNB's this month?",
        "outcomePrices": ["0.39", "0.57"],
        "volume": 98200,
        "liquidity": {"YES": 3800, "NO": 5200},
        "updatedAt": "2026-10-18T15:05:00Z",
    },
)


class StaticMarketSource(MarketSource):
    """
    Market source backed by a fixed list of records.

    Used for the fallback dataset and for tests.
    """

    name = "static"

    def __init__(
        self,
        markets: Optional[Sequence[RawMarket]] = None,
        source: DataSource = DataSource.FALLBACK,
    ):
        self._markets = tuple(FALLBACK_MARKETS if markets is None else markets)
        self.source = source

    def fetch_markets(self) -> list[RawMarket]:
        # Copies, so callers cannot mutate the fixed dataset
        return [dict(m) for m in self._markets]
