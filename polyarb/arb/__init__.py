"""
polyarb arbitrage module.

Components:
- calculator: per-market spread computation
- ranker: filtering, ordering and truncation of opportunities
"""

from polyarb.arb.calculator import MISSING_PRICE, calculate_arbitrage, parse_price
from polyarb.arb.ranker import DEFAULT_LIMIT, filter_opportunities, rank_summary

__all__ = [
    "MISSING_PRICE",
    "calculate_arbitrage",
    "parse_price",
    "DEFAULT_LIMIT",
    "filter_opportunities",
    "rank_summary",
]
