"""
Metric calculator.

Turns one raw market into an Opportunity. The calculation is total: any
field that is missing or unparseable is replaced by a named neutral default,
never rejected.
"""

import json
import math
from typing import Any

from polyarb.domain.models import Opportunity, RawMarket

# Neutral value for an outcome price that is absent or not a number
MISSING_PRICE = 0.0

MISSING_VOLUME = 0


def empty_liquidity() -> dict[str, float]:
    return {"YES": 0, "NO": 0}


def parse_price(value: Any) -> float:
    """
    Parse one outcome price.

    Numbers and numeric strings are converted to float. None, booleans,
    non-numeric strings, NaN and infinities yield MISSING_PRICE.
    """
    if value is None or isinstance(value, bool):
        return MISSING_PRICE

    if isinstance(value, (int, float)):
        price = float(value)
    elif isinstance(value, str):
        try:
            price = float(value.strip())
        except ValueError:
            return MISSING_PRICE
    else:
        return MISSING_PRICE

    if not math.isfinite(price):
        return MISSING_PRICE
    return price


def extract_outcome_prices(market: RawMarket) -> list[Any]:
    """
    Return the raw outcomePrices list of a market.

    The Gamma REST API sends the list JSON-encoded as a string; that form is
    decoded here. Anything that is not a list afterwards counts as missing.
    """
    prices = market.get("outcomePrices")

    if isinstance(prices, str):
        try:
            prices = json.loads(prices)
        except ValueError:
            return []

    if isinstance(prices, (list, tuple)):
        return list(prices)
    return []


def _liquidity(value: Any) -> Any:
    # An empty object is a real value; only absent or falsy scalars are defaulted
    if isinstance(value, (dict, list)) or value:
        return value
    return empty_liquidity()


def calculate_arbitrage(market: RawMarket) -> Opportunity:
    """
    Compute the arbitrage fields of one market.

    Args:
        market: Raw market record

    Returns:
        Opportunity with yes/no prices; sum and spread are derived from them
    """
    prices = extract_outcome_prices(market)
    yes = parse_price(prices[0]) if len(prices) > 0 else MISSING_PRICE
    no = parse_price(prices[1]) if len(prices) > 1 else MISSING_PRICE

    return Opportunity(
        id=market.get("id"),
        question=market.get("question"),
        yes=yes,
        no=no,
        volume=market.get("volume") or MISSING_VOLUME,
        liquidity=_liquidity(market.get("liquidity")),
        updated_at=market.get("updatedAt"),
    )
