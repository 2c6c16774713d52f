"""
Opportunity filter and ranker.

Pipeline: calculate -> filter (YES+NO < 1) -> optional guards -> sort by
spread descending -> truncate.

Ties: sorting is stable, so markets with equal spreads keep the order in
which the source returned them.
"""

from typing import Any, Iterable

from polyarb.arb.calculator import calculate_arbitrage
from polyarb.core.logging import get_logger
from polyarb.domain.models import Opportunity, RawMarket

logger = get_logger("ranker")

DEFAULT_LIMIT = 10


def _numeric_volume(volume: Any) -> float:
    try:
        return float(volume)
    except (TypeError, ValueError):
        return 0.0


def passes_guards(
    opportunity: Opportunity,
    *,
    min_volume: float = 0.0,
    exclude_unpriced: bool = False,
) -> bool:
    """
    Optional sanity guards on top of the arbitrage predicate.

    With the defaults every opportunity passes, including records that had
    no price data at all (spread 1.0).
    """
    if exclude_unpriced and not opportunity.has_prices:
        return False
    if min_volume > 0 and _numeric_volume(opportunity.volume) < min_volume:
        return False
    return True


def filter_opportunities(
    markets: Iterable[RawMarket],
    limit: int = DEFAULT_LIMIT,
    *,
    min_volume: float = 0.0,
    exclude_unpriced: bool = False,
) -> list[Opportunity]:
    """
    Rank markets by arbitrage spread.

    Args:
        markets: Raw market records
        limit: Maximum number of results (positive integer)
        min_volume: Drop markets with less volume than this (0 disables)
        exclude_unpriced: Drop markets with no usable prices

    Returns:
        Qualifying opportunities, largest spread first, at most `limit` long

    Raises:
        ValueError: If limit is not a positive integer
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")

    records = list(markets)
    opportunities = [calculate_arbitrage(m) for m in records if isinstance(m, dict)]
    if len(opportunities) < len(records):
        logger.warning(f"Skipped {len(records) - len(opportunities)} non-object market record(s)")
    qualifying = [
        o for o in opportunities
        if o.is_qualifying
        and passes_guards(o, min_volume=min_volume, exclude_unpriced=exclude_unpriced)
    ]

    unpriced = sum(1 for o in qualifying if not o.has_prices)
    if unpriced:
        logger.warning(f"{unpriced} qualifying market(s) have no price data")

    ranked = sorted(qualifying, key=lambda o: o.spread, reverse=True)
    logger.debug(
        f"Ranked {len(opportunities)} markets: {len(qualifying)} qualifying, "
        f"keeping top {min(limit, len(ranked))}"
    )
    return ranked[:limit]


def rank_summary(opportunities: list[Opportunity]) -> dict[str, Any]:
    """
    Aggregate figures for a ranked result.

    Empty input yields zeros rather than dividing by zero.
    """
    count = len(opportunities)
    if count == 0:
        return {"count": 0, "avg_spread": 0.0, "max_spread": 0.0}

    spreads = [o.spread for o in opportunities]
    return {
        "count": count,
        "avg_spread": sum(spreads) / count,
        "max_spread": max(spreads),
    }
