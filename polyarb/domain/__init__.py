"""
Domain module - Business models

Contains pure data contracts without external dependencies.
All models are JSON-serializable.
"""

from polyarb.domain.models import (
    DataSource,
    RawMarket,
    Opportunity,
    ReportSnapshot,
)

__all__ = [
    "DataSource",
    "RawMarket",
    "Opportunity",
    "ReportSnapshot",
]
