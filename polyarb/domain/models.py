"""
Core data models for polyarb.

Models are dataclasses with to_dict()/from_dict() for JSON serialization.
The dict shapes use the camelCase keys of the Polymarket API and of the
persisted snapshot, which other tools may read.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, TypedDict


class DataSource(str, Enum):
    """Provenance of the markets behind a report."""
    LIVE = "live"
    FALLBACK = "fallback"


class RawMarket(TypedDict, total=False):
    """
    One market record as supplied by a market source.

    Every key may be missing and values are not validated; the calculator
    is responsible for defaulting them.
    """
    id: str
    question: str
    outcomePrices: Any      # [yes, no] as numbers or strings, or a JSON-encoded list
    volume: Any
    liquidity: Any          # {"YES": x, "NO": y}
    updatedAt: str


@dataclass(frozen=True)
class Opportunity:
    """
    A market with its derived arbitrage fields.

    sum and spread are derived from yes/no and cannot be set, so
    spread == 1 - sum always holds.
    """
    id: Optional[str]
    question: Optional[str]
    yes: float
    no: float
    volume: Any = 0
    liquidity: Any = field(default_factory=lambda: {"YES": 0, "NO": 0})
    updated_at: Optional[str] = None

    @property
    def sum(self) -> float:
        return self.yes + self.no

    @property
    def spread(self) -> float:
        return 1 - self.sum

    @property
    def is_qualifying(self) -> bool:
        """YES+NO trades below 1, i.e. a positive spread."""
        return self.sum < 1 and self.spread > 0

    @property
    def has_prices(self) -> bool:
        """False when neither outcome carried a usable price."""
        return not (self.yes == 0 and self.no == 0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "question": self.question,
            "yes": self.yes,
            "no": self.no,
            "sum": self.sum,
            "spread": self.spread,
            "volume": self.volume,
            "liquidity": self.liquidity,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Opportunity":
        """Create from dict. Stored sum/spread are ignored and recomputed."""
        return cls(
            id=data.get("id"),
            question=data.get("question"),
            yes=float(data.get("yes") or 0),
            no=float(data.get("no") or 0),
            volume=data.get("volume") or 0,
            liquidity=data["liquidity"] if data.get("liquidity") is not None else {"YES": 0, "NO": 0},
            updated_at=data.get("updatedAt"),
        )


@dataclass
class ReportSnapshot:
    """
    Result of one pipeline run; the only persisted artifact.
    """
    generated_at: str                   # ISO timestamp
    opportunities: list[Opportunity] = field(default_factory=list)
    source: str = DataSource.LIVE.value

    @property
    def total_count(self) -> int:
        return len(self.opportunities)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "opportunities": [o.to_dict() for o in self.opportunities],
            "totalCount": self.total_count,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReportSnapshot":
        return cls(
            generated_at=data["generatedAt"],
            opportunities=[Opportunity.from_dict(o) for o in data.get("opportunities", [])],
            # Snapshots written before provenance tracking carry no source
            source=data.get("source") or "",
        )
