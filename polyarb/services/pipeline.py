"""
Arbitrage report pipeline.

Main orchestrator for one dashboard refresh.

Flow:
1. Collect: fetch open markets from the live source, or the fallback
   dataset when the live source fails or returns nothing
2. Rank: compute spreads, filter, sort, truncate
3. Store: write the JSON snapshot
4. Render: write the HTML report

Runs never overlap: a call made while another run is in progress is
skipped.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from polyarb.arb.ranker import DEFAULT_LIMIT, filter_opportunities
from polyarb.core.config import Settings, get_settings, load_yaml_config
from polyarb.core.errors import ConfigurationError, EmptyResultError, ProviderError
from polyarb.core.logging import LoggerMixin, get_logger
from polyarb.core.timeutil import format_timestamp, now_utc
from polyarb.domain.models import DataSource, RawMarket, ReportSnapshot
from polyarb.providers import MarketSource, StaticMarketSource, create_market_source
from polyarb.services.persistence import PersistenceService, create_persistence_service
from polyarb.services.report import (
    DEFAULT_MARKET_URL,
    DEFAULT_REFRESH_SECONDS,
    generate_html,
)

logger = get_logger("pipeline")


@dataclass
class PipelineConfig:
    """Everything a pipeline run needs to know, passed in explicitly."""
    limit: int = DEFAULT_LIMIT
    min_volume: float = 0.0
    exclude_unpriced: bool = False
    use_fallback: bool = True
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS
    market_url_template: str = DEFAULT_MARKET_URL
    timezone: str = "UTC"

    def __post_init__(self):
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
            raise ConfigurationError(f"limit must be a positive integer, got {self.limit!r}")
        if self.refresh_seconds < 1:
            raise ConfigurationError(
                f"refresh_seconds must be positive, got {self.refresh_seconds!r}"
            )
        if "{id}" not in self.market_url_template:
            raise ConfigurationError("market_url_template must contain '{id}'")


def load_pipeline_config(
    settings: Optional[Settings] = None,
    config: Optional[dict[str, Any]] = None,
) -> PipelineConfig:
    """
    Build PipelineConfig from settings and the `pipeline` block of config.yaml.

    Args:
        settings: Application settings
        config: Full YAML config (loaded from config/config.yaml if not given)
    """
    settings = settings or get_settings()
    if config is None:
        try:
            config = load_yaml_config()
        except FileNotFoundError:
            logger.warning("config.yaml not found, using pipeline defaults")
            config = {}

    pipeline_cfg = config.get("pipeline", {}) or {}
    guards = pipeline_cfg.get("guards", {}) or {}

    return PipelineConfig(
        limit=pipeline_cfg.get("limit", DEFAULT_LIMIT),
        min_volume=float(guards.get("min_volume", 0.0)),
        exclude_unpriced=bool(guards.get("exclude_unpriced", False)),
        use_fallback=bool(pipeline_cfg.get("use_fallback", True)),
        refresh_seconds=pipeline_cfg.get("refresh_seconds", DEFAULT_REFRESH_SECONDS),
        market_url_template=settings.polymarket_market_url,
        timezone=settings.timezone,
    )


class ArbPipeline(LoggerMixin):
    """
    Polymarket arbitrage report pipeline.

    Coordinates market collection, ranking, persistence and rendering.
    """

    def __init__(
        self,
        config: PipelineConfig,
        source: MarketSource,
        persistence: PersistenceService,
        fallback: Optional[MarketSource] = None,
    ):
        """
        Initialize pipeline.

        Args:
            config: Pipeline configuration
            source: Live market source
            persistence: Snapshot/report storage
            fallback: Source used when the live one fails (default: demo dataset)
        """
        self.config = config
        self.source = source
        self.persistence = persistence
        self.fallback = fallback or StaticMarketSource()
        self._run_lock = threading.Lock()

    def collect_markets(self) -> tuple[list[RawMarket], DataSource]:
        """
        Fetch markets, substituting the fallback dataset on failure.

        Returns:
            (markets, provenance)

        Raises:
            ProviderError: If the live source fails and fallback is disabled
        """
        try:
            markets = self.source.fetch_markets()
            if not markets:
                raise EmptyResultError(
                    f"{self.source.name} returned no markets",
                    provider=self.source.name,
                )
            self.logger.info(f"Fetched {len(markets)} markets")
            return markets, self.source.source
        except ProviderError as e:
            if not self.config.use_fallback:
                raise
            self.logger.warning(f"Live fetch failed ({e.code}): {e}. Using fallback data")

        markets = self.fallback.fetch_markets()
        self.logger.info(f"Loaded {len(markets)} fallback markets")
        return markets, self.fallback.source

    def build_snapshot(
        self,
        markets: list[RawMarket],
        source: DataSource,
        now: Optional[datetime] = None,
    ) -> ReportSnapshot:
        """Rank markets and wrap the result with run metadata."""
        opportunities = filter_opportunities(
            markets,
            self.config.limit,
            min_volume=self.config.min_volume,
            exclude_unpriced=self.config.exclude_unpriced,
        )
        self.logger.info(f"Found {len(opportunities)} arbitrage opportunities")

        return ReportSnapshot(
            generated_at=format_timestamp(now or now_utc()),
            opportunities=opportunities,
            source=source.value,
        )

    def render(self, snapshot: ReportSnapshot, now: Optional[datetime] = None) -> str:
        return generate_html(
            snapshot,
            refresh_seconds=self.config.refresh_seconds,
            market_url_template=self.config.market_url_template,
            timezone=self.config.timezone,
            now=now,
        )

    def run_once(self, now: Optional[datetime] = None) -> Optional[ReportSnapshot]:
        """
        Execute one full refresh.

        Returns:
            The persisted snapshot, or None if another run was in progress

        Raises:
            PersistenceError: If the snapshot or report cannot be written
        """
        if not self._run_lock.acquire(blocking=False):
            self.logger.warning("Previous run still in progress, skipping")
            return None

        try:
            markets, source = self.collect_markets()
            snapshot = self.build_snapshot(markets, source, now=now)
            self.persistence.save_snapshot(snapshot)
            self.persistence.save_report(self.render(snapshot, now=now))
            self.logger.info(
                f"Run complete. Opportunities: {snapshot.total_count}, "
                f"Source: {snapshot.source}"
            )
            return snapshot
        finally:
            self._run_lock.release()

    def render_from_snapshot(self, now: Optional[datetime] = None) -> ReportSnapshot:
        """
        Re-render the HTML report from the persisted snapshot.

        Raises:
            SnapshotNotFoundError: If no snapshot exists
            PersistenceError: If reading or writing fails
        """
        snapshot = self.persistence.load_snapshot()
        self.persistence.save_report(self.render(snapshot, now=now))
        return snapshot


def create_pipeline(
    settings: Optional[Settings] = None,
    config: Optional[dict[str, Any]] = None,
    pipeline_config: Optional[PipelineConfig] = None,
) -> ArbPipeline:
    """Create a pipeline wired to the configured live source and file storage."""
    settings = settings or get_settings()
    return ArbPipeline(
        config=pipeline_config or load_pipeline_config(settings, config),
        source=create_market_source(settings),
        persistence=create_persistence_service(settings),
    )
