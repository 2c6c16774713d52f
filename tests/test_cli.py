"""Tests for the click entry point."""

from unittest.mock import Mock, patch

from click.testing import CliRunner

from polyarb.arb.ranker import filter_opportunities
from polyarb.cli.main import main
from polyarb.core.errors import PersistenceError, SnapshotNotFoundError
from polyarb.domain.models import ReportSnapshot
from polyarb.providers.base import BaseProvider, HealthCheckResult, ProviderStatus

SNAPSHOT = ReportSnapshot(
    generated_at="2026-10-19T12:00:00.000Z",
    opportunities=filter_opportunities([
        {"id": "m1", "question": "Will it rain?", "outcomePrices": [0.45, 0.52], "volume": 1200},
    ]),
    source="live",
)


@patch("polyarb.cli.main.setup_logging")
@patch("polyarb.cli.main.build_pipeline")
class TestMain:
    """Tests for the polyarb command."""

    def test_once_prints_ranking(self, mock_build, mock_logging):
        mock_build.return_value.run_once.return_value = SNAPSHOT

        result = CliRunner().invoke(main, ["--once", "--limit", "3"])

        assert result.exit_code == 0
        assert "Will it rain?" in result.output
        mock_build.assert_called_once_with(3)

    def test_once_skipped_run(self, mock_build, mock_logging):
        mock_build.return_value.run_once.return_value = None

        result = CliRunner().invoke(main, ["--once"])

        assert result.exit_code == 0

    def test_render(self, mock_build, mock_logging):
        mock_build.return_value.render_from_snapshot.return_value = SNAPSHOT

        result = CliRunner().invoke(main, ["--render"])

        assert result.exit_code == 0
        assert "1 opportunities" in result.output

    def test_render_without_snapshot_exits_1(self, mock_build, mock_logging):
        mock_build.return_value.render_from_snapshot.side_effect = SnapshotNotFoundError(
            "No snapshot at data.json", path="data.json"
        )

        result = CliRunner().invoke(main, ["--render"])

        assert result.exit_code == 1
        assert "No snapshot at data.json" in result.output

    def test_write_failure_exits_1(self, mock_build, mock_logging):
        mock_build.return_value.run_once.side_effect = PersistenceError("disk full", path="data.json")

        result = CliRunner().invoke(main, ["--once"])

        assert result.exit_code == 1

    def test_invalid_limit(self, mock_build, mock_logging):
        result = CliRunner().invoke(main, ["--once", "--limit", "0"])

        assert result.exit_code == 2
        mock_build.assert_not_called()

    def test_no_flags_shows_help(self, mock_build, mock_logging):
        result = CliRunner().invoke(main, [])

        assert result.exit_code == 0
        assert "--once" in result.output

    def test_verbose_sets_debug(self, mock_build, mock_logging):
        mock_build.return_value = Mock()

        CliRunner().invoke(main, ["-v"])

        mock_logging.assert_called_once_with(log_level="DEBUG")

    def test_status_reports_api_health(self, mock_build, mock_logging):
        pipeline = mock_build.return_value
        pipeline.config.limit = 10
        pipeline.config.use_fallback = True
        pipeline.source = Mock(spec=BaseProvider)
        pipeline.source.healthcheck.return_value = HealthCheckResult(
            status=ProviderStatus.UNAVAILABLE,
            message="Polymarket API error: HTTP 503",
        )
        pipeline.persistence.load_snapshot.side_effect = SnapshotNotFoundError("none", path="data.json")

        result = CliRunner().invoke(main, ["--status"])

        assert result.exit_code == 0
        assert "unavailable" in result.output
        assert "HTTP 503" in result.output
        pipeline.source.healthcheck.assert_called_once_with()
