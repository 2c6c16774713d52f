"""
polyarb CLI entry point.

Usage:
    # Fetch, rank, write data.json and index.html once
    python -m polyarb.cli.main --once

    # Re-render index.html from the existing data.json
    python -m polyarb.cli.main --render

    # Refresh on the configured interval
    python -m polyarb.cli.main --scheduled

    # Show status
    python -m polyarb.cli.main --status
"""

import signal
import sys
import time
from dataclasses import replace
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from polyarb.arb.ranker import rank_summary
from polyarb.core.config import get_settings, load_yaml_config
from polyarb.core.errors import PolyarbError, SnapshotNotFoundError
from polyarb.core.logging import get_logger, setup_logging
from polyarb.domain.models import ReportSnapshot
from polyarb.providers.base import BaseProvider, ProviderStatus
from polyarb.services.pipeline import ArbPipeline, create_pipeline, load_pipeline_config
from polyarb.services.report import format_percent, format_volume, source_label
from polyarb.services.scheduler import create_scheduler_service

console = Console()
logger = get_logger("cli")


def _load_config() -> dict[str, Any]:
    try:
        return load_yaml_config()
    except FileNotFoundError:
        logger.warning("config.yaml not found, using defaults")
        return {}


def build_pipeline(limit: Optional[int] = None) -> ArbPipeline:
    """Create the pipeline, applying a --limit override if given."""
    settings = get_settings()
    config = _load_config()
    pipeline_config = load_pipeline_config(settings, config)
    if limit is not None:
        pipeline_config = replace(pipeline_config, limit=limit)
    return create_pipeline(settings=settings, config=config, pipeline_config=pipeline_config)


def display_snapshot(snapshot: ReportSnapshot) -> None:
    """Display ranked opportunities in terminal."""
    summary = rank_summary(snapshot.opportunities)

    console.print()
    console.print(
        f"[bold blue]Polymarket Arbitrage[/bold blue] · "
        f"{snapshot.generated_at} · Source: {source_label(snapshot.source) or 'n/a'}"
    )

    if not snapshot.opportunities:
        console.print("[yellow]No arbitrage opportunities found[/yellow]\n")
        return

    table = Table(title=f"Top {snapshot.total_count} opportunities (YES+NO < 1)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Question", style="cyan", max_width=60)
    table.add_column("YES", justify="right")
    table.add_column("NO", justify="right")
    table.add_column("Spread", justify="right", style="green")
    table.add_column("Volume", justify="right")

    for rank, opp in enumerate(snapshot.opportunities, start=1):
        spread = format_percent(opp.spread)
        if not opp.has_prices:
            spread = f"[yellow]{spread} (no prices)[/yellow]"
        table.add_row(
            str(rank),
            opp.question or str(opp.id),
            f"{opp.yes:.4f}",
            f"{opp.no:.4f}",
            spread,
            format_volume(opp.volume),
        )

    console.print(table)
    console.print(
        f"Avg spread: {format_percent(summary['avg_spread'])} · "
        f"Max spread: {format_percent(summary['max_spread'])}\n"
    )


@click.command()
@click.option("--once", is_flag=True, help="Run pipeline once and exit")
@click.option("--render", is_flag=True, help="Render HTML from the existing snapshot")
@click.option("--scheduled", is_flag=True, help="Run with scheduler")
@click.option("--status", is_flag=True, help="Show system status")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Number of opportunities to keep")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def main(
    once: bool,
    render: bool,
    scheduled: bool,
    status: bool,
    limit: Optional[int],
    verbose: bool,
) -> None:
    """polyarb - Polymarket arbitrage spread dashboard"""

    log_level = "DEBUG" if verbose else None
    setup_logging(log_level=log_level)

    try:
        if status:
            show_status()
            return

        if once:
            console.print("[bold]Fetching Polymarket active markets...[/bold]")
            snapshot = build_pipeline(limit).run_once()
            if snapshot is not None:
                display_snapshot(snapshot)
            return

        if render:
            snapshot = build_pipeline(limit).render_from_snapshot()
            console.print(f"[green]Report rendered from snapshot ({snapshot.total_count} opportunities)[/green]")
            return

        if scheduled:
            run_scheduled(limit)
            return
    except PolyarbError as e:
        logger.error(f"Run failed: {e.to_dict()}")
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        sys.exit(1)

    # Default: show help
    ctx = click.get_current_context()
    click.echo(ctx.get_help())


def show_status() -> None:
    """Show configuration and the latest snapshot."""
    settings = get_settings()
    pipeline = build_pipeline()

    console.print("\n[bold]polyarb Status[/bold]\n")

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Environment", settings.polyarb_env)
    table.add_row("Market API", settings.polymarket_api)
    table.add_row("Timezone", settings.timezone)
    table.add_row("Log Level", settings.log_level)
    table.add_row("Limit", str(pipeline.config.limit))
    table.add_row("Fallback", "enabled" if pipeline.config.use_fallback else "disabled")
    table.add_row("Snapshot", settings.snapshot_path)
    table.add_row("Report", settings.report_path)

    if isinstance(pipeline.source, BaseProvider):
        health = pipeline.source.healthcheck()
        style = {
            ProviderStatus.HEALTHY: "green",
            ProviderStatus.DEGRADED: "yellow",
        }.get(health.status, "red")
        table.add_row("API Health", f"[{style}]{health.status.value}[/{style}] {escape(health.message)}")

    console.print(table)
    console.print()

    try:
        snapshot = pipeline.persistence.load_snapshot()
    except SnapshotNotFoundError:
        console.print("[yellow]No snapshot yet. Run with --once[/yellow]")
        return

    display_snapshot(snapshot)


def run_scheduled(limit: Optional[int] = None) -> None:
    """Run with scheduler."""
    console.print("[bold]Starting polyarb scheduler...[/bold]")
    console.print("Press Ctrl+C to stop\n")

    pipeline = build_pipeline(limit)

    def tick() -> None:
        # A failed tick must not stop the schedule; the next one retries.
        try:
            pipeline.run_once()
        except PolyarbError as e:
            logger.error(f"Scheduled run failed: {e.to_dict()}")

    scheduler = create_scheduler_service(config=_load_config())
    scheduler.setup_from_config(tick)
    scheduler.start()

    jobs = scheduler.get_jobs()
    if jobs:
        table = Table(title="Scheduled Jobs")
        table.add_column("Job", style="cyan")
        table.add_column("Next Run")

        for job in jobs:
            table.add_row(job["name"], job["next_run"] or "N/A")

        console.print(table)
    else:
        console.print("[yellow]No jobs scheduled. Check config/config.yaml[/yellow]")

    def shutdown(signum, frame):
        console.print("\n[yellow]Shutting down...[/yellow]")
        scheduler.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        while True:
            signal.pause()
    except AttributeError:
        # Windows doesn't have signal.pause
        while True:
            time.sleep(1)


if __name__ == "__main__":
    main()
