"""
HTML report renderer.

Turns a ReportSnapshot into a single self-contained HTML page that reloads
itself after a fixed interval. Presentation only: the snapshot is trusted
as produced by the ranker.
"""

from datetime import datetime
from html import escape
from typing import Any, Optional

from polyarb.arb.ranker import rank_summary
from polyarb.core.timeutil import now_utc, parse_iso_timestamp, to_local
from polyarb.domain.models import DataSource, Opportunity, ReportSnapshot

DEFAULT_REFRESH_SECONDS = 60
DEFAULT_MARKET_URL = "https://polymarket.com/market/{id}"

# Spreads above this get the highlighted badge
HIGHLIGHT_SPREAD = 0.05

SOURCE_LABELS = {
    DataSource.LIVE.value: "Polymarket API (live)",
    DataSource.FALLBACK.value: "Demo data (API unavailable)",
}

STYLE = """
body { margin: 0; background: #0a0a0f; color: #e5e7eb;
       font-family: 'Inter', system-ui, -apple-system, sans-serif; }
.container { max-width: 72rem; margin: 0 auto; padding: 2rem 1rem; }
header { text-align: center; margin-bottom: 2.5rem; }
h1 { font-size: 2.5rem; margin: 0 0 .5rem; color: #00f0ff;
     text-shadow: 0 0 10px rgba(0, 240, 255, .5); }
.subtitle { color: #9ca3af; }
.mono { font-family: ui-monospace, monospace; color: #00f0ff; }
.stats { display: grid; grid-template-columns: repeat(auto-fit, minmax(10rem, 1fr));
         gap: 1rem; margin-bottom: 2.5rem; }
.stat, .card { background: #111118; border: 1px solid #1a1a24; border-radius: .75rem; padding: 1rem; }
.stat-label { color: #9ca3af; font-size: .875rem; }
.stat-value { font-size: 1.5rem; font-weight: 700; }
.grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(20rem, 1fr)); gap: 1.5rem; }
.card { display: block; color: inherit; text-decoration: none; transition: all .3s ease; }
.card:hover { transform: translateY(-4px); box-shadow: 0 10px 30px rgba(0, 240, 255, .15); }
.card-head, .row, .card-foot { display: flex; justify-content: space-between; align-items: center; }
.card h3 { font-size: 1.1rem; color: #fff; margin: .75rem 0 1rem; }
.badge { font-size: .75rem; padding: .25rem .5rem; border-radius: 9999px; font-weight: 600; }
.badge-bullish { background: rgba(16, 185, 129, .2); color: #10b981; border: 1px solid rgba(16, 185, 129, .3); }
.badge-bearish { background: rgba(239, 68, 68, .2); color: #ef4444; border: 1px solid rgba(239, 68, 68, .3); }
.badge-warning { background: rgba(234, 179, 8, .2); color: #eab308; border: 1px solid rgba(234, 179, 8, .3); }
.muted { color: #6b7280; font-size: .75rem; }
.row { margin-bottom: .75rem; }
.bar { width: 8rem; height: .5rem; background: #1a1a24; border-radius: 9999px; overflow: hidden;
       display: inline-block; vertical-align: middle; margin-right: .5rem; }
.bar > div { height: 100%; }
.yes { background: #00f0ff; } .no { background: #ec4899; }
.card-foot { border-top: 1px solid #1a1a24; padding-top: .75rem; }
.empty { text-align: center; padding: 5rem 0; color: #9ca3af; }
footer { text-align: center; padding: 2rem 0; color: #6b7280; font-size: .875rem;
         border-top: 1px solid #111118; margin-top: 3rem; }
"""


def format_number(num: float, decimals: int = 4) -> str:
    return f"{num:.{decimals}f}"


def format_percent(num: float) -> str:
    """0.03 -> '3.00%'."""
    return f"{num * 100:.2f}%"


def format_volume(volume: Any) -> str:
    """Format volume with thousands separators; non-numeric values are shown as-is."""
    try:
        value = float(volume)
    except (TypeError, ValueError):
        return str(volume)
    if value.is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_time_ago(timestamp: Any, now: Optional[datetime] = None) -> str:
    """
    Relative age of an ISO timestamp.

    Returns 'Just now', 'Nm ago', 'Nh ago' or 'Nd ago'; 'unknown' when the
    timestamp is missing or malformed.
    """
    dt = parse_iso_timestamp(timestamp)
    if dt is None:
        return "unknown"

    now = now or now_utc()
    diff_seconds = (now - dt).total_seconds()
    diff_mins = int(diff_seconds // 60)

    if diff_mins < 1:
        return "Just now"
    if diff_mins < 60:
        return f"{diff_mins}m ago"
    diff_hours = diff_mins // 60
    if diff_hours < 24:
        return f"{diff_hours}h ago"
    return f"{diff_hours // 24}d ago"


def format_generated_at(generated_at: str, tz_name: str = "UTC") -> str:
    dt = parse_iso_timestamp(generated_at)
    if dt is None:
        return escape(str(generated_at))
    return to_local(dt, tz_name).strftime("%H:%M:%S %Z")


def source_label(source: str) -> str:
    return SOURCE_LABELS.get(source, source)


def _bar_width(price: float) -> str:
    return f"{min(max(price, 0.0), 1.0) * 100:.2f}%"


def render_card(
    opp: Opportunity,
    market_url_template: str = DEFAULT_MARKET_URL,
    now: Optional[datetime] = None,
) -> str:
    """Render one opportunity as a linked card."""
    url = market_url_template.format(id=opp.id if opp.id is not None else '')
    badge_class = "badge-bullish" if opp.spread > HIGHLIGHT_SPREAD else "badge-bearish"
    warning = ""
    if not opp.has_prices:
        warning = ' <span class="badge badge-warning">no price data</span>'

    return f"""
      <a class="card" href="{escape(url, quote=True)}" target="_blank" rel="noopener">
        <div class="card-head">
          <span><span class="badge {badge_class}">{format_percent(opp.spread)} spread</span>{warning}</span>
          <span class="muted">{format_time_ago(opp.updated_at, now)}</span>
        </div>
        <h3>{escape(opp.question or '')}</h3>
        <div class="row">
          <span class="stat-label">YES</span>
          <span><span class="bar"><div class="yes" style="width: {_bar_width(opp.yes)}"></div></span><span class="mono">{format_percent(opp.yes)}</span></span>
        </div>
        <div class="row">
          <span class="stat-label">NO</span>
          <span><span class="bar"><div class="no" style="width: {_bar_width(opp.no)}"></div></span><span class="mono">{format_percent(opp.no)}</span></span>
        </div>
        <div class="card-foot muted">
          <span>Vol: ${escape(format_volume(opp.volume))}</span>
          <span>Sum: {format_number(opp.sum)}</span>
        </div>
      </a>"""


def generate_html(
    snapshot: ReportSnapshot,
    *,
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS,
    market_url_template: str = DEFAULT_MARKET_URL,
    timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> str:
    """
    Render the dashboard page.

    Args:
        snapshot: Ranked opportunities plus metadata
        refresh_seconds: Page reload interval
        market_url_template: Link template for each card, formatted with id
        timezone: Display timezone for the update time
        now: Reference time for relative ages (defaults to current UTC time)

    Returns:
        Complete HTML document
    """
    summary = rank_summary(snapshot.opportunities)
    total_count = snapshot.total_count
    last_update = format_generated_at(snapshot.generated_at, timezone)
    source_html = f" · Source: {escape(source_label(snapshot.source))}" if snapshot.source else ""

    cards = "".join(
        render_card(opp, market_url_template, now) for opp in snapshot.opportunities
    )

    empty_state = ""
    if total_count == 0:
        empty_state = """
    <div class="empty">
      <h3>No arbitrage opportunities found</h3>
      <p>Check back in a minute. Market might be efficient or data unavailable.</p>
    </div>"""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta http-equiv="refresh" content="{refresh_seconds}">
  <title>Polymarket Arbitrage Dashboard</title>
  <style>{STYLE}</style>
</head>
<body>
  <div class="container">
    <header>
      <h1>Polymarket Arbitrage</h1>
      <p class="subtitle">
        Top {total_count} opportunities (YES+NO &lt; 1) · Last updated: <span class="mono">{last_update}</span>{source_html}
      </p>
    </header>

    <div class="stats">
      <div class="stat">
        <div class="stat-label">Opportunities</div>
        <div class="stat-value" style="color: #00f0ff">{total_count}</div>
      </div>
      <div class="stat">
        <div class="stat-label">Avg Spread</div>
        <div class="stat-value" style="color: #10b981">{format_percent(summary['avg_spread'])}</div>
      </div>
      <div class="stat">
        <div class="stat-label">Max Spread</div>
        <div class="stat-value" style="color: #ec4899">{format_percent(summary['max_spread'])}</div>
      </div>
      <div class="stat">
        <div class="stat-label">Auto-refresh</div>
        <div class="stat-value mono" style="color: #a855f7">{refresh_seconds}s</div>
      </div>
    </div>

    <div class="grid">{cards}
    </div>
{empty_state}
  </div>

  <footer>Data from Polymarket API · Refreshes automatically</footer>

  <script>
    setTimeout(function () {{ location.reload(); }}, {refresh_seconds * 1000});
  </script>
</body>
</html>
"""
