"""
polyarb - Polymarket arbitrage spread dashboard.

Polls open Polymarket markets, ranks them by YES+NO spread and renders a
self-refreshing HTML report.
"""

__version__ = "0.1.0"
