"""
Leaderboard module: opt-in trade reports from bots and their aggregates.
"""

from .aggregation import aggregate, leaderboard_rows, strategy_rows
from .leaderboard import LeaderboardService
from .models import Trade, UserProfile
from .trade_ledger import InvalidTradeReport, TradeLedger

__all__ = [
    "aggregate",
    "leaderboard_rows",
    "strategy_rows",
    "LeaderboardService",
    "Trade",
    "UserProfile",
    "InvalidTradeReport",
    "TradeLedger",
]
