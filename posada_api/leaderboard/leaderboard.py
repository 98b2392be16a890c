"""
Community leaderboard service.
"""

import time
from typing import Any, Dict

from ..config.models import ApiConfig
from .aggregation import aggregate, leaderboard_rows, recent_rows, strategy_rows
from .trade_ledger import TradeLedger


class LeaderboardService:
    """Builds the /api/leaderboard views from the trade ledger."""

    def __init__(self, config: ApiConfig, ledger: TradeLedger, clock=time.time):
        self.config = config
        self.ledger = ledger
        self._clock = clock

    def record_trade(self, report: Dict[str, Any]) -> Dict[str, Any]:
        return self.ledger.record(report)

    def leaderboard(self) -> Dict[str, Any]:
        trades = self.ledger.load_trades()
        profiles = self.ledger.load_users()
        users, _ = aggregate(trades)

        return {
            'leaderboard': leaderboard_rows(users, profiles, self.config.leaderboard_size),
            'recent': recent_rows(trades, profiles, self.config.recent_trades_size),
            'updated_at': int(self._clock()),
        }

    def strategies(self) -> Dict[str, Any]:
        _, strategies = aggregate(self.ledger.load_trades())
        return {
            'strategies': strategy_rows(strategies),
            'updated_at': int(self._clock()),
        }
