"""
Leaderboard aggregation: per-customer and per-strategy trade statistics.
"""

import hashlib
from typing import Dict, List, Mapping, Optional

from .models import Trade, UserProfile


def display_name(cid: str, profile: Optional[UserProfile] = None) -> str:
    """Username, or a stable 'Posada XXX' handle derived from the customer id."""
    if profile is not None and profile.username:
        return profile.username
    digest = hashlib.md5(cid.encode('utf-8')).hexdigest()
    return f"Posada {digest[:3].upper()}"


def most_common(counts: Mapping[str, int]) -> str:
    """Key with the highest count; the first one seen wins a tie."""
    best = ''
    best_count = 0
    for key, count in counts.items():
        if count > best_count:
            best, best_count = key, count
    return best


def win_rate(wins: int, losses: int) -> float:
    decided = wins + losses
    return round(wins / decided * 100, 1) if decided > 0 else 0


class UserStats:
    """Running totals for one customer."""

    def __init__(self):
        self.trades = 0
        self.wins = 0
        self.losses = 0
        self.total_pnl = 0.0
        self.strategies: Dict[str, int] = {}

    def add(self, trade: Trade) -> None:
        if trade.is_buy:
            self.trades += 1

        if trade.is_sell:
            self.trades += 1
            pnl = trade.pnl or 0
            self.total_pnl += pnl
            if pnl > 0:
                self.wins += 1
            elif pnl < 0:
                self.losses += 1

        if trade.strategy:
            self.strategies[trade.strategy] = self.strategies.get(trade.strategy, 0) + 1


class StrategyStats:
    """Running totals for one strategy, over closing trades only."""

    def __init__(self, name: str):
        self.name = name
        self.trades = 0
        self.wins = 0
        self.losses = 0
        self.total_pnl = 0.0
        self.tokens: Dict[str, int] = {}

    def add(self, pnl: float, symbol: str) -> None:
        self.trades += 1
        self.total_pnl += pnl
        if pnl > 0:
            self.wins += 1
        elif pnl < 0:
            self.losses += 1
        if symbol:
            self.tokens[symbol] = self.tokens.get(symbol, 0) + 1


def aggregate(trades: List[Trade]):
    """
    Group trades by customer and by strategy.

    Returns:
        (user stats keyed by customer id, strategy stats keyed by upper-cased name)
    """
    users: Dict[str, UserStats] = {}
    strategies: Dict[str, StrategyStats] = {}

    for trade in trades:
        users.setdefault(trade.cid, UserStats()).add(trade)

        strategy = trade.strategy.upper()
        if trade.is_sell and strategy:
            strategies.setdefault(strategy, StrategyStats(strategy)).add(trade.pnl or 0, trade.symbol)

    return users, strategies


def leaderboard_rows(
    stats: Mapping[str, UserStats],
    profiles: Mapping[str, UserProfile],
    size: int = 20,
) -> List[dict]:
    """Leaderboard rows ordered by total P&L, best first."""
    board = []
    for cid, s in stats.items():
        board.append({
            'username': display_name(cid, profiles.get(cid)),
            'total_pnl': round(s.total_pnl, 2),
            'trades': s.trades,
            'wins': s.wins,
            'losses': s.losses,
            'win_rate': win_rate(s.wins, s.losses),
            'fav_strategy': most_common(s.strategies).upper(),
        })

    board.sort(key=lambda row: row['total_pnl'], reverse=True)
    return board[:size]


def strategy_rows(stats: Mapping[str, StrategyStats]) -> List[dict]:
    """Per-strategy rows ordered by total P&L, best first."""
    rows = []
    for ss in stats.values():
        rows.append({
            'name': ss.name,
            'trades': ss.trades,
            'wins': ss.wins,
            'losses': ss.losses,
            'win_rate': win_rate(ss.wins, ss.losses),
            'avg_pnl': round(ss.total_pnl / ss.trades, 2) if ss.trades > 0 else 0,
            'total_pnl': round(ss.total_pnl, 2),
            'top_token': most_common(ss.tokens),
        })

    rows.sort(key=lambda row: row['total_pnl'], reverse=True)
    return rows


def recent_rows(trades: List[Trade], profiles: Mapping[str, UserProfile], size: int = 20) -> List[dict]:
    """The last size trades, newest first."""
    recent = trades[-size:] if size > 0 else []
    return [
        {
            'ts': t.ts,
            'username': display_name(t.cid, profiles.get(t.cid)),
            'event': t.event,
            'symbol': t.symbol,
            'strategy': t.strategy.upper(),
            'pnl': t.pnl,
            'reason': t.reason,
        }
        for t in reversed(recent)
    ]
