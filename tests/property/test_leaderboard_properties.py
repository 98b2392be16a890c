"""
Property-based tests for leaderboard aggregation.
"""

from hypothesis import given, strategies as st

from posada_api.leaderboard import Trade, aggregate, leaderboard_rows, strategy_rows

trade_strategy = st.builds(
    Trade,
    ts=st.integers(min_value=0, max_value=2_000_000_000),
    cid=st.sampled_from(["c1", "c2", "c3"]),
    event=st.sampled_from(["buy", "add", "sell", "sell_half", "other"]),
    symbol=st.sampled_from(["SNEK", "MIN", ""]),
    strategy=st.sampled_from(["dip", "grid", "momentum", ""]),
    pnl=st.one_of(st.none(), st.floats(min_value=-1000, max_value=1000, allow_nan=False)),
)


class TestLeaderboardProperties:
    """Property-based tests for aggregation invariants."""

    @given(trades=st.lists(trade_strategy, max_size=50))
    def test_counts_are_consistent(self, trades):
        """
        Property: Outcome Counts

        For every customer and strategy, wins plus losses never exceed the
        number of counted trades, and win rates stay within 0 to 100.
        """
        users, strategies = aggregate(trades)

        for stats in users.values():
            assert stats.wins + stats.losses <= stats.trades
        for stats in strategies.values():
            assert stats.wins + stats.losses <= stats.trades

        for row in leaderboard_rows(users, {}, size=100) + strategy_rows(strategies):
            assert 0 <= row["win_rate"] <= 100

    @given(trades=st.lists(trade_strategy, max_size=50))
    def test_rows_sorted_by_pnl(self, trades):
        """
        Property: Ranking Order

        Leaderboard and strategy rows are ordered by total P&L, best first.
        """
        users, strategies = aggregate(trades)

        board = [r["total_pnl"] for r in leaderboard_rows(users, {}, size=100)]
        ranked = [r["total_pnl"] for r in strategy_rows(strategies)]

        assert board == sorted(board, reverse=True)
        assert ranked == sorted(ranked, reverse=True)

    @given(trades=st.lists(trade_strategy, max_size=50))
    def test_strategy_trades_are_closing_trades(self, trades):
        """
        Property: Strategy Totals

        Strategy trade counts add up to the sells carrying a strategy name.
        """
        _, strategies = aggregate(trades)

        closing = [t for t in trades if t.is_sell and t.strategy]
        assert sum(s.trades for s in strategies.values()) == len(closing)
