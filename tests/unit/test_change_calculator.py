"""
Unit tests for the trailing 24h change calculation.
"""

import pytest

from posada_api.price_history import (
    ChangeCalculator,
    PriceSnapshot,
    SnapshotHistory,
    compute_24h_change,
)

NOW = 1_700_000_000
DAY = 86400


def history_of(*snapshots):
    """Build a history from (timestamp, prices) pairs."""
    snaps = [PriceSnapshot(timestamp=ts, prices=prices) for ts, prices in snapshots]
    last = snaps[-1].timestamp if snaps else 0
    return SnapshotHistory(last_snapshot_time=last, snapshots=snaps)


class TestCompute24hChange:
    """Test compute_24h_change function."""

    def test_empty_history_returns_none(self):
        """Test that an empty history has no change."""
        assert compute_24h_change(SnapshotHistory(), "SNEK", 1.0, now=NOW) is None

    def test_non_positive_current_price_returns_none(self):
        """Test that zero, negative and missing prices have no change."""
        history = history_of((NOW - DAY, {"SNEK": 1.0}))

        assert compute_24h_change(history, "SNEK", 0, now=NOW) is None
        assert compute_24h_change(history, "SNEK", -2.5, now=NOW) is None
        assert compute_24h_change(history, "SNEK", None, now=NOW) is None

    def test_exact_match_twenty_percent(self):
        """Test a snapshot exactly 24h old at 100 against a current price of 120."""
        history = history_of((NOW - DAY, {"A": 100.0}))

        assert compute_24h_change(history, "A", 120.0, now=NOW) == pytest.approx(20.0)

    def test_negative_change(self):
        """Test a price drop yields a negative percentage."""
        history = history_of((NOW - DAY, {"A": 2.0}))

        assert compute_24h_change(history, "A", 1.5, now=NOW) == pytest.approx(-25.0)

    def test_closest_snapshot_wins(self):
        """Test that the snapshot nearest to now - 24h is used."""
        history = history_of(
            (NOW - DAY - 3000, {"A": 50.0}),
            (NOW - DAY + 600, {"A": 100.0}),
            (NOW - 3600, {"A": 200.0}),
        )

        assert compute_24h_change(history, "A", 110.0, now=NOW) == pytest.approx(10.0)

    def test_tie_prefers_earlier_snapshot(self):
        """Test that equal distances resolve to the first snapshot in history order."""
        history = history_of(
            (NOW - DAY - 1800, {"A": 100.0}),
            (NOW - DAY + 1800, {"A": 200.0}),
        )

        assert compute_24h_change(history, "A", 150.0, now=NOW) == pytest.approx(50.0)

    def test_beyond_tolerance_returns_none(self):
        """Test that a snapshot 7201s from the target is rejected."""
        history = history_of((NOW - DAY + 7201, {"A": 100.0}))

        assert compute_24h_change(history, "A", 120.0, now=NOW) is None

    def test_at_tolerance_is_accepted(self):
        """Test that a snapshot exactly 7200s from the target is used."""
        history = history_of((NOW - DAY - 7200, {"A": 100.0}))

        assert compute_24h_change(history, "A", 90.0, now=NOW) == pytest.approx(-10.0)

    def test_symbol_missing_from_closest_snapshot(self):
        """Test that snapshots without the symbol are skipped."""
        history = history_of(
            (NOW - DAY - 5000, {"A": 100.0}),
            (NOW - DAY, {"B": 1.0}),
        )

        assert compute_24h_change(history, "A", 150.0, now=NOW) == pytest.approx(50.0)
        assert compute_24h_change(history, "C", 150.0, now=NOW) is None

    def test_zero_historical_price_returns_none(self):
        """Test that a matched price of zero gives no change."""
        history = history_of((NOW - DAY, {"A": 0.0}))

        assert compute_24h_change(history, "A", 1.0, now=NOW) is None

    def test_custom_windows(self):
        """Test configurable lookback and tolerance."""
        history = history_of((NOW - 3600, {"A": 10.0}))

        result = compute_24h_change(history, "A", 11.0, now=NOW,
                                    lookback_seconds=3600, tolerance_seconds=0)
        assert result == pytest.approx(10.0)

    def test_result_is_unrounded(self):
        """Test that the raw percentage keeps full precision."""
        history = history_of((NOW - DAY, {"A": 3.0}))

        assert compute_24h_change(history, "A", 4.0, now=NOW) == pytest.approx(33.333333333)


class TestChangeCalculator:
    """Test ChangeCalculator class."""

    def test_uses_clock_when_now_omitted(self):
        """Test that the injected clock supplies the current time."""
        calculator = ChangeCalculator(clock=lambda: NOW)
        history = history_of((NOW - DAY, {"A": 100.0}))

        assert calculator.change(history, "A", 120.0) == pytest.approx(20.0)

    def test_rounded_change(self):
        """Test presentation rounding to two decimals."""
        calculator = ChangeCalculator(clock=lambda: NOW)
        history = history_of((NOW - DAY, {"A": 3.0}))

        assert calculator.rounded_change(history, "A", 4.0) == 33.33
        assert calculator.rounded_change(history, "B", 4.0) is None

    def test_configured_windows(self):
        """Test that the calculator passes its windows through."""
        calculator = ChangeCalculator(lookback_seconds=3600, tolerance_seconds=60, clock=lambda: NOW)
        history = history_of((NOW - 3600 - 61, {"A": 1.0}))

        assert calculator.change(history, "A", 2.0) is None
