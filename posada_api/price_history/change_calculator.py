"""
Trailing price change derived from snapshot history.
"""

import logging
import time
from typing import Optional

from .models import SnapshotHistory

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_SECONDS = 86400
DEFAULT_TOLERANCE_SECONDS = 7200


def compute_24h_change(
    history: SnapshotHistory,
    symbol: str,
    current_price: float,
    now: Optional[int] = None,
    lookback_seconds: int = DEFAULT_LOOKBACK_SECONDS,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
) -> Optional[float]:
    """
    Percentage change of symbol against the snapshot closest to now - lookback.

    Only snapshots carrying a price for the symbol are considered. On equal
    distances the earlier snapshot in history order wins.

    Args:
        history: Snapshot history to search
        symbol: Symbol to look up
        current_price: Latest price of the symbol
        now: Current time in epoch seconds (defaults to the wall clock)
        lookback_seconds: Distance of the target time from now
        tolerance_seconds: Largest accepted distance between match and target

    Returns:
        Unrounded percentage change, or None when history cannot support one
    """
    if not history.snapshots or current_price is None or current_price <= 0:
        return None

    if now is None:
        now = int(time.time())
    target = now - lookback_seconds

    matched_price = None
    matched_distance = None
    for snapshot in history.snapshots:
        price = snapshot.prices.get(symbol)
        if price is None:
            continue
        distance = abs(snapshot.timestamp - target)
        if matched_distance is None or distance < matched_distance:
            matched_price = price
            matched_distance = distance

    if matched_price is None:
        return None

    if matched_distance > tolerance_seconds:
        logger.debug(f"Closest {symbol} snapshot is {matched_distance}s from target; too far")
        return None

    if matched_price <= 0:
        return None

    return (current_price - matched_price) / matched_price * 100


class ChangeCalculator:
    """Change calculator bound to configured lookback and tolerance windows."""

    def __init__(
        self,
        lookback_seconds: int = DEFAULT_LOOKBACK_SECONDS,
        tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
        clock=time.time,
    ):
        self.lookback_seconds = lookback_seconds
        self.tolerance_seconds = tolerance_seconds
        self._clock = clock

    def change(
        self,
        history: SnapshotHistory,
        symbol: str,
        current_price: Optional[float],
        now: Optional[int] = None,
    ) -> Optional[float]:
        if now is None:
            now = int(self._clock())
        return compute_24h_change(
            history,
            symbol,
            current_price,
            now=now,
            lookback_seconds=self.lookback_seconds,
            tolerance_seconds=self.tolerance_seconds,
        )

    def rounded_change(
        self,
        history: SnapshotHistory,
        symbol: str,
        current_price: Optional[float],
        now: Optional[int] = None,
        digits: int = 2,
    ) -> Optional[float]:
        """Change rounded for presentation; None stays None."""
        value = self.change(history, symbol, current_price, now=now)
        return round(value, digits) if value is not None else None
