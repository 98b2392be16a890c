"""
Hourly price snapshot store with retention pruning.
"""

import logging
import time
from typing import List, Mapping, Optional

from pydantic import ValidationError

from ..persistence import JsonStore
from .models import PriceSnapshot, SnapshotHistory

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_SECONDS = 3600
DEFAULT_RETENTION_SECONDS = 90000


def prune_snapshots(snapshots: List[PriceSnapshot], now: int, retention_seconds: int) -> List[PriceSnapshot]:
    """Keep only snapshots taken at or after now - retention_seconds, preserving order."""
    cutoff = now - retention_seconds
    return [s for s in snapshots if s.timestamp >= cutoff]


def record_snapshot_if_due(
    history: SnapshotHistory,
    current_prices: Mapping[str, float],
    now: int,
    min_interval_seconds: int = DEFAULT_MIN_INTERVAL_SECONDS,
    retention_seconds: int = DEFAULT_RETENTION_SECONDS,
) -> SnapshotHistory:
    """
    Append a snapshot of current_prices when the minimum interval has elapsed.

    The interval check is inclusive: a call exactly min_interval_seconds after
    the last snapshot records a new one. An empty history has a last snapshot
    time of 0 and therefore always records.

    Args:
        history: Current snapshot history (not modified)
        current_prices: Symbol to price mapping to record
        now: Current time in epoch seconds
        min_interval_seconds: Minimum spacing between snapshots
        retention_seconds: Snapshots older than this are pruned after appending

    Returns:
        The same history object if no snapshot was due, otherwise a new history
    """
    if now - history.last_snapshot_time < min_interval_seconds:
        return history

    snapshot = PriceSnapshot(timestamp=now, prices=dict(current_prices))
    snapshots = prune_snapshots(history.snapshots + [snapshot], now, retention_seconds)

    return SnapshotHistory(last_snapshot_time=now, snapshots=snapshots)


class SnapshotStore:
    """Owns the persisted price history and its read-modify-write cycle."""

    HISTORY_KEY = "price_history"

    def __init__(
        self,
        store: JsonStore,
        min_interval_seconds: int = DEFAULT_MIN_INTERVAL_SECONDS,
        retention_seconds: int = DEFAULT_RETENTION_SECONDS,
        clock=time.time,
    ):
        self._store = store
        self.min_interval_seconds = min_interval_seconds
        self.retention_seconds = retention_seconds
        self._clock = clock

    def load(self) -> SnapshotHistory:
        """Load the stored history, treating absent or invalid data as empty."""
        raw = self._store.load(self.HISTORY_KEY)
        if raw is None:
            return SnapshotHistory()

        try:
            return SnapshotHistory.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Stored price history failed validation, starting fresh: {e}")
            return SnapshotHistory()

    def save(self, history: SnapshotHistory) -> bool:
        return self._store.save(self.HISTORY_KEY, history.model_dump(mode='json'))

    def record_if_due(self, current_prices: Mapping[str, float], now: Optional[int] = None) -> SnapshotHistory:
        """
        Record a snapshot if one is due and persist the result.

        When the save fails the update is discarded and the previously stored
        history is returned; the next call will try again.

        Args:
            current_prices: Symbol to price mapping
            now: Current time in epoch seconds (defaults to the clock)

        Returns:
            The history to compute changes against
        """
        if now is None:
            now = int(self._clock())

        with self._store.lock(self.HISTORY_KEY):
            history = self.load()
            updated = record_snapshot_if_due(
                history,
                current_prices,
                now,
                min_interval_seconds=self.min_interval_seconds,
                retention_seconds=self.retention_seconds,
            )

            if updated is history:
                logger.debug(f"Snapshot not due; last taken at {history.last_snapshot_time}")
                return history

            if not self.save(updated):
                logger.error("Failed to persist price snapshot; update discarded")
                return history

        logger.info(f"Recorded price snapshot of {len(current_prices)} symbols, "
                    f"{len(updated.snapshots)} retained")
        return updated

    def clear(self) -> bool:
        return self._store.delete(self.HISTORY_KEY)
