"""
Price history module for hourly snapshots and trailing 24h change.

This module keeps a rolling window of price snapshots on disk and derives
percentage changes by matching the snapshot closest to 24 hours ago.
"""

from .change_calculator import ChangeCalculator, compute_24h_change
from .models import PriceSnapshot, SnapshotHistory
from .snapshot_store import SnapshotStore, prune_snapshots, record_snapshot_if_due

__all__ = [
    "ChangeCalculator",
    "compute_24h_change",
    "PriceSnapshot",
    "SnapshotHistory",
    "SnapshotStore",
    "prune_snapshots",
    "record_snapshot_if_due",
]
