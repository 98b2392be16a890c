"""
Data models for hourly price snapshots.
"""

import math
from typing import Any, Dict, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PriceSnapshot(BaseModel):
    """Prices of every tracked symbol at one instant. Immutable once written."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    timestamp: int = Field(validation_alias=AliasChoices("timestamp", "ts"))
    prices: Dict[str, float] = Field(default_factory=dict)

    @field_validator("prices", mode="before")
    @classmethod
    def drop_unpriced_symbols(cls, value: Any) -> Dict[str, Any]:
        """Symbols stored without a usable numeric price are left out."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("prices must be a mapping of symbol to price")

        cleaned = {}
        for symbol, price in value.items():
            if isinstance(price, bool) or not isinstance(price, (int, float)):
                continue
            if math.isnan(price) or math.isinf(price):
                continue
            cleaned[str(symbol)] = float(price)
        return cleaned


class SnapshotHistory(BaseModel):
    """Rolling window of snapshots in chronological order."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    last_snapshot_time: int = Field(
        default=0,
        validation_alias=AliasChoices("last_snapshot_time", "last_snapshot")
    )
    snapshots: List[PriceSnapshot] = Field(default_factory=list)

    @field_validator("last_snapshot_time", mode="before")
    @classmethod
    def default_missing_time(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("snapshots", mode="before")
    @classmethod
    def default_missing_snapshots(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_empty(self) -> bool:
        return not self.snapshots

    def symbols(self) -> List[str]:
        """All symbols seen in any retained snapshot, in first-seen order."""
        seen: Dict[str, None] = {}
        for snapshot in self.snapshots:
            for symbol in snapshot.prices:
                seen.setdefault(symbol, None)
        return list(seen)
