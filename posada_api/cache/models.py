"""
Data models for cached upstream payloads.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class CacheStatus(Enum):
    """How a cached lookup was satisfied."""

    FRESH = "fresh"
    REFRESHED = "refreshed"
    STALE = "stale"
    MISS = "miss"


class CacheEntry(BaseModel):
    """Envelope stored for every cached payload."""

    model_config = ConfigDict(extra="ignore")

    ts: int
    data: Any = None


class CacheResult(BaseModel):
    """Outcome of a cache-or-fetch lookup."""

    data: Any = None
    status: CacheStatus
    cached_at: Optional[int] = None

    @property
    def available(self) -> bool:
        return self.data is not None
