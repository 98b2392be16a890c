"""
Response caching module: cache-or-fetch with TTLs and stale fallback.
"""

from .models import CacheEntry, CacheResult, CacheStatus
from .response_cache import ResponseCache

__all__ = ["CacheEntry", "CacheResult", "CacheStatus", "ResponseCache"]
