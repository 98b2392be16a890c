"""
TapTools API client for volumes, price changes, chain events and candles.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .http_client import HttpClient, UpstreamError

logger = logging.getLogger(__name__)


class TapToolsClient:
    """Read-only TapTools endpoints used by the market services.

    Every method raises UpstreamError when the call fails or the payload
    does not have the expected shape.
    """

    def __init__(self, api_key: str, base_url: str = "https://openapi.taptools.io/api/v1",
                 timeout: float = 15.0, ohlcv_timeout: float = 20.0,
                 http: Optional[HttpClient] = None, ohlcv_http: Optional[HttpClient] = None):
        self.base_url = base_url.rstrip('/')
        headers = {'x-api-key': api_key, 'Accept': 'application/json'}
        self._http = http or HttpClient(timeout, headers=headers)
        self._ohlcv_http = ohlcv_http or http or HttpClient(ohlcv_timeout, headers=headers)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def top_volume(self) -> List[Dict[str, Any]]:
        """Tokens ranked by 24h volume."""
        return self._expect_list(self._http.get_json(self._url("token/top/volume")), "top volume")

    def price_changes(self, unit: str, timeframes: Sequence[str] = ("1h", "4h", "24h", "7d")) -> Dict[str, Any]:
        """Percentage price changes of a token over several timeframes."""
        data = self._http.get_json(
            self._url("token/prices/chg"),
            params={'unit': unit, 'timeframes': ",".join(timeframes)},
        )
        return self._expect_dict(data, "price changes")

    def market_stats(self, quote: str = "USD") -> Dict[str, Any]:
        """Aggregate DEX volume and active address counts."""
        return self._expect_dict(self._http.get_json(self._url("market/stats"), params={'quote': quote}),
                                 "market stats")

    def latest_block(self) -> int:
        """Current chain height."""
        data = self._expect_dict(self._http.get_json(self._url("integration/latest-block")), "latest block")
        if 'blockHeight' not in data:
            raise UpstreamError("latest block response has no blockHeight")
        try:
            return int(data['blockHeight'])
        except (TypeError, ValueError):
            raise UpstreamError(f"invalid blockHeight: {data['blockHeight']!r}")

    def swap_events(self, from_block: int, to_block: int) -> List[Dict[str, Any]]:
        """Swap events between two block heights."""
        data = self._http.get_json(
            self._url("integration/events"),
            params={'from': from_block, 'to': to_block, 'type': 'swap'},
        )
        return self._expect_list(data, "swap events")

    def ohlcv(self, unit: str, interval: str, num_intervals: int) -> List[Dict[str, Any]]:
        """Raw candles for a token."""
        data = self._ohlcv_http.get_json(
            self._url("token/ohlcv"),
            params={'unit': unit, 'interval': interval, 'numIntervals': num_intervals},
        )
        return self._expect_list(data, "ohlcv")

    @staticmethod
    def _expect_list(data: Any, what: str) -> List[Dict[str, Any]]:
        if not isinstance(data, list):
            raise UpstreamError(f"unexpected {what} payload: {type(data).__name__}")
        return [item for item in data if isinstance(item, dict)]

    @staticmethod
    def _expect_dict(data: Any, what: str) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise UpstreamError(f"unexpected {what} payload: {type(data).__name__}")
        return data
