"""
OHLCV history service backing the backtest page.
"""

import logging
import re
import time
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from ..cache import ResponseCache
from ..config.models import ApiConfig
from ..upstream import TapToolsClient, UpstreamError
from .tokens import TokenService

logger = logging.getLogger(__name__)

VALID_INTERVALS = ('3m', '5m', '15m', '30m', '1h', '2h', '4h', '6h', '12h', '1d', '3d', '1w', '1M')
DEFAULT_INTERVAL = '1h'

CANDLE_FIELDS = {
    'time': ('time', 'timestamp', 't'),
    'open': ('open', 'o'),
    'high': ('high', 'h'),
    'low': ('low', 'l'),
    'close': ('close', 'c'),
    'volume': ('volume', 'v'),
}

_CACHE_KEY_CHARS = re.compile(r'[^a-zA-Z0-9_]')


def normalize_interval(interval: Optional[str]) -> str:
    return interval if interval in VALID_INTERVALS else DEFAULT_INTERVAL


def normalize_periods(periods: Any, default: int = 720, maximum: int = 2000) -> int:
    """Requested candle count, capped at maximum; unusable values fall back to default."""
    try:
        value = int(periods) if periods is not None else default
    except (TypeError, ValueError):
        value = 0
    value = min(value, maximum)
    return value if value > 0 else default


def normalize_candles(raw: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Map provider candle fields onto time/open/high/low/close/volume.

    Missing or non-numeric values become 0. Candles are returned oldest
    first; candles sharing a time keep their original order.
    """
    if not raw:
        return []

    records = []
    for candle in raw:
        record = {}
        for field, aliases in CANDLE_FIELDS.items():
            value = None
            for alias in aliases:
                if candle.get(alias) is not None:
                    value = candle[alias]
                    break
            record[field] = value
        records.append(record)

    df = pd.DataFrame.from_records(records, columns=list(CANDLE_FIELDS))
    df['time'] = pd.to_numeric(df['time'], errors='coerce').fillna(0).astype('int64')
    for column in ('open', 'high', 'low', 'close', 'volume'):
        df[column] = pd.to_numeric(df[column], errors='coerce').fillna(0.0).astype('float64')

    df = df.sort_values('time', kind='stable').reset_index(drop=True)
    return df.to_dict('records')


class OhlcvService:
    """Builds the /api/backtest payload."""

    def __init__(self, config: ApiConfig, cache: ResponseCache, tokens: TokenService,
                 taptools: TapToolsClient, clock=time.time):
        self.config = config
        self._cache = cache
        self._tokens = tokens
        self._taptools = taptools
        self._clock = clock

    def cache_key(self, ticker: str, unit: str, interval: str) -> str:
        name = _CACHE_KEY_CHARS.sub('', ticker or unit[:20]) or 'unknown'
        return f"ohlcv_{name}_{interval}"

    def build_payload(
        self,
        unit: Optional[str] = None,
        ticker: Optional[str] = None,
        interval: Optional[str] = None,
        periods: Any = None,
    ) -> Dict[str, Any]:
        """
        Candles for a token addressed by unit or ticker.

        Args:
            unit: TapTools token unit (policy id + hex name)
            ticker: Ticker resolved to a unit through the cached token list
            interval: Candle interval; invalid values become 1h
            periods: Number of candles

        Returns:
            Payload with ticker, unit, interval, candles and updated_at, or an error payload
        """
        unit = unit or ''
        ticker = ticker or ''
        interval = normalize_interval(interval)
        periods = normalize_periods(periods, self.config.ohlcv_default_periods, self.config.ohlcv_max_periods)

        tokens = self._tokens.cached_tokens()
        units_by_ticker = {tk.upper(): t.token_id for tk, t in tokens.items() if t.token_id}
        tickers_by_unit = {t.token_id: tk for tk, t in tokens.items() if t.token_id}

        if not unit and ticker:
            unit = units_by_ticker.get(ticker.upper(), '')
        if not unit:
            return {'error': 'missing unit or ticker parameter'}

        resolved_ticker = tickers_by_unit.get(unit, ticker)
        failures: List[UpstreamError] = []

        def fetch() -> Optional[Dict[str, Any]]:
            try:
                raw = self._taptools.ohlcv(unit, interval, periods)
            except UpstreamError as e:
                failures.append(e)
                raise
            return {
                'ticker': resolved_ticker,
                'unit': unit,
                'interval': interval,
                'candles': normalize_candles(raw),
                'updated_at': int(self._clock()),
            }

        key = self.cache_key(resolved_ticker, unit, interval)
        result = self._cache.get_or_fetch(key, self.config.ohlcv_cache_ttl, fetch)
        if result.data is not None:
            return result.data

        error = failures[-1] if failures else None
        if error is not None and error.status_code is not None:
            message = f"TapTools returned HTTP {error.status_code}"
        else:
            message = 'invalid response'
        return {'error': message, 'candles': []}
