"""
Whale watch service: large swaps from recent blocks.
"""

import logging
import time
from datetime import timezone
from typing import Any, Dict, List, Mapping, Optional

from dateutil import parser as date_parser

from ..cache import ResponseCache
from ..config.models import ApiConfig
from ..upstream import TapToolsClient, UpstreamError
from .tokens import TokenService

logger = logging.getLogger(__name__)

LOVELACE_PER_ADA = 1_000_000


def _first_present(event: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if event.get(key) is not None:
            return event[key]
    return None


def ada_amount(event: Mapping[str, Any]) -> float:
    """
    ADA side of a swap.

    Providers report either ADA or lovelace; anything above one million is
    taken to be lovelace.
    """
    raw = _first_present(event, 'adaAmount', 'ada_amount', 'lovelace')
    try:
        amount = abs(float(raw)) if raw is not None else 0.0
    except (TypeError, ValueError):
        return 0.0
    if amount > LOVELACE_PER_ADA:
        amount = amount / LOVELACE_PER_ADA
    return amount


def event_time(event: Mapping[str, Any], default: int) -> int:
    """Event time in epoch seconds from a number or an ISO-8601 string."""
    raw = _first_present(event, 'timestamp', 'time')
    if raw is None:
        return default
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return int(raw)
    text = str(raw).strip()
    try:
        return int(float(text))
    except ValueError:
        pass
    try:
        parsed = date_parser.isoparse(text)
    except ValueError:
        logger.debug(f"Unparseable event time {raw!r}")
        return default
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def event_direction(event: Mapping[str, Any]) -> str:
    if event.get('type') is not None:
        return 'SELL' if 'sell' in str(event['type']).lower() else 'BUY'
    if event.get('direction') is not None:
        return str(event['direction']).upper()
    return 'BUY'


def event_token(event: Mapping[str, Any], ticker_map: Mapping[str, str]) -> str:
    unit = str(_first_present(event, 'unit', 'token') or '')
    ticker = ticker_map.get(unit, '')
    if not ticker and unit:
        ticker = unit[-8:].upper()
    return ticker or unit[:12]


def filter_whale_trades(
    events: List[Mapping[str, Any]],
    ticker_map: Mapping[str, str],
    threshold: float,
    now: int,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    """Keep swaps at or above the ADA threshold, newest first, at most limit."""
    trades = []
    for event in events:
        amount = ada_amount(event)
        if amount < threshold:
            continue

        trades.append({
            'time': event_time(event, now),
            'tx_hash': _first_present(event, 'txHash', 'tx_hash') or '',
            'token': event_token(event, ticker_map),
            'ada_amount': round(amount),
            'direction': event_direction(event),
            'dex': event.get('dex') or '',
        })

    trades.sort(key=lambda t: t['time'], reverse=True)
    return trades[:limit]


class WhaleService:
    """Builds the /api/whales payload."""

    CACHE_KEY = "whales_cache"

    def __init__(self, config: ApiConfig, cache: ResponseCache, tokens: TokenService,
                 taptools: TapToolsClient, clock=time.time):
        self.config = config
        self._cache = cache
        self._tokens = tokens
        self._taptools = taptools
        self._clock = clock

    def build_payload(self) -> Dict[str, Any]:
        result = self._cache.get_or_fetch(self.CACHE_KEY, self.config.whales_cache_ttl, self._compute)
        if result.data is None:
            return {
                'trades': [],
                'threshold': self.config.whale_threshold_ada,
                'error': 'could not get latest block',
            }
        return result.data

    def _compute(self) -> Optional[Dict[str, Any]]:
        try:
            latest = self._taptools.latest_block()
        except UpstreamError as e:
            logger.warning(f"Latest block unavailable: {e}")
            return None

        try:
            events = self._taptools.swap_events(latest - self.config.whale_block_window, latest)
        except UpstreamError as e:
            logger.warning(f"Swap events unavailable: {e}")
            events = []

        ticker_map = {t.token_id: ticker for ticker, t in self._tokens.cached_tokens().items() if t.token_id}
        now = int(self._clock())
        trades = filter_whale_trades(
            events,
            ticker_map,
            self.config.whale_threshold_ada,
            now,
            limit=self.config.whale_max_trades,
        )
        logger.info(f"Found {len(trades)} whale trades in {len(events)} swaps up to block {latest}")

        return {
            'trades': trades,
            'threshold': self.config.whale_threshold_ada,
            'block': latest,
            'updated_at': now,
        }
