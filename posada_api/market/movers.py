"""
Top movers and market pulse service.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from ..cache import ResponseCache
from ..config.models import ApiConfig
from ..upstream import TapToolsClient, UpstreamError
from .tokens import TokenService, derive_ada_usd

logger = logging.getLogger(__name__)

TIMEFRAMES = ("1h", "4h", "24h", "7d")


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def rank_movers(movers: List[Dict[str, Any]], size: int) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Split movers into gainers (best first) and losers (worst first).

    Movers without a 24h change are ignored and flat ones belong to neither
    list. Sorts are stable, so equal changes keep their listing order.
    """
    with_change = [m for m in movers if m.get('chg_24h') is not None]
    gainers = sorted((m for m in with_change if m['chg_24h'] > 0), key=lambda m: m['chg_24h'], reverse=True)
    losers = sorted((m for m in with_change if m['chg_24h'] < 0), key=lambda m: m['chg_24h'])
    return gainers[:size], losers[:size]


class MoversService:
    """Builds the /api/movers payload from TapTools price changes."""

    CACHE_KEY = "movers_cache"

    def __init__(self, config: ApiConfig, cache: ResponseCache, tokens: TokenService,
                 taptools: TapToolsClient, clock=time.time):
        self.config = config
        self._cache = cache
        self._tokens = tokens
        self._taptools = taptools
        self._clock = clock

    def build_payload(self) -> Dict[str, Any]:
        result = self._cache.get_or_fetch(self.CACHE_KEY, self.config.movers_cache_ttl, self._compute)
        if result.data is None:
            return {'error': 'no token data available'}
        return result.data

    def _compute(self) -> Optional[Dict[str, Any]]:
        tokens = self._tokens.cached_tokens()
        if not tokens:
            logger.warning("No cached token list; cannot compute movers")
            return None

        movers = []
        for ticker, token in tokens.items():
            if not token.token_id:
                continue
            try:
                changes = self._taptools.price_changes(token.token_id, TIMEFRAMES)
            except UpstreamError as e:
                logger.warning(f"Price changes for {ticker} unavailable: {e}")
                continue

            movers.append({
                'ticker': ticker,
                'name': token.name,
                'price_ada': token.price_ada,
                'price_usd': token.price_usd,
                'chg_1h': _as_float(changes.get('1h')),
                'chg_4h': _as_float(changes.get('4h')),
                'chg_24h': _as_float(changes.get('24h')),
                'chg_7d': _as_float(changes.get('7d')),
            })

        gainers, losers = rank_movers(movers, self.config.movers_list_size)

        ada_usd = derive_ada_usd(tokens.values())
        market = {
            'dex_volume': None,
            'active_addresses': None,
            'ada_price': round(ada_usd, 4) if ada_usd is not None else None,
        }
        try:
            stats = self._taptools.market_stats(quote="USD")
            market['dex_volume'] = stats.get('totalVolume', stats.get('volume'))
            market['active_addresses'] = stats.get('activeAddresses')
        except UpstreamError as e:
            logger.warning(f"Market stats unavailable: {e}")

        return {
            'gainers': gainers,
            'losers': losers,
            'all': movers,
            'market': market,
            'top_volume': self._top_volume(),
            'updated_at': int(self._clock()),
        }

    def _top_volume(self) -> List[Dict[str, Any]]:
        try:
            rows = self._taptools.top_volume()
        except UpstreamError as e:
            logger.warning(f"Top volume unavailable: {e}")
            return []
        return [
            {'ticker': str(row.get('ticker') or '').upper(), 'volume': row.get('volume') or 0}
            for row in rows[:self.config.top_volume_size]
        ]
