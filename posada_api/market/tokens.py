"""
Token list service: prices, 24h volume and snapshot-derived 24h change.
"""

import logging
import time
from typing import Any, Dict, Iterable, Mapping, Optional

from pydantic import ValidationError

from ..cache import ResponseCache
from ..config.models import ApiConfig
from ..price_history import ChangeCalculator, SnapshotStore
from ..upstream import MinswapClient, TapToolsClient, Token
from .descriptions import describe

logger = logging.getLogger(__name__)

ADA_USD_SYMBOL = "ADA_USD"


def derive_ada_usd(tokens: Iterable[Token]) -> Optional[float]:
    """ADA/USD rate implied by the first token quoted in both ADA and USD."""
    for token in tokens:
        rate = token.ada_usd_rate()
        if rate is not None:
            return rate
    return None


def snapshot_prices(tokens: Mapping[str, Token]) -> Dict[str, float]:
    """Prices recorded in an hourly snapshot: ADA price per ticker plus ADA_USD."""
    prices = {ticker: t.price_ada for ticker, t in tokens.items() if t.price_ada is not None}
    ada_usd = derive_ada_usd(tokens.values())
    if ada_usd:
        prices[ADA_USD_SYMBOL] = ada_usd
    return prices


def parse_token_map(data: Any) -> Dict[str, Token]:
    """Rebuild Token models from a cached ticker -> dict mapping."""
    if not isinstance(data, dict):
        return {}
    tokens = {}
    for ticker, raw in data.items():
        try:
            tokens[ticker] = Token.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Skipping malformed cached token {ticker}: {e}")
    return tokens


class TokenService:
    """Builds the /api/tokens payload."""

    TOKENS_KEY = "tokens_cache"
    VOLUME_KEY = "volume_cache"

    def __init__(
        self,
        config: ApiConfig,
        cache: ResponseCache,
        snapshot_store: SnapshotStore,
        change_calculator: ChangeCalculator,
        minswap: MinswapClient,
        taptools: TapToolsClient,
        clock=time.time,
    ):
        self.config = config
        self._cache = cache
        self._snapshots = snapshot_store
        self._changes = change_calculator
        self._minswap = minswap
        self._taptools = taptools
        self._clock = clock

    def get_tokens(self) -> Dict[str, Token]:
        """Token list, refreshed from Minswap when the cache is stale."""
        result = self._cache.get_or_fetch(self.TOKENS_KEY, self.config.token_cache_ttl, self._fetch_tokens)
        return parse_token_map(result.data)

    def cached_tokens(self) -> Dict[str, Token]:
        """Last cached token list regardless of age, without calling upstream."""
        entry = self._cache.read(self.TOKENS_KEY)
        return parse_token_map(entry.data) if entry else {}

    def get_volumes(self) -> Dict[str, float]:
        """24h volume in ADA by ticker."""
        result = self._cache.get_or_fetch(self.VOLUME_KEY, self.config.volume_cache_ttl, self._fetch_volumes)
        return result.data if isinstance(result.data, dict) else {}

    def _fetch_tokens(self) -> Optional[Dict[str, Any]]:
        tokens = self._minswap.fetch_tokens(
            stables=self.config.stable_tickers,
            limit=self.config.token_limit,
            page_size=self.config.token_page_size,
            max_pages=self.config.token_max_pages,
        )
        if not tokens:
            return None
        return {ticker: token.model_dump() for ticker, token in tokens.items()}

    def _fetch_volumes(self) -> Optional[Dict[str, float]]:
        volumes = {}
        for row in self._taptools.top_volume():
            ticker = str(row.get('ticker') or '').upper()
            volume = row.get('volume')
            if not ticker or volume is None:
                continue
            try:
                volumes[ticker] = round(float(volume), 2)
            except (TypeError, ValueError):
                continue
        return volumes or None

    def build_payload(self, now: Optional[int] = None) -> Dict[str, Any]:
        """
        Assemble the token table with ADA first.

        Args:
            now: Current time in epoch seconds (defaults to the clock)

        Returns:
            Response payload with tokens, updated_at and source
        """
        if now is None:
            now = int(self._clock())

        tokens = self.get_tokens()
        prices = snapshot_prices(tokens)
        if prices:
            history = self._snapshots.record_if_due(prices, now=now)
        else:
            logger.warning("No token prices available; snapshot skipped")
            history = self._snapshots.load()
        volumes = self.get_volumes()

        ada_usd = derive_ada_usd(tokens.values())
        ada_change = None
        if ada_usd is not None:
            ada_change = self._changes.rounded_change(history, ADA_USD_SYMBOL, ada_usd, now=now)
        ada_volume = sum(volumes.values())

        rows = [{
            'rank': 1,
            'ticker': 'ADA',
            'name': 'Cardano',
            'price_ada': 1.0,
            'price_usd': round(ada_usd, 4) if ada_usd is not None else None,
            'change_24h': ada_change,
            'volume': round(ada_volume, 2) if ada_volume > 0 else None,
            'description': describe('ADA'),
            'logo': '',
        }]

        for rank, (ticker, token) in enumerate(tokens.items(), start=2):
            rows.append({
                'rank': rank,
                'ticker': ticker,
                'name': token.name,
                'price_ada': token.price_ada,
                'price_usd': token.price_usd,
                'change_24h': self._changes.rounded_change(history, ticker, token.price_ada or 0, now=now),
                'volume': volumes.get(ticker),
                'description': describe(ticker, token.name),
                'logo': token.logo,
            })

        return {
            'tokens': rows,
            'updated_at': now,
            'source': 'minswap',
        }
