"""
Market data services behind the token, movers, whales and backtest endpoints.

Each service follows the same cycle: check cache freshness, fetch from the
upstream provider when stale, reshape the response, persist and respond.
"""

from .movers import MoversService, rank_movers
from .ohlcv import OhlcvService, normalize_candles
from .tokens import TokenService, derive_ada_usd, snapshot_prices
from .whales import WhaleService, filter_whale_trades

__all__ = [
    "MoversService",
    "rank_movers",
    "OhlcvService",
    "normalize_candles",
    "TokenService",
    "derive_ada_usd",
    "snapshot_prices",
    "WhaleService",
    "filter_whale_trades",
]
