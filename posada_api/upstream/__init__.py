"""
Upstream provider clients.

Minswap supplies the verified token list and prices; TapTools supplies
volumes, multi-timeframe price changes, swap events and OHLCV candles.
"""

from .http_client import HttpClient, UpstreamError
from .minswap import MinswapClient
from .models import Token
from .taptools import TapToolsClient

__all__ = ["HttpClient", "UpstreamError", "MinswapClient", "Token", "TapToolsClient"]
