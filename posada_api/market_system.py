"""
Wiring of storage, upstream clients and services for one running API.
"""

import logging
import time
from typing import Optional

from .cache import ResponseCache
from .config.models import ApiConfig
from .leaderboard import LeaderboardService, TradeLedger
from .market import MoversService, OhlcvService, TokenService, WhaleService
from .persistence import BlobStore, FileBlobStore, JsonStore
from .price_history import ChangeCalculator, SnapshotStore
from .upstream import MinswapClient, TapToolsClient

logger = logging.getLogger(__name__)


class MarketSystem:
    """Builds every collaborator once so the HTTP app and the CLI share them."""

    def __init__(
        self,
        config: ApiConfig,
        blob_store: Optional[BlobStore] = None,
        minswap: Optional[MinswapClient] = None,
        taptools: Optional[TapToolsClient] = None,
        clock=time.time,
    ):
        """
        Initialize the market system.

        Args:
            config: API configuration
            blob_store: Storage backend (optional, defaults to files under config.data_dir)
            minswap: Minswap client (optional, built from config if None)
            taptools: TapTools client (optional, built from config if None)
            clock: Time source returning epoch seconds
        """
        self.config = config
        self.clock = clock

        self.blob_store = blob_store or FileBlobStore(config.data_dir)
        self.store = JsonStore(self.blob_store)
        self.cache = ResponseCache(self.store, clock=clock)

        self.snapshot_store = SnapshotStore(
            self.store,
            min_interval_seconds=config.snapshot_interval_seconds,
            retention_seconds=config.history_retention_seconds,
            clock=clock,
        )
        self.change_calculator = ChangeCalculator(
            lookback_seconds=config.change_lookback_seconds,
            tolerance_seconds=config.change_tolerance_seconds,
            clock=clock,
        )

        self.minswap = minswap or MinswapClient(
            config.minswap_url,
            timeout=config.minswap_timeout,
            retry_delay=config.rate_limit_retry_delay,
        )
        if taptools is None:
            if not config.taptools_api_key:
                logger.warning("No TapTools API key configured; TapTools calls will be rejected")
            taptools = TapToolsClient(
                config.taptools_api_key,
                base_url=config.taptools_base_url,
                timeout=config.taptools_timeout,
                ohlcv_timeout=config.ohlcv_timeout,
            )
        self.taptools = taptools

        self.tokens = TokenService(config, self.cache, self.snapshot_store, self.change_calculator,
                                   self.minswap, self.taptools, clock=clock)
        self.movers = MoversService(config, self.cache, self.tokens, self.taptools, clock=clock)
        self.whales = WhaleService(config, self.cache, self.tokens, self.taptools, clock=clock)
        self.ohlcv = OhlcvService(config, self.cache, self.tokens, self.taptools, clock=clock)
        self.leaderboard = LeaderboardService(
            config,
            TradeLedger(self.store, max_trades=config.leaderboard_max_trades,
                        username_max_length=config.username_max_length, clock=clock),
            clock=clock,
        )

        logger.info(f"MarketSystem initialized with data directory {config.data_dir}")
