"""
Configuration models using Pydantic for validation.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator


DEFAULT_STABLE_TICKERS = ["USDM", "USDA", "DJED", "IUSD", "SHEN", "OADA", "USDC", "USDT", "DAI"]


class ApiConfig(BaseModel):
    """Configuration model for the market data API."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid"
    )

    # Server and storage
    data_dir: str = Field(default="data", description="Directory for cache and history files")
    host: str = Field(default="127.0.0.1", description="Address the HTTP server binds to")
    port: int = Field(default=8000, ge=1, le=65535, description="Port the HTTP server listens on")

    # Upstream providers
    minswap_url: str = Field(
        default="https://agg-api.minswap.org/aggregator/tokens",
        description="Minswap aggregator token search endpoint"
    )
    taptools_base_url: str = Field(
        default="https://openapi.taptools.io/api/v1",
        description="TapTools API base URL"
    )
    taptools_api_key: str = Field(default="", description="TapTools API key")
    minswap_timeout: float = Field(default=30.0, gt=0.0, description="Minswap request timeout in seconds")
    taptools_timeout: float = Field(default=15.0, gt=0.0, description="TapTools request timeout in seconds")
    ohlcv_timeout: float = Field(default=20.0, gt=0.0, description="OHLCV request timeout in seconds")
    rate_limit_retry_delay: float = Field(
        default=5.0,
        ge=0.0,
        description="Seconds to wait before the single retry of a rate-limited request"
    )

    # Cache TTLs
    token_cache_ttl: int = Field(default=300, ge=0, description="Token list cache TTL in seconds")
    volume_cache_ttl: int = Field(default=300, ge=0, description="24h volume cache TTL in seconds")
    movers_cache_ttl: int = Field(default=300, ge=0, description="Top movers cache TTL in seconds")
    whales_cache_ttl: int = Field(default=120, ge=0, description="Whale trades cache TTL in seconds")
    ohlcv_cache_ttl: int = Field(default=900, ge=0, description="OHLCV cache TTL in seconds")

    # Price history
    snapshot_interval_seconds: int = Field(
        default=3600,
        ge=1,
        description="Minimum number of seconds between price snapshots"
    )
    history_retention_seconds: int = Field(
        default=90000,
        ge=1,
        description="Snapshots older than this many seconds are pruned"
    )
    change_lookback_seconds: int = Field(
        default=86400,
        ge=1,
        description="How far back the price change is measured"
    )
    change_tolerance_seconds: int = Field(
        default=7200,
        ge=0,
        description="Maximum distance between a snapshot and the lookback target"
    )

    # Token list
    token_limit: int = Field(default=31, ge=1, description="Maximum number of tokens to list")
    token_page_size: int = Field(default=20, ge=1, le=100, description="Tokens requested per Minswap page")
    token_max_pages: int = Field(default=3, ge=1, description="Maximum Minswap pages to walk")
    stable_tickers: List[str] = Field(
        default_factory=lambda: list(DEFAULT_STABLE_TICKERS),
        description="Stablecoin tickers excluded from the token list"
    )

    # Whales
    whale_threshold_ada: int = Field(default=5000, ge=1, description="Minimum ADA amount of a whale trade")
    whale_block_window: int = Field(default=50, ge=1, description="Number of recent blocks scanned for swaps")
    whale_max_trades: int = Field(default=50, ge=1, description="Maximum whale trades returned")

    # Movers
    movers_list_size: int = Field(default=15, ge=1, description="Gainers and losers returned")
    top_volume_size: int = Field(default=5, ge=1, description="Tokens in the top volume list")

    # OHLCV
    ohlcv_default_periods: int = Field(default=720, ge=1, description="Default number of candles")
    ohlcv_max_periods: int = Field(default=2000, ge=1, description="Upper bound on requested candles")

    # Leaderboard
    leaderboard_max_trades: int = Field(default=500, ge=1, description="Number of recorded trades kept")
    leaderboard_size: int = Field(default=20, ge=1, description="Rows in the leaderboard")
    recent_trades_size: int = Field(default=20, ge=1, description="Recent trades returned")
    username_max_length: int = Field(default=20, ge=1, description="Maximum stored username length")

    @model_validator(mode="after")
    def check_history_windows(self) -> "ApiConfig":
        if self.history_retention_seconds < self.change_lookback_seconds:
            raise ValueError("history_retention_seconds must cover change_lookback_seconds")
        return self
