"""
Posada Market API - cached Cardano token market data served as JSON.

This package aggregates token prices, volumes, top movers, whale trades and
OHLCV candles from upstream providers, derives 24h price changes from its own
hourly snapshots, and keeps a community leaderboard of opted-in bot trades.
"""

__version__ = "0.1.0"
__author__ = "Posada Team"

# Lazy imports to avoid dependency issues during package setup
__all__ = [
    "ConfigurationManager",
    "ApiConfig",
    "MarketSystem",
    "SnapshotStore",
    "ChangeCalculator",
    "create_app",
]

def __getattr__(name):
    """Lazy import for package components."""
    if name == "ConfigurationManager":
        from .config import ConfigurationManager
        return ConfigurationManager
    elif name == "ApiConfig":
        from .config import ApiConfig
        return ApiConfig
    elif name == "MarketSystem":
        from .market_system import MarketSystem
        return MarketSystem
    elif name == "SnapshotStore":
        from .price_history import SnapshotStore
        return SnapshotStore
    elif name == "ChangeCalculator":
        from .price_history import ChangeCalculator
        return ChangeCalculator
    elif name == "create_app":
        from .api import create_app
        return create_app
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
