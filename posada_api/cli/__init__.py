"""
Command-line interface module for the market data API.

This module provides the CLI for serving the API and for inspecting and
maintaining the price history and response caches.
"""

from .cli import main

__all__ = ["main"]
