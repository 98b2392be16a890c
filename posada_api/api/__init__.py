"""
HTTP interface module exposing the market data as JSON endpoints.
"""

from .app import create_app

__all__ = ["create_app"]
