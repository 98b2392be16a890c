"""
Configuration management module for the market data API.

This module handles loading, validating, and managing YAML configuration files
using Pydantic for robust validation and type safety.
"""

from .config_manager import ConfigurationManager
from .models import ApiConfig

__all__ = ["ConfigurationManager", "ApiConfig"]
