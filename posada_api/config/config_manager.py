"""
Configuration manager for loading and validating YAML configuration files.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import ApiConfig


logger = logging.getLogger(__name__)


class ConfigurationManager:
    """Manages loading and validation of YAML configuration files."""

    DEFAULT_CONFIG_FILENAME = "config.yaml"
    API_KEY_ENV_VAR = "TAPTOOLS_API_KEY"

    def load_config(self, config_path: Optional[str] = None) -> ApiConfig:
        """
        Load and validate configuration from YAML file.

        Args:
            config_path: Path to configuration file. If None, uses default.

        Returns:
            Validated ApiConfig instance.
        """
        if config_path is None:
            config_path = self.get_default_config_path()

        try:
            config_dict = self._load_yaml_file(config_path)
        except Exception as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            logger.info("Using default configuration")
            config_dict = {}

        return self.validate_config(config_dict)

    def validate_config(self, config: Dict[str, Any]) -> ApiConfig:
        """
        Validate configuration dictionary using Pydantic.

        The TapTools key from the environment, when set, takes precedence
        over the file value.

        Args:
            config: Configuration dictionary to validate.

        Returns:
            Validated ApiConfig instance.
        """
        config = dict(config)
        env_key = os.environ.get(self.API_KEY_ENV_VAR)
        if env_key:
            config["taptools_api_key"] = env_key

        try:
            return ApiConfig(**config)
        except Exception as e:
            logger.warning(f"Configuration validation failed: {e}")
            logger.info("Using default configuration")
            if env_key:
                return ApiConfig(taptools_api_key=env_key)
            return ApiConfig()

    def get_default_config_path(self) -> str:
        """Get the default configuration file path."""
        return self.DEFAULT_CONFIG_FILENAME

    def _load_yaml_file(self, file_path: str) -> Dict[str, Any]:
        """Load YAML file and return as dictionary."""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r', encoding='utf-8') as file:
            data = yaml.safe_load(file) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {file_path}")
        return data
