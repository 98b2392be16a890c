"""
Property-based tests for configuration loading and validation.
"""

import shutil
import tempfile
from pathlib import Path

import pytest
import yaml
from hypothesis import given, settings, strategies as st
from pydantic import ValidationError

from posada_api.config.config_manager import ConfigurationManager
from posada_api.config.models import ApiConfig


class TestConfigurationProperties:
    """Property-based tests for configuration management."""

    @given(
        token_cache_ttl=st.integers(min_value=0, max_value=86400),
        snapshot_interval_seconds=st.integers(min_value=1, max_value=86400),
        change_tolerance_seconds=st.integers(min_value=0, max_value=86400),
        whale_threshold_ada=st.integers(min_value=1, max_value=10**9),
        port=st.integers(min_value=1, max_value=65535),
    )
    @settings(max_examples=50)
    def test_configuration_loading_and_validation_consistency(
        self,
        token_cache_ttl: int,
        snapshot_interval_seconds: int,
        change_tolerance_seconds: int,
        whale_threshold_ada: int,
        port: int,
    ):
        """
        Property: Configuration Loading and Validation Consistency

        For any YAML configuration with values inside their ranges, every
        field survives a write and reload unchanged.
        """
        config_data = {
            "token_cache_ttl": token_cache_ttl,
            "snapshot_interval_seconds": snapshot_interval_seconds,
            "change_tolerance_seconds": change_tolerance_seconds,
            "whale_threshold_ada": whale_threshold_ada,
            "port": port,
        }

        temp_dir = tempfile.mkdtemp()
        try:
            path = Path(temp_dir) / "config.yaml"
            with open(path, "w") as f:
                yaml.dump(config_data, f)

            config = ConfigurationManager().load_config(str(path))
        finally:
            shutil.rmtree(temp_dir)

        assert config.token_cache_ttl == token_cache_ttl
        assert config.snapshot_interval_seconds == snapshot_interval_seconds
        assert config.change_tolerance_seconds == change_tolerance_seconds
        assert config.whale_threshold_ada == whale_threshold_ada
        assert config.port == port

    @given(
        retention=st.integers(min_value=1, max_value=200000),
        lookback=st.integers(min_value=1, max_value=200000),
    )
    def test_retention_must_cover_lookback(self, retention: int, lookback: int):
        """
        Property: History Window Consistency

        A configuration is accepted exactly when the retention window is at
        least as long as the lookback window.
        """
        if retention >= lookback:
            config = ApiConfig(history_retention_seconds=retention, change_lookback_seconds=lookback)
            assert config.history_retention_seconds == retention
        else:
            with pytest.raises(ValidationError):
                ApiConfig(history_retention_seconds=retention, change_lookback_seconds=lookback)

    @given(port=st.one_of(st.integers(max_value=0), st.integers(min_value=65536)))
    def test_out_of_range_values_fall_back_to_defaults(self, port: int):
        """
        Property: Invalid Configuration Fallback

        Any out-of-range value makes validation fall back to the defaults.
        """
        config = ConfigurationManager().validate_config({"port": port})

        assert config.port == ApiConfig().port
        assert config.data_dir == ApiConfig().data_dir
