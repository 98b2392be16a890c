"""
Unit tests for CLI interface functionality.
"""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from posada_api.cli.cli import (
    clear_cache,
    create_parser,
    format_change,
    format_history_info,
    main,
)
from posada_api.config.models import ApiConfig
from posada_api.market_system import MarketSystem
from posada_api.persistence import FileBlobStore, JsonStore, MemoryBlobStore
from posada_api.price_history import PriceSnapshot, SnapshotHistory, SnapshotStore

NOW = 1_700_000_000


class TestCreateParser:
    """Test argument parser configuration."""

    def test_defaults(self):
        args = create_parser().parse_args([])

        assert args.log_level == "INFO"
        assert args.serve is False
        assert args.clear_cache is None
        assert args.change is None

    def test_change_takes_symbol_and_price(self):
        args = create_parser().parse_args(["--change", "SNEK", "0.01"])

        assert args.change == ["SNEK", "0.01"]

    def test_clear_cache_defaults_to_all(self):
        assert create_parser().parse_args(["--clear-cache"]).clear_cache == "all"
        assert create_parser().parse_args(["--clear-cache", "movers_cache"]).clear_cache == "movers_cache"

    def test_serve_options(self):
        args = create_parser().parse_args(["--serve", "--host", "0.0.0.0", "--port", "9000"])

        assert args.serve is True
        assert args.host == "0.0.0.0"
        assert args.port == 9000

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--log-level", "TRACE"])


class TestFormatting:
    """Test output formatting functions."""

    def test_history_info_empty(self):
        text = format_history_info(SnapshotHistory(), NOW)

        assert "Last Snapshot: never" in text
        assert "No snapshots recorded yet" in text

    def test_history_info(self):
        history = SnapshotHistory(last_snapshot_time=NOW, snapshots=[
            PriceSnapshot(timestamp=NOW - 7200, prices={"A": 1.0}),
            PriceSnapshot(timestamp=NOW, prices={"A": 1.0, "B": 2.0}),
        ])

        text = format_history_info(history, NOW)

        assert "Snapshots Retained: 2" in text
        assert "(2.0h ago)" in text
        assert "Symbols Tracked: 2" in text

    def test_format_change(self):
        assert format_change("SNEK", 0.012, 20.0) == "SNEK at 0.012: +20.00% over 24h"
        assert "unavailable" in format_change("SNEK", 0.012, None)


class TestClearCache:
    """Test cache clearing."""

    @pytest.fixture
    def system(self):
        return MarketSystem(ApiConfig(), blob_store=MemoryBlobStore(), clock=lambda: NOW)

    def test_clear_all_keeps_history_and_ledger(self, system):
        system.cache.write("tokens_cache", {})
        system.cache.write("ohlcv_SNEK_1h", {})
        system.store.save("trades", [])
        system.snapshot_store.record_if_due({"A": 1.0})

        assert system.cache.cached_keys() == ["ohlcv_SNEK_1h", "tokens_cache"]
        assert clear_cache(system, "all") == ["ohlcv_SNEK_1h", "tokens_cache"]
        assert system.blob_store.keys() == ["price_history", "trades"]

    def test_clear_single_key(self, system):
        system.cache.write("movers_cache", {})

        assert clear_cache(system, "movers_cache") == ["movers_cache"]
        assert clear_cache(system, "movers_cache") == []

    def test_clear_key_protects_ledger(self, system):
        system.store.save("trades", [{"cid": "c1", "event": "sell"}])

        assert clear_cache(system, "trades") == []
        assert system.store.load("trades") == [{"cid": "c1", "event": "sell"}]


class TestMain:
    """Test the CLI entry point against a data directory on disk."""

    @pytest.fixture
    def temp_dir(self):
        temp_dir = tempfile.mkdtemp()
        yield Path(temp_dir)
        shutil.rmtree(temp_dir)

    @pytest.fixture
    def config_path(self, temp_dir):
        path = temp_dir / "config.yaml"
        with open(path, "w") as f:
            yaml.dump({"data_dir": str(temp_dir / "data")}, f)
        return str(path)

    def seed_history(self, temp_dir, now):
        store = SnapshotStore(JsonStore(FileBlobStore(str(temp_dir / "data"))))
        store.save(SnapshotHistory(last_snapshot_time=now - 86400, snapshots=[
            PriceSnapshot(timestamp=now - 86400, prices={"SNEK": 0.01}),
        ]))

    def test_missing_config_file_exits(self, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(temp_dir / "absent.yaml"), "--history-info"])
        assert exc_info.value.code == 1

    def test_validate_config(self, config_path, temp_dir):
        main(["--config", config_path, "--validate-config"])

        assert not (temp_dir / "data").exists()

    def test_history_info(self, config_path, capsys):
        main(["--config", config_path, "--history-info"])

        assert "No snapshots recorded yet" in capsys.readouterr().out

    def test_change(self, config_path, temp_dir, capsys):
        self.seed_history(temp_dir, NOW)
        with patch("posada_api.cli.cli.MarketSystem",
                   side_effect=lambda config: MarketSystem(config, clock=lambda: NOW)):
            main(["--config", config_path, "--change", "snek", "0.012"])

        assert "SNEK at 0.012: +20.00% over 24h" in capsys.readouterr().out

    def test_change_invalid_price(self, config_path):
        with pytest.raises(SystemExit):
            main(["--config", config_path, "--change", "SNEK", "cheap"])

    def test_snapshot_without_prices_exits(self, config_path):
        with patch("posada_api.market.tokens.TokenService.get_tokens", return_value={}):
            with pytest.raises(SystemExit):
                main(["--config", config_path, "--snapshot"])

    def test_serve_runs_app(self, config_path):
        with patch("flask.Flask.run") as run:
            main(["--config", config_path, "--serve", "--port", "9001"])

        run.assert_called_once_with(host="127.0.0.1", port=9001)
