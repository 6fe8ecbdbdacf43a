"""Tests for configuration loading and validation."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from guardian.config_loader import (
    AnalyticsConfig,
    AppConfig,
    ConfigLoader,
    MarketConfig,
    interpolate_env_vars,
    load_config,
    load_config_with_overrides,
    normalize_symbols,
    process_config_dict,
)
from guardian.constants import DEFAULT_SYMBOLS, LogLevel


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


class TestEnvVarInterpolation:
    def test_non_strings_untouched(self) -> None:
        assert interpolate_env_vars(42) == 42
        assert interpolate_env_vars(None) is None
        assert interpolate_env_vars("plain") == "plain"

    def test_set_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GUARDIAN_TEST_KEY", "abc")
        assert interpolate_env_vars("${GUARDIAN_TEST_KEY}") == "abc"
        assert interpolate_env_vars("${GUARDIAN_TEST_KEY:zzz}") == "abc"

    def test_default_and_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GUARDIAN_UNSET", raising=False)
        assert interpolate_env_vars("${GUARDIAN_UNSET:DEBUG}") == "DEBUG"
        assert interpolate_env_vars("${GUARDIAN_UNSET:}") == ""
        assert interpolate_env_vars("${GUARDIAN_UNSET}") == ""

    def test_nested_dicts_and_lists(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GUARDIAN_SYMBOL", "SOLUSDT")
        data = {"market": {"symbols": ["${GUARDIAN_SYMBOL}", "BTCUSDT"], "max_candles": 10}}

        result = process_config_dict(data)

        assert result == {"market": {"symbols": ["SOLUSDT", "BTCUSDT"], "max_candles": 10}}


class TestModels:
    def test_defaults(self) -> None:
        config = AppConfig()

        assert config.environment.log_level == LogLevel.INFO
        assert config.market.symbols == DEFAULT_SYMBOLS
        assert config.market.bar_interval_ms == 60_000
        assert config.market.max_candles == 500
        assert config.analytics.period_ms == 3_600_000
        assert config.analytics.limit == 48
        assert config.default_symbol == "BTCUSDT"

    def test_symbols_normalized(self) -> None:
        market = MarketConfig(symbols=[" ethusdt", "ETHUSDT", "btcusdt", ""])
        assert market.symbols == ["ETHUSDT", "BTCUSDT"]

    def test_empty_symbols_fall_back(self) -> None:
        assert normalize_symbols([]) == DEFAULT_SYMBOLS
        assert MarketConfig(symbols=["  "]).symbols == DEFAULT_SYMBOLS

    def test_invalid_interval_warns_and_defaults(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            market = MarketConfig(bar_interval="fast")

        assert market.bar_interval == "1m"
        assert "fast" in caplog.text

    def test_tick_aggregation_below_native(self) -> None:
        assert MarketConfig(bar_interval="15s").needs_tick_aggregation is True
        assert MarketConfig(bar_interval="1m").needs_tick_aggregation is False
        assert MarketConfig(bar_interval="5m").needs_tick_aggregation is False

    def test_fetch_period_never_finer_than_native(self) -> None:
        assert AnalyticsConfig(period="1m").fetch_period_ms == 300_000
        assert AnalyticsConfig(period="1h").fetch_period_ms == 3_600_000

    @pytest.mark.parametrize("limit", [0, 501])
    def test_limit_bounds(self, limit: int) -> None:
        with pytest.raises(ValidationError):
            AnalyticsConfig(limit=limit)

    def test_max_candles_positive(self) -> None:
        with pytest.raises(ValidationError):
            MarketConfig(max_candles=0)

    def test_refresh_seconds_non_negative(self) -> None:
        with pytest.raises(ValidationError):
            AnalyticsConfig(refresh_seconds=-1)

    def test_bar_interval_must_be_offered(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            market = MarketConfig(bar_interval="2m")

        assert market.bar_interval == "1m"
        assert "2m" in caplog.text
        assert MarketConfig(bar_interval="2m", available_intervals=["2m"]).bar_interval == "2m"

    def test_period_must_be_offered(self) -> None:
        assert AnalyticsConfig(period="4h").period == "1h"
        assert AnalyticsConfig(period="2m").period_ms == 120_000

    def test_refresh_enabled(self) -> None:
        assert AnalyticsConfig().refresh_enabled is False
        assert AnalyticsConfig(refresh_seconds=30).refresh_enabled is True


class TestConfigLoader:
    def test_load_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GUARDIAN_TEST_LEVEL", "DEBUG")
        path = _write(
            tmp_path,
            """
environment:
  log_level: ${GUARDIAN_TEST_LEVEL:INFO}
market:
  symbols: [solusdt]
  bar_interval: 30s
analytics:
  period: 15m
  limit: 96
""",
        )

        config = load_config(path)

        assert config.environment.log_level == LogLevel.DEBUG
        assert config.market.symbols == ["SOLUSDT"]
        assert config.market.bar_interval_ms == 30_000
        assert config.analytics.period_ms == 900_000
        assert config.analytics.limit == 96

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(_write(tmp_path, "")) == AppConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ConfigLoader(tmp_path / "nope.yaml").load()

    def test_cached_and_reload(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "analytics:\n  limit: 10\n")
        loader = ConfigLoader(path)
        assert loader.config.analytics.limit == 10

        path.write_text("analytics:\n  limit: 20\n")
        assert loader.config.analytics.limit == 10
        assert loader.reload().analytics.limit == 20

    def test_repo_config_loads(self) -> None:
        path = Path(__file__).resolve().parents[1] / "config" / "config.yaml"
        config = load_config(path)
        assert config.market.max_candles == 500


class TestOverrides:
    def test_no_overrides(self) -> None:
        assert load_config_with_overrides(None) == AppConfig()

    def test_symbol_moves_to_front(self) -> None:
        config = load_config_with_overrides(None, symbol="ethusdt")
        assert config.default_symbol == "ETHUSDT"
        assert config.market.symbols.count("ETHUSDT") == 1

    def test_interval_overrides(self) -> None:
        config = load_config_with_overrides(None, bar_interval="15s", period="5m")
        assert config.market.bar_interval == "15s"
        assert config.analytics.period == "5m"

    def test_bad_override_falls_back(self) -> None:
        config = load_config_with_overrides(None, bar_interval="0m")
        assert config.market.bar_interval == "1m"

    def test_override_not_offered_falls_back(self) -> None:
        config = load_config_with_overrides(None, bar_interval="2h", period="3m")
        assert config.market.bar_interval == "1m"
        assert config.analytics.period == "1h"
