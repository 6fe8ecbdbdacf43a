"""Configuration loader with Pydantic validation and environment variable interpolation."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables at module level
load_dotenv(find_dotenv(usecwd=True))

from guardian.constants import (
    ANALYTICS_LIMIT,
    AVAILABLE_INTERVALS,
    AVAILABLE_PERIODS,
    DEFAULT_ANALYTICS_PERIOD,
    DEFAULT_BAR_INTERVAL,
    DEFAULT_NATIVE_ANALYTICS_PERIOD,
    DEFAULT_NATIVE_BAR_INTERVAL,
    DEFAULT_SYMBOLS,
    MAX_ANALYTICS_LIMIT,
    MAX_CANDLES,
    LogLevel,
)
from guardian.data.intervals import parse_interval
from guardian.errors import ParseError

logger = logging.getLogger(__name__)


def interpolate_env_vars(value: Any) -> Any:
    """
    Interpolate environment variables in string values.

    Supports formats:
    - ${VAR_NAME} - replaced by the variable, or an empty string if unset
    - ${VAR_NAME:default} - optional with default value
    """
    if not isinstance(value, str):
        return value

    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value
        elif default is not None:
            return default
        else:
            return ""

    return re.sub(pattern, replacer, value)


def process_config_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively process config dict to interpolate env vars."""
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = process_config_dict(value)
        elif isinstance(value, list):
            result[key] = [
                process_config_dict(item) if isinstance(item, dict) else interpolate_env_vars(item)
                for item in value
            ]
        else:
            result[key] = interpolate_env_vars(value)
    return result


def _interval_or_default(value: Any, default: str) -> str:
    """Keep a parseable interval string, otherwise warn and use the default."""
    try:
        parse_interval(value)
    except ParseError as e:
        logger.warning(f"{e.message}; using default {default}")
        return default
    return value


def _available_or_default(value: str, available: list[str], default: str, label: str) -> str:
    if value in available:
        return value
    logger.warning(f"{label} {value} is not one of {available}; using default {default}")
    return default


def normalize_symbols(symbols: list[str]) -> list[str]:
    """Upper-case, strip and deduplicate; fall back to defaults when empty."""
    unique: list[str] = []
    for symbol in symbols:
        cleaned = str(symbol).strip().upper()
        if cleaned and cleaned not in unique:
            unique.append(cleaned)
    return unique or list(DEFAULT_SYMBOLS)


# ============================================
# Pydantic Configuration Models
# ============================================


class EnvironmentConfig(BaseModel):
    """Environment and runtime settings."""

    log_level: LogLevel = LogLevel.INFO
    log_json: bool = False


class MarketConfig(BaseModel):
    """Candle chart configuration.

    ``bar_interval`` must be one of ``available_intervals``; the native interval
    is whatever upstream streams and is not restricted.
    """

    symbols: list[str] = Field(default_factory=lambda: list(DEFAULT_SYMBOLS))
    bar_interval: str = DEFAULT_BAR_INTERVAL
    native_bar_interval: str = DEFAULT_NATIVE_BAR_INTERVAL
    max_candles: int = MAX_CANDLES
    available_intervals: list[str] = Field(default_factory=lambda: list(AVAILABLE_INTERVALS))

    @field_validator("symbols")
    @classmethod
    def validate_symbols(cls, v: list[str]) -> list[str]:
        return normalize_symbols(v)

    @field_validator("bar_interval", mode="before")
    @classmethod
    def validate_bar_interval(cls, v: Any) -> str:
        return _interval_or_default(v, DEFAULT_BAR_INTERVAL)

    @field_validator("native_bar_interval", mode="before")
    @classmethod
    def validate_native_bar_interval(cls, v: Any) -> str:
        return _interval_or_default(v, DEFAULT_NATIVE_BAR_INTERVAL)

    @field_validator("max_candles")
    @classmethod
    def validate_max_candles(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_candles must be at least 1, got: {v}")
        return v

    @model_validator(mode="after")
    def validate_bar_interval_available(self) -> MarketConfig:
        """Fall back to the default when the interval is not offered."""
        self.bar_interval = _available_or_default(
            self.bar_interval, self.available_intervals, DEFAULT_BAR_INTERVAL, "Bar interval"
        )
        return self

    @property
    def bar_interval_ms(self) -> int:
        return parse_interval(self.bar_interval)

    @property
    def native_bar_interval_ms(self) -> int:
        return parse_interval(self.native_bar_interval)

    @property
    def needs_tick_aggregation(self) -> bool:
        """Requested bars are finer than anything upstream provides."""
        return self.bar_interval_ms < self.native_bar_interval_ms


class AnalyticsConfig(BaseModel):
    """Futures analytics board configuration.

    ``refresh_seconds`` and ``api_key`` are read by whoever schedules refreshes
    and supplies the fetch callable; the core itself keeps no timers and does
    no I/O.
    """

    period: str = DEFAULT_ANALYTICS_PERIOD
    native_period: str = DEFAULT_NATIVE_ANALYTICS_PERIOD
    limit: int = ANALYTICS_LIMIT
    refresh_seconds: float = 0.0
    api_key: str = ""
    available_periods: list[str] = Field(default_factory=lambda: list(AVAILABLE_PERIODS))

    @field_validator("period", mode="before")
    @classmethod
    def validate_period(cls, v: Any) -> str:
        return _interval_or_default(v, DEFAULT_ANALYTICS_PERIOD)

    @field_validator("native_period", mode="before")
    @classmethod
    def validate_native_period(cls, v: Any) -> str:
        return _interval_or_default(v, DEFAULT_NATIVE_ANALYTICS_PERIOD)

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if not 1 <= v <= MAX_ANALYTICS_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_ANALYTICS_LIMIT}, got: {v}")
        return v

    @field_validator("refresh_seconds")
    @classmethod
    def validate_refresh(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"refresh_seconds must be non-negative, got: {v}")
        return v

    @model_validator(mode="after")
    def validate_period_available(self) -> AnalyticsConfig:
        """Fall back to the default when the period is not offered."""
        self.period = _available_or_default(
            self.period, self.available_periods, DEFAULT_ANALYTICS_PERIOD, "Analytics period"
        )
        return self

    @property
    def refresh_enabled(self) -> bool:
        return self.refresh_seconds > 0

    @property
    def period_ms(self) -> int:
        return parse_interval(self.period)

    @property
    def native_period_ms(self) -> int:
        return parse_interval(self.native_period)

    @property
    def fetch_period_ms(self) -> int:
        """Period to request upstream: the requested one unless it is finer than native."""
        return max(self.period_ms, self.native_period_ms)


class AppConfig(BaseModel):
    """Root application configuration."""

    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    market: MarketConfig = Field(default_factory=MarketConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)

    @property
    def default_symbol(self) -> str:
        return self.market.symbols[0]


# ============================================
# Configuration Loader
# ============================================


class ConfigLoader:
    """Load and validate configuration from YAML files with env var interpolation."""

    def __init__(self, config_path: str | Path) -> None:
        """
        Initialize config loader.

        Args:
            config_path: Path to the YAML configuration file.
        """
        self.config_path = Path(config_path)
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """
        Load and validate configuration.

        Returns:
            Validated AppConfig instance.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If config validation fails.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        processed_config = process_config_dict(raw_config)
        self._config = AppConfig.model_validate(processed_config)

        return self._config

    @property
    def config(self) -> AppConfig:
        """Get loaded config, loading if necessary."""
        if self._config is None:
            return self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Force reload configuration from disk."""
        self._config = None
        return self.load()


def load_config(config_path: str | Path) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Validated AppConfig instance.
    """
    loader = ConfigLoader(config_path)
    return loader.load()


def load_config_with_overrides(
    config_path: str | Path | None,
    *,
    symbol: str | None = None,
    bar_interval: str | None = None,
    period: str | None = None,
) -> AppConfig:
    """
    Load configuration with CLI overrides.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.
        symbol: Symbol to put first in the watch list.
        bar_interval: Override requested candle interval.
        period: Override requested analytics period.

    Returns:
        Validated AppConfig instance with overrides applied.
    """
    config = load_config(config_path) if config_path is not None else AppConfig()

    updates: dict[str, Any] = {}
    market_updates: dict[str, Any] = {}

    if symbol is not None:
        market_updates["symbols"] = [symbol] + [
            s for s in config.market.symbols if s != symbol.strip().upper()
        ]

    if bar_interval is not None:
        market_updates["bar_interval"] = bar_interval

    # model_copy skips validation; rebuild so overrides go through the validators
    if market_updates:
        updates["market"] = MarketConfig.model_validate(
            {**config.market.model_dump(), **market_updates}
        )

    if period is not None:
        updates["analytics"] = AnalyticsConfig.model_validate(
            {**config.analytics.model_dump(), "period": period}
        )

    if updates:
        return config.model_copy(update=updates)

    return config
