"""Core constants for Guardian."""

from enum import Enum


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class DataSource(str, Enum):
    """Where the currently displayed analytics came from."""

    BOOTSTRAP = "bootstrap"  # synthetic, no fetch attempted yet
    FALLBACK = "fallback"  # synthetic, fetch failed
    LIVE = "live"


class SeriesKind(str, Enum):
    """Analytics series shapes understood by the resampler."""

    LEVEL = "level"
    RATIO = "ratio"
    VOLUME = "volume"
    BASIS = "basis"


class RatioUnit(str, Enum):
    """Unit in which an upstream endpoint reports long/short shares."""

    PERCENT = "percent"
    FRACTION = "fraction"


# ============================================
# Time
# ============================================

SECOND_MS = 1_000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

UNIT_MS = {
    "s": SECOND_MS,
    "m": MINUTE_MS,
    "h": HOUR_MS,
    "d": DAY_MS,
}

# ============================================
# Default Values
# ============================================

DEFAULT_SYMBOLS = ["BTCUSDT", "ETHUSDT", "BNBUSDT", "XRPUSDT"]
DEFAULT_BAR_INTERVAL = "1m"
DEFAULT_NATIVE_BAR_INTERVAL = "1m"
DEFAULT_ANALYTICS_PERIOD = "1h"
DEFAULT_NATIVE_ANALYTICS_PERIOD = "5m"

AVAILABLE_INTERVALS = ["15s", "30s", "1m", "3m", "5m", "15m", "1h"]
AVAILABLE_PERIODS = ["1m", "2m", "5m", "15m", "1h"]

MAX_CANDLES = 500
ANALYTICS_LIMIT = 48
MAX_ANALYTICS_LIMIT = 500

VOLUME_DECIMALS = 6
SAMPLE_DECIMALS = 2

# ============================================
# Application Constants
# ============================================

APP_NAME = "guardian"
SAMPLE_DATA_MESSAGE = "Could not load futures data from upstream, showing sample trends."
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_FORMAT_JSON = '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
