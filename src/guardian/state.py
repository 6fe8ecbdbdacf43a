"""Single-writer holder for the series currently on screen.

State changes go through pure reducers ``(previous, event) -> next``. The
holder only swaps in whatever the reducer returns, so readers never see a
half-applied update. There are no timers here; refresh scheduling belongs to
whoever owns the holder.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from guardian.analytics.refresh import AnalyticsResult, Fetcher, bootstrap_result, refresh_analytics
from guardian.config_loader import AppConfig
from guardian.constants import DataSource
from guardian.data.bar_aggregator import BarAggregator
from guardian.data.market_data import Bar, Tick
from guardian.data.native_bars import NativeBarAdapter

logger = logging.getLogger(__name__)


# ============================================
# Reducers
# ============================================


def reduce_tick(bars: Sequence[Bar], tick: Tick, bucket_ms: int, max_bars: int) -> Sequence[Bar]:
    """Fold a trade into the candle series."""
    return BarAggregator(max_bars).merge_tick(bars, tick, bucket_ms)


def reduce_native_bar(bars: Sequence[Bar], bar: Bar, max_bars: int) -> Sequence[Bar]:
    """Replace-or-append an upstream bar."""
    return NativeBarAdapter(max_bars).merge_bar(bars, bar)


def reduce_analytics(previous: AnalyticsResult | None, result: AnalyticsResult) -> AnalyticsResult:
    """
    Pick the analytics to display after a refresh.

    A failed refresh after a live one keeps the last good live series on
    screen and only surfaces the error.
    """
    if (
        previous is not None
        and previous.source == DataSource.LIVE
        and result.source == DataSource.FALLBACK
    ):
        return AnalyticsResult(data=previous.data, source=DataSource.LIVE, error=result.error)
    return result


# ============================================
# State holder
# ============================================


class MarketState:
    """
    Current candles and analytics for one symbol.

    Usage:
        state = MarketState(config)
        state.apply_tick(tick)          # sub-native intervals
        state.apply_native_bar(bar)     # native or coarser intervals
        state.refresh(fetch)            # analytics refresh cycle
    """

    def __init__(self, config: AppConfig, symbol: str | None = None, now_ms: int | None = None):
        self.config = config
        self.symbol = (symbol or config.default_symbol).upper()
        self.bucket_ms = config.market.bar_interval_ms
        self.max_bars = config.market.max_candles
        self.aggregate_ticks = config.market.needs_tick_aggregation

        self.candles: Sequence[Bar] = ()
        self.analytics: AnalyticsResult = self._bootstrap(now_ms)

    def _bootstrap(self, now_ms: int | None) -> AnalyticsResult:
        analytics = self.config.analytics
        return bootstrap_result(
            self.symbol,
            analytics.limit,
            analytics.fetch_period_ms,
            target_ms=analytics.period_ms,
            now_ms=now_ms,
        )

    def reset(self, symbol: str | None = None, now_ms: int | None = None) -> None:
        """Switch symbol (or restart) with empty candles and bootstrap analytics."""
        if symbol is not None:
            self.symbol = symbol.upper()
        self.candles = ()
        self.analytics = self._bootstrap(now_ms)
        logger.info(f"State reset for {self.symbol}")

    def load_bars(self, bars: Iterable[Bar]) -> None:
        """Replace the candle series wholesale from a snapshot."""
        self.candles = NativeBarAdapter(self.max_bars).load(bars)

    def load_ticks(self, ticks: Iterable[Tick]) -> None:
        """Replace the candle series wholesale from a batch of trades."""
        self.candles = BarAggregator(self.max_bars).build_from_batch(ticks, self.bucket_ms)

    def apply_tick(self, tick: Tick) -> None:
        if not self.aggregate_ticks:
            logger.debug("Ignoring tick: bars come from the native stream at this interval")
            return
        self.candles = reduce_tick(self.candles, tick, self.bucket_ms, self.max_bars)

    def apply_native_bar(self, bar: Bar) -> None:
        if self.aggregate_ticks:
            logger.debug("Ignoring native bar: bars are built from trades at this interval")
            return
        self.candles = reduce_native_bar(self.candles, bar, self.max_bars)

    def apply_analytics(self, result: AnalyticsResult) -> None:
        self.analytics = reduce_analytics(self.analytics, result)

    def refresh(self, fetch: Fetcher, now_ms: int | None = None) -> AnalyticsResult:
        """Run one analytics refresh and apply its outcome."""
        analytics = self.config.analytics
        result = refresh_analytics(
            self.symbol,
            fetch,
            period_ms=analytics.fetch_period_ms,
            target_ms=analytics.period_ms,
            limit=analytics.limit,
            now_ms=now_ms,
        )
        self.apply_analytics(result)
        return self.analytics
