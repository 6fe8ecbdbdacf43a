"""Candle-side market data: ticks, bars, aggregation and decoding."""

from guardian.data.bar_aggregator import BarAggregator, build_from_batch, merge_tick
from guardian.data.intervals import parse_interval, parse_interval_or_default
from guardian.data.market_data import Bar, Tick
from guardian.data.native_bars import NativeBarAdapter

__all__ = [
    "Bar",
    "Tick",
    "BarAggregator",
    "NativeBarAdapter",
    "build_from_batch",
    "merge_tick",
    "parse_interval",
    "parse_interval_or_default",
]
