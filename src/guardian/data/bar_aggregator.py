"""Tick-to-bar aggregation for granularities below the native bar size.

ALGORITHM:
  1. A tick belongs to bucket ``floor(time / bucket_ms) * bucket_ms``.
  2. The first tick processed for a bucket sets ``open``; every tick updates
     ``high``/``low``/``close`` and adds its quantity to ``volume``.
  3. Volume is rounded to 6 decimals after every addition so that a batch
     build and a tick-by-tick merge of the same trades agree.
  4. The result is sorted ascending and only the newest ``max_bars`` kept.

Ticks may arrive out of order; merging always re-sorts instead of assuming
append order. Nothing here mutates its input.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from guardian.constants import MAX_CANDLES, VOLUME_DECIMALS
from guardian.data.market_data import Bar, Tick

logger = logging.getLogger(__name__)


def bucket_start(time_ms: float, bucket_ms: int) -> int:
    """Start of the bucket containing ``time_ms``."""
    return math.floor(time_ms / bucket_ms) * bucket_ms


def _add_volume(volume: float, quantity: float) -> float:
    return round(volume + quantity, VOLUME_DECIMALS)


def _check_bucket(bucket_ms: int) -> None:
    if not isinstance(bucket_ms, (int, float)) or not math.isfinite(bucket_ms) or bucket_ms <= 0:
        raise ValueError(f"Bucket size must be a positive number of ms, got: {bucket_ms!r}")


@dataclass
class _BuildingBar:
    """Mutable accumulator used while a batch is being bucketed."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def update(self, tick: Tick) -> None:
        self.high = max(self.high, tick.price)
        self.low = min(self.low, tick.price)
        self.close = tick.price
        self.volume = _add_volume(self.volume, tick.quantity)

    def freeze(self) -> Bar:
        return Bar(
            time=self.time,
            open=self.open,
            high=self.high,
            low=self.low,
            close=self.close,
            volume=self.volume,
        )


class BarAggregator:
    """
    Builds OHLCV bars from raw trades.

    Usage:
        aggregator = BarAggregator(max_bars=500)
        bars = aggregator.build_from_batch(ticks, bucket_ms=15_000)
        bars = aggregator.merge_tick(bars, tick, bucket_ms=15_000)
    """

    def __init__(self, max_bars: int = MAX_CANDLES):
        if max_bars < 1:
            raise ValueError(f"max_bars must be at least 1, got: {max_bars}")
        self.max_bars = max_bars

    def _finalize(self, bars: Iterable[Bar]) -> list[Bar]:
        ordered = sorted(bars, key=lambda b: b.time)
        return ordered[-self.max_bars :]

    def build_from_batch(self, ticks: Iterable[Tick], bucket_ms: int) -> list[Bar]:
        """
        Bucket a batch of ticks into bars.

        Args:
            ticks: Trades in processing order. Invalid ticks are skipped.
            bucket_ms: Bar width in milliseconds.

        Returns:
            New list of bars, ascending by bucket start, at most ``max_bars`` long.
        """
        _check_bucket(bucket_ms)

        building: dict[int, _BuildingBar] = {}
        skipped = 0

        for tick in ticks:
            if not tick.is_valid:
                skipped += 1
                continue
            start = bucket_start(tick.time, bucket_ms)
            current = building.get(start)
            if current is None:
                building[start] = _BuildingBar(
                    time=start,
                    open=tick.price,
                    high=tick.price,
                    low=tick.price,
                    close=tick.price,
                    volume=_add_volume(0.0, tick.quantity),
                )
            else:
                current.update(tick)

        if skipped:
            logger.debug(f"Skipped {skipped} invalid ticks while building bars")

        return self._finalize(b.freeze() for b in building.values())

    def merge_tick(self, bars: Sequence[Bar], tick: Tick, bucket_ms: int) -> Sequence[Bar]:
        """
        Fold a single trade into an existing bar series.

        Replaying the same tick adds its quantity again; trades carry no
        identity here to deduplicate on.

        Returns:
            ``bars`` itself when the tick is invalid, otherwise a new sorted,
            bounded list.
        """
        _check_bucket(bucket_ms)

        if not tick.is_valid:
            logger.debug(f"Ignoring invalid tick: {tick}")
            return bars

        start = bucket_start(tick.time, bucket_ms)
        merged: list[Bar] = []
        found = False

        for bar in bars:
            if bar.time == start and not found:
                merged.append(
                    replace(
                        bar,
                        high=max(bar.high, tick.price),
                        low=min(bar.low, tick.price),
                        close=tick.price,
                        volume=_add_volume(bar.volume, tick.quantity),
                    )
                )
                found = True
            else:
                merged.append(bar)

        if not found:
            merged.append(
                Bar(
                    time=start,
                    open=tick.price,
                    high=tick.price,
                    low=tick.price,
                    close=tick.price,
                    volume=_add_volume(0.0, tick.quantity),
                )
            )

        return self._finalize(merged)


_default_aggregator = BarAggregator()


def build_from_batch(
    ticks: Iterable[Tick], bucket_ms: int, max_bars: int = MAX_CANDLES
) -> list[Bar]:
    """Convenience wrapper around :meth:`BarAggregator.build_from_batch`."""
    aggregator = _default_aggregator if max_bars == MAX_CANDLES else BarAggregator(max_bars)
    return aggregator.build_from_batch(ticks, bucket_ms)


def merge_tick(
    bars: Sequence[Bar], tick: Tick, bucket_ms: int, max_bars: int = MAX_CANDLES
) -> Sequence[Bar]:
    """Convenience wrapper around :meth:`BarAggregator.merge_tick`."""
    aggregator = _default_aggregator if max_bars == MAX_CANDLES else BarAggregator(max_bars)
    return aggregator.merge_tick(bars, tick, bucket_ms)
