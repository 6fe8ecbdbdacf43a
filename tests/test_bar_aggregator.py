"""Tests for tick-to-bar aggregation."""

from __future__ import annotations

import math
import random

import pytest

from guardian.data.bar_aggregator import BarAggregator, bucket_start, build_from_batch, merge_tick
from guardian.data.market_data import Bar, Tick


@pytest.fixture
def aggregator():
    return BarAggregator(max_bars=500)


def _tick(price: float, quantity: float, time: float) -> Tick:
    return Tick(price=price, quantity=quantity, time=time)


class TestBucketing:
    def test_bucket_start_floors(self) -> None:
        assert bucket_start(0, 60_000) == 0
        assert bucket_start(59_999, 60_000) == 0
        assert bucket_start(60_000, 60_000) == 60_000
        assert bucket_start(90_500.5, 15_000) == 90_000


class TestBuildFromBatch:
    """Tests for batch bar construction."""

    def test_two_bucket_scenario(self, aggregator) -> None:
        ticks = [_tick(100, 1, 1_000), _tick(105, 2, 30_000), _tick(95, 1, 90_000)]

        bars = aggregator.build_from_batch(ticks, 60_000)

        assert bars == [
            Bar(time=0, open=100, high=105, low=100, close=105, volume=3),
            Bar(time=60_000, open=95, high=95, low=95, close=95, volume=1),
        ]

    def test_open_and_close_follow_processing_order(self, aggregator) -> None:
        """Open is the first tick processed, not the earliest timestamp."""
        ticks = [_tick(101, 1, 40_000), _tick(99, 1, 10_000), _tick(103, 1, 20_000)]

        (bar,) = aggregator.build_from_batch(ticks, 60_000)

        assert bar.open == 101
        assert bar.close == 103
        assert bar.high == 103
        assert bar.low == 99

    def test_invalid_ticks_skipped(self, aggregator) -> None:
        ticks = [
            _tick(100, 1, 1_000),
            _tick(math.nan, 1, 2_000),
            _tick(100, math.inf, 3_000),
            _tick(100, 1, math.nan),
            _tick(110, 1, 4_000),
        ]

        (bar,) = aggregator.build_from_batch(ticks, 60_000)

        assert bar.high == 110
        assert bar.volume == 2

    def test_negative_quantity_and_non_positive_price_skipped(self, aggregator) -> None:
        ticks = [
            _tick(100, 2, 0),
            _tick(100, -5, 1),
            _tick(0, 1, 2),
            _tick(-3, 1, 3),
            _tick(101, 0, 4),
        ]

        (bar,) = aggregator.build_from_batch(ticks, 60_000)

        assert bar.volume == 2
        assert bar.low == 100
        assert bar.close == 101

    def test_volume_rounded_each_step(self, aggregator) -> None:
        ticks = [_tick(1, 0.1, 0), _tick(1, 0.2, 1), _tick(1, 0.0000004, 2)]

        (bar,) = aggregator.build_from_batch(ticks, 1_000)

        assert bar.volume == 0.3

    def test_empty_batch(self, aggregator) -> None:
        assert aggregator.build_from_batch([], 60_000) == []

    def test_truncates_to_newest_buckets(self) -> None:
        ticks = [_tick(100 + i, 1, i * 1_000) for i in range(10)]

        bars = BarAggregator(max_bars=3).build_from_batch(ticks, 1_000)

        assert [b.time for b in bars] == [7_000, 8_000, 9_000]

    @pytest.mark.parametrize("bucket_ms", [1_000, 15_000, 60_000, 3_600_000])
    def test_sorted_unique_and_bounded(self, bucket_ms: int) -> None:
        rng = random.Random(7)
        ticks = [
            _tick(rng.uniform(90, 110), rng.uniform(0, 5), rng.uniform(0, 10_000_000))
            for _ in range(2_000)
        ]

        bars = BarAggregator(max_bars=50).build_from_batch(ticks, bucket_ms)
        times = [b.time for b in bars]

        assert times == sorted(set(times))
        assert len(bars) <= 50
        assert all(b.low <= min(b.open, b.close) and b.high >= max(b.open, b.close) for b in bars)

    def test_non_positive_bucket_rejected(self, aggregator) -> None:
        with pytest.raises(ValueError):
            aggregator.build_from_batch([_tick(1, 1, 1)], 0)

    def test_module_wrapper(self) -> None:
        bars = build_from_batch([_tick(1, 1, 0), _tick(2, 1, 5_000)], 1_000, max_bars=1)
        assert [b.time for b in bars] == [5_000]


class TestMergeTick:
    """Tests for incremental bar updates."""

    def test_updates_existing_bucket(self, aggregator) -> None:
        bars = [Bar(time=0, open=100, high=105, low=100, close=105, volume=3)]

        result = aggregator.merge_tick(bars, _tick(98, 0.5, 59_000), 60_000)

        assert result == [Bar(time=0, open=100, high=105, low=98, close=98, volume=3.5)]
        # input untouched
        assert bars[0].close == 105

    def test_appends_new_bucket(self, aggregator) -> None:
        bars = [Bar(time=0, open=100, high=100, low=100, close=100, volume=1)]

        result = aggregator.merge_tick(bars, _tick(101, 2, 61_000), 60_000)

        assert result[-1] == Bar(time=60_000, open=101, high=101, low=101, close=101, volume=2)

    def test_out_of_order_tick_resorted(self, aggregator) -> None:
        bars = [Bar(time=120_000, open=1, high=1, low=1, close=1, volume=1)]

        result = aggregator.merge_tick(bars, _tick(2, 1, 30_000), 60_000)

        assert [b.time for b in result] == [0, 120_000]

    def test_invalid_tick_is_noop(self, aggregator) -> None:
        bars = [Bar(time=0, open=1, high=1, low=1, close=1, volume=1)]

        result = aggregator.merge_tick(bars, _tick(math.nan, 1, 10), 60_000)

        assert result is bars

    @pytest.mark.parametrize("tick", [_tick(100, -5, 1), _tick(0, 1, 1), _tick(-1, 1, 1)])
    def test_volume_never_decreases(self, aggregator, tick: Tick) -> None:
        bars = aggregator.merge_tick([], _tick(100, 2, 0), 60_000)

        result = aggregator.merge_tick(bars, tick, 60_000)

        assert result is bars
        assert result[0].volume == 2.0

    def test_replay_accumulates_volume(self, aggregator) -> None:
        tick = _tick(100, 1.5, 10_000)

        once = aggregator.merge_tick([], tick, 60_000)
        twice = aggregator.merge_tick(once, tick, 60_000)

        assert once[0].volume == 1.5
        assert twice[0].volume == 3.0

    def test_truncates_after_sort(self) -> None:
        aggregator = BarAggregator(max_bars=2)
        bars = [
            Bar(time=60_000, open=1, high=1, low=1, close=1, volume=1),
            Bar(time=120_000, open=1, high=1, low=1, close=1, volume=1),
        ]

        # late tick for an older bucket is the one dropped
        result = aggregator.merge_tick(bars, _tick(1, 1, 0), 60_000)

        assert [b.time for b in result] == [60_000, 120_000]

    def test_incremental_matches_batch(self, aggregator) -> None:
        ticks = [_tick(100 + (i % 7), 0.1 * (i % 3 + 1), i * 4_000) for i in range(60)]

        incremental: list[Bar] = []
        for tick in ticks:
            incremental = merge_tick(incremental, tick, 15_000)

        assert incremental == aggregator.build_from_batch(ticks, 15_000)
