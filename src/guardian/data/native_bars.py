"""Bounded bar window fed by bars the upstream source already bucketed."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from guardian.constants import MAX_CANDLES
from guardian.data.market_data import Bar

logger = logging.getLogger(__name__)


def _is_usable(bar: Bar) -> bool:
    return all(
        math.isfinite(v) for v in (bar.time, bar.open, bar.high, bar.low, bar.close, bar.volume)
    )


class NativeBarAdapter:
    """
    Keeps the latest ``max_bars`` native bars, one per bucket.

    A bar for a bucket that is already present replaces the old one, so a
    still-open kline can be re-delivered any number of times without the
    series growing.
    """

    def __init__(self, max_bars: int = MAX_CANDLES):
        if max_bars < 1:
            raise ValueError(f"max_bars must be at least 1, got: {max_bars}")
        self.max_bars = max_bars

    def merge_bar(self, bars: Sequence[Bar], bar: Bar) -> Sequence[Bar]:
        """Return a new window with ``bar`` replacing any bar of the same bucket."""
        if not _is_usable(bar):
            logger.debug(f"Ignoring non-finite native bar: {bar}")
            return bars

        merged = [b for b in bars if b.time != bar.time]
        merged.append(bar)
        merged.sort(key=lambda b: b.time)
        return merged[-self.max_bars :]

    def load(self, bars: Iterable[Bar]) -> list[Bar]:
        """Build a window from a snapshot; later duplicates win."""
        by_time: dict[int, Bar] = {}
        for bar in bars:
            if _is_usable(bar):
                by_time[bar.time] = bar
        ordered = sorted(by_time.values(), key=lambda b: b.time)
        return ordered[-self.max_bars :]
