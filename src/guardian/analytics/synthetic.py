"""Synthetic analytics series for bootstrap and fallback display.

The series are plausible looking, not a market model. Output depends only on
(symbol, limit, interval) and the ``now`` anchor; the anchor moves absolute
timestamps but never changes the values.
"""

from __future__ import annotations

import logging
import math
import time

from guardian.analytics.delta import compute_delta
from guardian.analytics.models import (
    BasisPoint,
    FuturesAnalytics,
    LevelPoint,
    RatioPoint,
    VolumePoint,
)
from guardian.constants import SAMPLE_DECIMALS

logger = logging.getLogger(__name__)

OPEN_INTEREST_BASE = 85_000
OPEN_INTEREST_FLOOR = 60_000
BASE_PRICE = 25_000


def symbol_seed(symbol: str) -> int:
    """Sum of character codes weighted by their 1-based position."""
    return sum(ord(char) * (index + 1) for index, char in enumerate(symbol))


def now_ms() -> int:
    return int(time.time() * 1000)


def _r(value: float) -> float:
    return round(value, SAMPLE_DECIMALS)


def _ratio_point(timestamp: int, long_share: float) -> RatioPoint:
    return RatioPoint.build(timestamp, _r(long_share), _r(100 - long_share))


class SyntheticSeriesGenerator:
    """
    Deterministic, symbol-seeded placeholder analytics.

    Usage:
        generator = SyntheticSeriesGenerator()
        bundle = generator.generate("BTCUSDT", limit=48, interval_ms=3_600_000)
    """

    def generate(
        self,
        symbol: str,
        limit: int,
        interval_ms: int,
        anchor_ms: int | None = None,
    ) -> FuturesAnalytics:
        """
        Build the full analytics bundle.

        Args:
            symbol: Symbol used to seed the shapes.
            limit: Number of points per series.
            interval_ms: Spacing between points.
            anchor_ms: "Now" in epoch ms; the current time when omitted.

        Returns:
            FuturesAnalytics with ``limit`` points per series, ending one
            interval before the anchor.
        """
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got: {limit}")
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got: {interval_ms}")

        anchor = now_ms() if anchor_ms is None else anchor_ms
        factor = symbol_seed(symbol)

        open_interest: list[LevelPoint] = []
        top_accounts: list[RatioPoint] = []
        top_positions: list[RatioPoint] = []
        global_accounts: list[RatioPoint] = []
        taker_volume: list[VolumePoint] = []
        basis: list[BasisPoint] = []

        level = float(OPEN_INTEREST_BASE + factor % 1_000)

        for i in range(limit):
            timestamp = anchor - (limit - i) * interval_ms

            # Open interest: seasonal swing plus a sawtooth drift
            seasonal = math.sin((i + factor / 10) / 3) * 2_500
            momentum = (i % 12) * 140 - 400
            level = max(OPEN_INTEREST_FLOOR, level + seasonal * 0.1 + momentum)
            notional = level * (240 + math.sin(i / 6))
            open_interest.append(LevelPoint(timestamp, _r(level), _r(notional)))

            top_accounts.append(_ratio_point(timestamp, 55 + math.sin(i / 2 + factor) * 7))
            top_positions.append(_ratio_point(timestamp, 52 + math.sin(i / 1.8 + factor / 2) * 9))
            global_accounts.append(_ratio_point(timestamp, 49 + math.sin(i / 3 + factor / 3) * 6))

            buy = _r(max(0.0, 18_000 + math.sin(i / 2.5 + factor) * 3_000 + i * 120))
            sell = _r(max(0.0, 17_000 + math.cos(i / 2.7 + factor / 4) * 2_800 + (limit - i) * 90))
            taker_volume.append(
                VolumePoint(
                    time=timestamp,
                    buy_volume=buy,
                    sell_volume=sell,
                    ratio=buy / max(1.0, sell),
                )
            )

            base_price = BASE_PRICE + math.sin(i / 4 + factor) * 400 + i * 15
            mark = base_price + math.sin(i / 3) * 45
            index = base_price - math.cos(i / 5) * 35
            basis.append(BasisPoint.build(timestamp, _r(mark), _r(index)))

        logger.debug(f"Generated {limit} synthetic points for {symbol} every {interval_ms}ms")

        points = tuple(open_interest)
        return FuturesAnalytics(
            open_interest=points,
            open_interest_delta=compute_delta(points),
            top_accounts_ratio=tuple(top_accounts),
            top_positions_ratio=tuple(top_positions),
            global_accounts_ratio=tuple(global_accounts),
            taker_volume=tuple(taker_volume),
            basis=tuple(basis),
        )
