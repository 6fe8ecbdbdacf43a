"""Densify native analytics series down to a finer target interval.

ALGORITHM:
  1. Sort the input ascending by time.
  2. For each consecutive pair (current, next) emit ``current`` unchanged.
  3. If ``gap = next.time - current.time`` exceeds the target, insert points
     at ``current.time + step * target`` for ``step`` in ``[1, floor(gap / target))``,
     blending every primitive field linearly by ``step * target / gap``.
  4. Derived fields of inserted points are rebuilt from the blended
     primitives, never blended themselves.
  5. Emit the last input point and re-sort the output.

Resampling to the native interval (or coarser) inserts nothing and returns
the input points as they were.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from guardian.analytics.delta import compute_delta
from guardian.analytics.models import (
    BasisPoint,
    FuturesAnalytics,
    LevelPoint,
    RatioPoint,
    VolumePoint,
)
from guardian.constants import SeriesKind

logger = logging.getLogger(__name__)

P = TypeVar("P")


def _lerp(start: float, end: float, fraction: float) -> float:
    return start + (end - start) * fraction


@dataclass(frozen=True)
class SeriesShape(Generic[P]):
    """
    Which fields of a point type are interpolated and how a point is rebuilt.

    ``build`` receives the time and the blended primitive fields and must
    recompute every derived field from them.
    """

    kind: SeriesKind
    primitives: tuple[str, ...]
    build: Callable[..., P]


class SeriesResampler(Generic[P]):
    """Linear-interpolation resampler for one series shape."""

    def __init__(self, shape: SeriesShape[P]):
        self.shape = shape

    def _interpolate(self, current: P, nxt: P, time: int, fraction: float) -> P:
        blended = {
            name: _lerp(getattr(current, name), getattr(nxt, name), fraction)
            for name in self.shape.primitives
        }
        return self.shape.build(time=time, **blended)

    def resample(self, points: Sequence[P], target_ms: float) -> tuple[P, ...]:
        """
        Resample ``points`` to roughly one point per ``target_ms``.

        Args:
            points: Time-keyed points in any order.
            target_ms: Requested spacing in milliseconds.

        Returns:
            New ascending tuple. A non-finite or non-positive target returns
            an unmodified copy of the input.
        """
        if not points:
            return ()

        if (
            isinstance(target_ms, bool)
            or not isinstance(target_ms, (int, float))
            or not math.isfinite(target_ms)
            or target_ms <= 0
        ):
            logger.debug(f"Invalid target interval {target_ms!r}, returning input as-is")
            return tuple(points)

        ordered = sorted(points, key=lambda p: p.time)
        output: list[P] = []

        for current, nxt in zip(ordered, ordered[1:]):
            output.append(current)
            gap = nxt.time - current.time
            if gap <= target_ms:
                continue
            steps = math.floor(gap / target_ms)
            for step in range(1, steps):
                offset = step * target_ms
                output.append(self._interpolate(current, nxt, current.time + offset, offset / gap))

        output.append(ordered[-1])
        output.sort(key=lambda p: p.time)
        return tuple(output)


LEVEL_SHAPE: SeriesShape[LevelPoint] = SeriesShape(
    kind=SeriesKind.LEVEL,
    primitives=("value", "secondary_value"),
    build=LevelPoint,
)
RATIO_SHAPE: SeriesShape[RatioPoint] = SeriesShape(
    kind=SeriesKind.RATIO,
    primitives=("long", "short"),
    build=RatioPoint.build,
)
VOLUME_SHAPE: SeriesShape[VolumePoint] = SeriesShape(
    kind=SeriesKind.VOLUME,
    primitives=("buy_volume", "sell_volume"),
    build=VolumePoint.build,
)
BASIS_SHAPE: SeriesShape[BasisPoint] = SeriesShape(
    kind=SeriesKind.BASIS,
    primitives=("mark_price", "index_price"),
    build=BasisPoint.build,
)

level_resampler = SeriesResampler(LEVEL_SHAPE)
ratio_resampler = SeriesResampler(RATIO_SHAPE)
volume_resampler = SeriesResampler(VOLUME_SHAPE)
basis_resampler = SeriesResampler(BASIS_SHAPE)

RESAMPLERS: dict[SeriesKind, SeriesResampler] = {
    SeriesKind.LEVEL: level_resampler,
    SeriesKind.RATIO: ratio_resampler,
    SeriesKind.VOLUME: volume_resampler,
    SeriesKind.BASIS: basis_resampler,
}


def resample_analytics(analytics: FuturesAnalytics, target_ms: float) -> FuturesAnalytics:
    """
    Resample every series of the bundle to ``target_ms``.

    The open interest delta is not resampled; it is recomputed from the
    resampled open interest.
    """
    open_interest = level_resampler.resample(analytics.open_interest, target_ms)
    return FuturesAnalytics(
        open_interest=open_interest,
        open_interest_delta=compute_delta(open_interest),
        top_accounts_ratio=ratio_resampler.resample(analytics.top_accounts_ratio, target_ms),
        top_positions_ratio=ratio_resampler.resample(analytics.top_positions_ratio, target_ms),
        global_accounts_ratio=ratio_resampler.resample(analytics.global_accounts_ratio, target_ms),
        taker_volume=volume_resampler.resample(analytics.taker_volume, target_ms),
        basis=basis_resampler.resample(analytics.basis, target_ms),
    )
