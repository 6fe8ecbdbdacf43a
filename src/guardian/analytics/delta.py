"""Open interest increase/decrease series."""

from __future__ import annotations

from collections.abc import Sequence

from guardian.analytics.models import DeltaPoint, LevelPoint


def compute_delta(series: Sequence[LevelPoint]) -> tuple[DeltaPoint, ...]:
    """
    Split the first difference of a level series into increase and decrease.

    The first point has no predecessor and is always (0, 0). For the rest,
    ``increase = max(0, diff)`` and ``decrease = min(0, diff)``, so the sums of
    both columns telescope to ``last.value - first.value``.
    """
    result: list[DeltaPoint] = []
    previous: LevelPoint | None = None

    for current in series:
        if previous is None:
            result.append(DeltaPoint(time=current.time, increase=0.0, decrease=0.0))
        else:
            diff = current.value - previous.value
            result.append(
                DeltaPoint(time=current.time, increase=max(0.0, diff), decrease=min(0.0, diff))
            )
        previous = current

    return tuple(result)
