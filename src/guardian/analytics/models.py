"""Analytics series point types.

Every point is an immutable value. Derived fields (``ratio``, ``basis``) are
computed by the ``build`` constructors from the primitive fields so that they
always satisfy their defining formula.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


def safe_ratio(numerator: float, denominator: float) -> float:
    """``numerator / denominator``, or 0 when the denominator is 0."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


@dataclass(frozen=True)
class LevelPoint:
    """A level and its secondary value, e.g. open interest and its notional."""

    time: int
    value: float
    secondary_value: float


@dataclass(frozen=True)
class RatioPoint:
    """Long/short shares in percent with their ratio."""

    time: int
    long: float
    short: float
    ratio: float

    @classmethod
    def build(cls, time: int, long: float, short: float) -> RatioPoint:
        return cls(time=time, long=long, short=short, ratio=safe_ratio(long, short))


@dataclass(frozen=True)
class VolumePoint:
    """Taker buy/sell volume with their ratio."""

    time: int
    buy_volume: float
    sell_volume: float
    ratio: float

    @classmethod
    def build(cls, time: int, buy_volume: float, sell_volume: float) -> VolumePoint:
        return cls(
            time=time,
            buy_volume=buy_volume,
            sell_volume=sell_volume,
            ratio=safe_ratio(buy_volume, sell_volume),
        )


@dataclass(frozen=True)
class BasisPoint:
    """Mark and index price with their difference."""

    time: int
    mark_price: float
    index_price: float
    basis: float

    @classmethod
    def build(cls, time: int, mark_price: float, index_price: float) -> BasisPoint:
        return cls(
            time=time,
            mark_price=mark_price,
            index_price=index_price,
            basis=mark_price - index_price,
        )


@dataclass(frozen=True)
class DeltaPoint:
    """First difference of a level series split into its signed parts."""

    time: int
    increase: float
    decrease: float


@dataclass(frozen=True)
class FuturesAnalytics:
    """The full analytics bundle shown on the board."""

    open_interest: tuple[LevelPoint, ...] = field(default_factory=tuple)
    open_interest_delta: tuple[DeltaPoint, ...] = field(default_factory=tuple)
    top_accounts_ratio: tuple[RatioPoint, ...] = field(default_factory=tuple)
    top_positions_ratio: tuple[RatioPoint, ...] = field(default_factory=tuple)
    global_accounts_ratio: tuple[RatioPoint, ...] = field(default_factory=tuple)
    taker_volume: tuple[VolumePoint, ...] = field(default_factory=tuple)
    basis: tuple[BasisPoint, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
