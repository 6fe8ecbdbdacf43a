"""Market data structures and types."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any


def coerce_number(value: Any) -> float | None:
    """
    Coerce a numeric or numeric-string field to a finite float.

    Returns None for missing, boolean, non-numeric or non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


@dataclass(frozen=True)
class Tick:
    """Individual executed trade."""

    price: float
    quantity: float
    time: float  # epoch milliseconds

    @property
    def is_valid(self) -> bool:
        """All fields are finite numbers, price is positive and quantity non-negative."""
        finite = all(
            isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
            for v in (self.price, self.quantity, self.time)
        )
        return finite and self.price > 0 and self.quantity >= 0

    @classmethod
    def coerce(cls, price: Any, quantity: Any, time: Any) -> Tick | None:
        """Build a Tick from raw fields, or None if any field is unusable."""
        p = coerce_number(price)
        q = coerce_number(quantity)
        t = coerce_number(time)
        if p is None or q is None or t is None:
            return None
        tick = cls(price=p, quantity=q, time=t)
        return tick if tick.is_valid else None


@dataclass(frozen=True)
class Bar:
    """OHLCV bar keyed by the start of its bucket."""

    time: int  # bucket start, epoch milliseconds
    open: float
    high: float
    low: float
    close: float
    volume: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)
