"""Per-endpoint decoders for futures analytics payloads.

Each endpoint states its field names and units up front. Long/short shares
are normalised to percent from the unit the endpoint is declared to use,
never by looking at the magnitude of the values. Derived fields (ratios,
basis) are recomputed from the primitives instead of trusting the payload.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from guardian.analytics.models import BasisPoint, LevelPoint, RatioPoint, VolumePoint
from guardian.constants import RatioUnit
from guardian.data.market_data import coerce_number
from guardian.errors import DataError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Endpoint(str, Enum):
    """Upstream futures data endpoints feeding the analytics board."""

    OPEN_INTEREST = "openInterestHist"
    TOP_ACCOUNTS_RATIO = "topLongShortAccountRatio"
    TOP_POSITIONS_RATIO = "topLongShortPositionRatio"
    GLOBAL_ACCOUNTS_RATIO = "globalLongShortAccountRatio"
    TAKER_VOLUME = "takerlongshortRatio"
    BASIS = "premiumIndex"


@dataclass(frozen=True)
class RatioContract:
    """Field names and unit a long/short endpoint reports in."""

    long_fields: tuple[str, ...]
    short_fields: tuple[str, ...]
    unit: RatioUnit


# Upstream documents these shares as fractions of one (e.g. "0.6312").
# TODO: verify the position-ratio unit against the upstream API reference; it
# was inferred from sample payloads.
RATIO_CONTRACTS: dict[Endpoint, RatioContract] = {
    Endpoint.TOP_ACCOUNTS_RATIO: RatioContract(
        ("longAccount",), ("shortAccount",), RatioUnit.FRACTION
    ),
    Endpoint.TOP_POSITIONS_RATIO: RatioContract(
        ("longPosition", "longAccount"), ("shortPosition", "shortAccount"), RatioUnit.FRACTION
    ),
    Endpoint.GLOBAL_ACCOUNTS_RATIO: RatioContract(
        ("longAccount",), ("shortAccount",), RatioUnit.FRACTION
    ),
}

_UNIT_SCALE = {
    RatioUnit.PERCENT: 1.0,
    RatioUnit.FRACTION: 100.0,
}


def _first(row: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    """First non-null value among ``names``."""
    for name in names:
        if row.get(name) is not None:
            return row[name]
    return None


def _decode_rows(
    payload: Any, endpoint: Endpoint, decode_row: Callable[[Mapping[str, Any]], T | None]
) -> tuple[T, ...]:
    if not isinstance(payload, list):
        message = "unexpected response"
        if isinstance(payload, Mapping) and payload.get("msg"):
            message = str(payload["msg"])
        raise DataError(f"{endpoint.value}: {message}", endpoint=endpoint.value)

    points: list[T] = []
    for row in payload:
        point = decode_row(row) if isinstance(row, Mapping) else None
        if point is None:
            logger.debug(f"{endpoint.value}: dropping malformed row {row!r}")
            continue
        points.append(point)

    if not points:
        raise DataError(f"{endpoint.value}: no usable rows", endpoint=endpoint.value)

    points.sort(key=lambda p: p.time)
    return tuple(points)


def decode_open_interest(payload: Any) -> tuple[LevelPoint, ...]:
    """``{timestamp, sumOpenInterest, sumOpenInterestValue}`` rows."""

    def row_to_point(row: Mapping[str, Any]) -> LevelPoint | None:
        time = coerce_number(row.get("timestamp"))
        level = coerce_number(row.get("sumOpenInterest"))
        if time is None or level is None:
            return None
        notional = coerce_number(row.get("sumOpenInterestValue"))
        return LevelPoint(int(time), level, notional if notional is not None else 0.0)

    return _decode_rows(payload, Endpoint.OPEN_INTEREST, row_to_point)


def decode_long_short(payload: Any, endpoint: Endpoint) -> tuple[RatioPoint, ...]:
    """Long/short share rows, normalised to percent per the endpoint contract."""
    contract = RATIO_CONTRACTS.get(endpoint)
    if contract is None:
        raise ValueError(f"{endpoint} is not a long/short endpoint")
    scale = _UNIT_SCALE[contract.unit]

    def row_to_point(row: Mapping[str, Any]) -> RatioPoint | None:
        time = coerce_number(row.get("timestamp"))
        long = coerce_number(_first(row, contract.long_fields))
        short = coerce_number(_first(row, contract.short_fields))
        if time is None or long is None or short is None:
            return None
        return RatioPoint.build(int(time), long * scale, short * scale)

    return _decode_rows(payload, endpoint, row_to_point)


def decode_taker_volume(payload: Any) -> tuple[VolumePoint, ...]:
    """``{timestamp, buyVol, sellVol}`` rows."""

    def row_to_point(row: Mapping[str, Any]) -> VolumePoint | None:
        time = coerce_number(row.get("timestamp"))
        buy = coerce_number(row.get("buyVol"))
        sell = coerce_number(row.get("sellVol"))
        if time is None or buy is None or sell is None:
            return None
        return VolumePoint.build(int(time), buy, sell)

    return _decode_rows(payload, Endpoint.TAKER_VOLUME, row_to_point)


def decode_basis(payload: Any) -> tuple[BasisPoint, ...]:
    """``{time|timestamp, markPrice, indexPrice}`` rows."""

    def row_to_point(row: Mapping[str, Any]) -> BasisPoint | None:
        time = coerce_number(_first(row, ("time", "timestamp")))
        mark = coerce_number(row.get("markPrice"))
        index = coerce_number(row.get("indexPrice"))
        if time is None or mark is None or index is None:
            return None
        return BasisPoint.build(int(time), mark, index)

    return _decode_rows(payload, Endpoint.BASIS, row_to_point)
