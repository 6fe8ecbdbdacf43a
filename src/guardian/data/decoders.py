"""Decoders for candle-side upstream records (klines and trades)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from guardian.data.market_data import Bar, Tick, coerce_number
from guardian.errors import DataError

logger = logging.getLogger(__name__)


def _bar_from_fields(time: Any, o: Any, h: Any, low: Any, c: Any, v: Any) -> Bar | None:
    values = [coerce_number(x) for x in (time, o, h, low, c, v)]
    if any(x is None for x in values):
        return None
    t, open_, high, low_, close, volume = values
    return Bar(time=int(t), open=open_, high=high, low=low_, close=close, volume=volume)


def decode_kline_rows(rows: Any) -> list[Bar]:
    """
    Decode REST kline rows ``[openTime, open, high, low, close, volume, ...]``.

    Raises:
        DataError: If the payload is not a list.
    """
    if not isinstance(rows, list):
        raise DataError(f"Expected a list of klines, got {type(rows).__name__}", endpoint="klines")

    bars = []
    for row in rows:
        if not isinstance(row, (list, tuple)) or len(row) < 6:
            logger.debug(f"Skipping malformed kline row: {row!r}")
            continue
        bar = _bar_from_fields(*row[:6])
        if bar is None:
            logger.debug(f"Skipping non-numeric kline row: {row!r}")
            continue
        bars.append(bar)
    return bars


def decode_kline_event(payload: Any) -> Bar | None:
    """Decode a kline stream frame ``{"k": {"t", "o", "h", "l", "c", "v"}}``."""
    if not isinstance(payload, Mapping):
        return None
    kline = payload.get("k")
    if not isinstance(kline, Mapping):
        return None
    return _bar_from_fields(
        kline.get("t"), kline.get("o"), kline.get("h"), kline.get("l"), kline.get("c"), kline.get("v")
    )


def decode_trade(row: Any) -> Tick | None:
    """
    Decode a trade from either the REST shape ``{price, qty, time}`` or the
    stream shape ``{p, q, T}``.
    """
    if not isinstance(row, Mapping):
        return None
    if "p" in row:
        return Tick.coerce(row.get("p"), row.get("q"), row.get("T"))
    quantity = row.get("qty", row.get("quantity"))
    return Tick.coerce(row.get("price"), quantity, row.get("time"))


def decode_trades(rows: Any) -> list[Tick]:
    """Decode a list of trades, dropping unusable rows."""
    if not isinstance(rows, list):
        raise DataError(f"Expected a list of trades, got {type(rows).__name__}", endpoint="trades")

    ticks = []
    for row in rows:
        tick = decode_trade(row)
        if tick is None:
            logger.debug(f"Skipping malformed trade: {row!r}")
            continue
        ticks.append(tick)
    return ticks
