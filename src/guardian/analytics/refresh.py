"""Analytics refresh cycle with sample-data fallback.

A refresh either fully succeeds and yields a LIVE bundle, or is discarded in
full and replaced by synthetic data. Partially decoded endpoints are never
mixed into a result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from guardian.analytics.decoders import (
    Endpoint,
    decode_basis,
    decode_long_short,
    decode_open_interest,
    decode_taker_volume,
)
from guardian.analytics.delta import compute_delta
from guardian.analytics.models import FuturesAnalytics
from guardian.analytics.resampler import resample_analytics
from guardian.analytics.synthetic import SyntheticSeriesGenerator
from guardian.constants import SAMPLE_DATA_MESSAGE, DataSource
from guardian.errors import DataError, TransportError

logger = logging.getLogger(__name__)

Fetcher = Callable[[Endpoint], Any]

_generator = SyntheticSeriesGenerator()


@dataclass(frozen=True)
class AnalyticsResult:
    """Outcome of one refresh cycle, as held by the boundary layer."""

    data: FuturesAnalytics
    source: DataSource
    error: str | None = None
    loading: bool = False

    @property
    def using_sample(self) -> bool:
        return self.source != DataSource.LIVE

    @property
    def is_error(self) -> bool:
        return self.error is not None


def _synthetic(
    symbol: str, limit: int, period_ms: int, target_ms: int, now_ms: int | None
) -> FuturesAnalytics:
    bundle = _generator.generate(symbol, limit, period_ms, anchor_ms=now_ms)
    return resample_analytics(bundle, target_ms)


def bootstrap_result(
    symbol: str,
    limit: int,
    period_ms: int,
    target_ms: int | None = None,
    now_ms: int | None = None,
) -> AnalyticsResult:
    """Synthetic placeholder shown before the first fetch completes."""
    data = _synthetic(symbol, limit, period_ms, target_ms or period_ms, now_ms)
    return AnalyticsResult(data=data, source=DataSource.BOOTSTRAP, loading=True)


def fallback_result(
    symbol: str,
    limit: int,
    period_ms: int,
    reason: str,
    target_ms: int | None = None,
    now_ms: int | None = None,
) -> AnalyticsResult:
    """Synthetic data flagged as a failed fetch."""
    data = _synthetic(symbol, limit, period_ms, target_ms or period_ms, now_ms)
    return AnalyticsResult(
        data=data,
        source=DataSource.FALLBACK,
        error=f"{SAMPLE_DATA_MESSAGE} ({reason})",
    )


def decode_bundle(fetch: Fetcher) -> FuturesAnalytics:
    """
    Fetch and decode all six endpoints.

    Raises:
        TransportError: If the fetcher fails.
        DataError: If any payload is unusable.
    """
    open_interest = decode_open_interest(fetch(Endpoint.OPEN_INTEREST))
    top_accounts = decode_long_short(fetch(Endpoint.TOP_ACCOUNTS_RATIO), Endpoint.TOP_ACCOUNTS_RATIO)
    top_positions = decode_long_short(
        fetch(Endpoint.TOP_POSITIONS_RATIO), Endpoint.TOP_POSITIONS_RATIO
    )
    global_accounts = decode_long_short(
        fetch(Endpoint.GLOBAL_ACCOUNTS_RATIO), Endpoint.GLOBAL_ACCOUNTS_RATIO
    )
    taker_volume = decode_taker_volume(fetch(Endpoint.TAKER_VOLUME))
    basis = decode_basis(fetch(Endpoint.BASIS))

    return FuturesAnalytics(
        open_interest=open_interest,
        open_interest_delta=compute_delta(open_interest),
        top_accounts_ratio=top_accounts,
        top_positions_ratio=top_positions,
        global_accounts_ratio=global_accounts,
        taker_volume=taker_volume,
        basis=basis,
    )


def refresh_analytics(
    symbol: str,
    fetch: Fetcher,
    *,
    period_ms: int,
    target_ms: int | None = None,
    limit: int,
    now_ms: int | None = None,
) -> AnalyticsResult:
    """
    Run one refresh cycle.

    Args:
        symbol: Symbol being displayed.
        fetch: Returns the decoded JSON payload for an endpoint; raises
            TransportError on network or HTTP failure.
        period_ms: Native sampling period requested from upstream.
        target_ms: Display interval; defaults to ``period_ms``.
        limit: Points requested per endpoint (and generated on fallback).
        now_ms: Anchor for synthetic data.

    Returns:
        LIVE result on success, FALLBACK result otherwise.
    """
    target = target_ms or period_ms
    try:
        bundle = decode_bundle(fetch)
    except (TransportError, DataError) as e:
        logger.warning(f"Analytics refresh for {symbol} failed, using sample data: {e}")
        return fallback_result(symbol, limit, period_ms, e.message, target, now_ms)

    logger.info(f"Analytics refreshed for {symbol}: {len(bundle.open_interest)} native points")
    return AnalyticsResult(data=resample_analytics(bundle, target), source=DataSource.LIVE)
