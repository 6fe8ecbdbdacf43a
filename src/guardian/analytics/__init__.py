"""Futures analytics series: models, resampling, deltas and synthetic data."""

from guardian.analytics.delta import compute_delta
from guardian.analytics.models import (
    BasisPoint,
    DeltaPoint,
    FuturesAnalytics,
    LevelPoint,
    RatioPoint,
    VolumePoint,
)
from guardian.analytics.refresh import AnalyticsResult, bootstrap_result, refresh_analytics
from guardian.analytics.resampler import SeriesResampler, resample_analytics
from guardian.analytics.synthetic import SyntheticSeriesGenerator

__all__ = [
    "AnalyticsResult",
    "BasisPoint",
    "DeltaPoint",
    "FuturesAnalytics",
    "LevelPoint",
    "RatioPoint",
    "SeriesResampler",
    "SyntheticSeriesGenerator",
    "VolumePoint",
    "bootstrap_result",
    "compute_delta",
    "refresh_analytics",
    "resample_analytics",
]
