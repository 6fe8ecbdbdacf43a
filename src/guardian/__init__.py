"""Guardian: bar aggregation and analytics resampling for a futures market dashboard."""

__version__ = "0.1.0"
