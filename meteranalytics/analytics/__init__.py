"""Analytics over reconstructed readings."""

from . import comparison, config, correlation, daily, quality, trends, types
from .config import AnalyticsConfig, default_config

__all__ = [
    "comparison",
    "config",
    "correlation",
    "daily",
    "quality",
    "trends",
    "types",
    "AnalyticsConfig",
    "default_config",
]
