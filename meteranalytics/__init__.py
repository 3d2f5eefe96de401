from .core import canon, exceptions, transform, types, utils, validate
from .io import ingest
from .analytics import comparison, correlation, daily, quality, trends
from .analytics.config import AnalyticsConfig, default_config

__all__ = [
    "canon",
    "exceptions",
    "transform",
    "types",
    "utils",
    "validate",
    "ingest",
    "daily",
    "quality",
    "comparison",
    "correlation",
    "trends",
    "AnalyticsConfig",
    "default_config",
]
