from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from ..core import canon


@dataclass
class IngestConfig:
    tz: str = canon.DEFAULT_TZ  # provider reporting timezone


@dataclass
class DailyConfig:
    # Some dashboards dropped zero readings before bucketing, others kept them
    include_zero_readings: bool = True


@dataclass
class QualityConfig:
    # Share of expected readings a day needs before it stops being "sparse"
    min_coverage_pct: float = 90.0


@dataclass
class CorrelationConfig:
    # Zero-total days are usually provider lag, not real usage
    drop_zero_days: bool = True


@dataclass
class TrendsConfig:
    rolling_windows: Tuple[int, ...] = canon.ROLLING_WINDOWS
    deviation_window: int = 30
    deviation_threshold_pct: float = 20.0


@dataclass
class AnalyticsConfig:
    ingest: IngestConfig = field(default_factory=IngestConfig)
    daily: DailyConfig = field(default_factory=DailyConfig)
    quality: QualityConfig = field(default_factory=QualityConfig)
    correlation: CorrelationConfig = field(default_factory=CorrelationConfig)
    trends: TrendsConfig = field(default_factory=TrendsConfig)


def default_config() -> AnalyticsConfig:
    return AnalyticsConfig()
