from __future__ import annotations
from typing import Any, Mapping, Optional

import pandas as pd

from ..core import canon, utils
from ..core.types import DayQuality
from .types import DailySummary


def expected_readings(
    day: pd.Timestamp,
    *,
    tz: str = canon.DEFAULT_TZ,
    interval_min: int = canon.DEFAULT_INTERVAL_MIN,
) -> int:
    """Readings a complete local day holds (23 or 25 hours on DST change days)."""
    if interval_min >= 1440:
        return 1
    hours = utils.hours_in_local_day(day, tz)
    return int(round(hours * 60 / interval_min))


def _field(summary: DailySummary | Mapping[str, Any] | pd.Series, key: str) -> Any:
    if isinstance(summary, DailySummary):
        return getattr(summary, key)
    return summary[key]


def classify(
    summary: DailySummary | Mapping[str, Any] | pd.Series | None,
    *,
    expected: Optional[int] = None,
    min_coverage_pct: float = 90.0,
) -> DayQuality:
    """
    Label one day:
      - 'missing'  no summary, or no readings
      - 'all_zero' every reading was zero (often provider lag)
      - 'sparse'   fewer readings than min_coverage_pct of `expected`
      - 'normal'   otherwise
    Without `expected` the sparse check is skipped.
    """
    if summary is None:
        return "missing"
    count = int(_field(summary, "count"))
    if count == 0:
        return "missing"
    if bool(_field(summary, "all_zeros")):
        return "all_zero"
    if expected and (count / expected * 100.0) < min_coverage_pct:
        return "sparse"
    return "normal"


def classify_daily(
    daily: pd.DataFrame,
    *,
    start: Optional[pd.Timestamp] = None,
    end: Optional[pd.Timestamp] = None,
    tz: str = canon.DEFAULT_TZ,
    interval_min: int = canon.DEFAULT_INTERVAL_MIN,
    min_coverage_pct: float = 90.0,
) -> pd.Series:
    """
    Quality label for every calendar date in [start, end].

    Defaults to the span of `daily`; dates absent from it are 'missing'.
    """
    if start is None or end is None:
        if daily.empty:
            return pd.Series(dtype="object", index=pd.DatetimeIndex([], name="date"), name="quality")
        start = daily.index.min() if start is None else start
        end = daily.index.max() if end is None else end

    dates = pd.date_range(utils.parse_date(start), utils.parse_date(end), freq="D", name="date")
    labels = []
    for day in dates:
        row = daily.loc[day] if day in daily.index else None
        labels.append(
            classify(
                row,
                expected=expected_readings(day, tz=tz, interval_min=interval_min),
                min_coverage_pct=min_coverage_pct,
            )
        )
    return pd.Series(labels, index=dates, name="quality", dtype="object")
