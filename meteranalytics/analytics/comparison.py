from __future__ import annotations
import logging
from typing import Optional

import pandas as pd

from ..core import canon, transform, utils, validate
from ..core.types import ComparisonType, ReadingFrame
from .config import AnalyticsConfig, default_config
from .daily import daily_summary
from .quality import classify, expected_readings
from .types import ComparisonReport, ComparisonSummary

logger = logging.getLogger(__name__)

ROW_COLS = [
    "date",
    "previous_date",
    "comparison_type",
    "current_consumption",
    "previous_consumption",
    "absolute_difference",
    "percentage_change",
    "has_previous_data",
    "current_quality",
    "previous_quality",
]


def _offset(comparison_type: str) -> pd.DateOffset:
    validate.validate_comparison_type(comparison_type)
    if comparison_type == canon.YEAR_OVER_YEAR:
        return pd.DateOffset(years=1)
    return pd.DateOffset(months=1)


def previous_date(day, comparison_type: ComparisonType) -> pd.Timestamp:
    """
    Calendar-aligned counterpart of `day`.

    Year over year: same month/day one year earlier (Feb 29 -> Feb 28).
    Month over month: same day one month earlier, clamped to month end
    (Mar 31 -> Feb 28/29).
    """
    return utils.parse_date(day) - _offset(comparison_type)


def previous_window(
    date_from, date_to, comparison_type: ComparisonType
) -> tuple[pd.Timestamp, pd.Timestamp]:
    return (
        previous_date(date_from, comparison_type),
        previous_date(date_to, comparison_type),
    )


def _pct_change(current: float, previous: Optional[float]) -> Optional[float]:
    if previous is None or previous == 0:
        return None
    return (current - previous) / previous * 100.0


def compare_daily(
    current: pd.DataFrame,
    previous: pd.DataFrame,
    comparison_type: ComparisonType,
    *,
    tz: str = canon.DEFAULT_TZ,
    interval_min: int = canon.DEFAULT_INTERVAL_MIN,
    min_coverage_pct: float = 90.0,
) -> pd.DataFrame:
    """
    One row per date in `current` (daily_summary frames on both sides).

    Nullable columns hold None, never NaN/inf:
      - previous_consumption, absolute_difference: None without a counterpart
      - percentage_change: also None when the counterpart total is 0
    """
    offset = _offset(comparison_type)

    records = []
    for day, row in current.iterrows():
        day = pd.Timestamp(day)
        prev_day = day - offset
        cur = float(row["total"])
        prev_row = previous.loc[prev_day] if prev_day in previous.index else None
        prev = float(prev_row["total"]) if prev_row is not None else None
        records.append(
            {
                "date": day.date(),
                "previous_date": prev_day.date(),
                "comparison_type": comparison_type,
                "current_consumption": cur,
                "previous_consumption": prev,
                "absolute_difference": (cur - prev) if prev is not None else None,
                "percentage_change": _pct_change(cur, prev),
                "has_previous_data": prev is not None,
                "current_quality": classify(
                    row,
                    expected=expected_readings(day, tz=tz, interval_min=interval_min),
                    min_coverage_pct=min_coverage_pct,
                ),
                "previous_quality": classify(
                    prev_row,
                    expected=expected_readings(prev_day, tz=tz, interval_min=interval_min),
                    min_coverage_pct=min_coverage_pct,
                ),
            }
        )

    out = pd.DataFrame(records, columns=ROW_COLS)
    # keep explicit None rather than NaN in the nullable columns
    for col in ("previous_consumption", "absolute_difference", "percentage_change"):
        out[col] = pd.Series([r[col] for r in records], dtype="object")
    return out


def summarise_comparison(rows: pd.DataFrame) -> ComparisonSummary:
    """
    Dashboard card figures. Averages and previous totals use only rows that
    have a counterpart so missing data does not skew them.
    """
    if rows.empty:
        return ComparisonSummary()

    matched = rows[rows["has_previous_data"].astype(bool)]
    current_total = float(rows["current_consumption"].astype(float).sum())
    previous_total = float(pd.to_numeric(matched["previous_consumption"]).sum())
    pct = pd.to_numeric(rows["percentage_change"]).dropna()

    return ComparisonSummary(
        current_total=round(current_total, 2),
        previous_total=round(previous_total, 2),
        total_change=round(current_total - previous_total, 2),
        average_percentage_change=round(float(pct.mean()), 2) if len(pct) else None,
        records_with_comparison=int(len(matched)),
        total_records=int(len(rows)),
    )


def compare(
    df: ReadingFrame,
    date_from,
    date_to,
    comparison_type: ComparisonType,
    *,
    previous_df: Optional[ReadingFrame] = None,
    config: Optional[AnalyticsConfig] = None,
) -> ComparisonReport:
    """
    Compare [date_from, date_to] against the aligned prior window.

    Prior-window readings come from `previous_df` when the caller fetched
    them separately, otherwise from `df`. The 730-day cap is the caller's
    job; only ordering and date syntax are checked here.
    """
    cfg = config or default_config()
    validate.validate_comparison_type(comparison_type)
    start, end = validate.validate_date_range(date_from, date_to, max_days=None)
    prev_start, prev_end = previous_window(start, end, comparison_type)

    tz = utils.frame_tz(df, cfg.ingest.tz)
    include_zeros = cfg.daily.include_zero_readings
    daily = daily_summary(df, tz=tz, include_zero_readings=include_zeros)
    prev_daily = (
        daily
        if previous_df is None
        else daily_summary(previous_df, tz=tz, include_zero_readings=include_zeros)
    )

    logger.info(
        f"Comparing {start.date()}..{end.date()} with {prev_start.date()}..{prev_end.date()} "
        f"({comparison_type})"
    )
    rows = compare_daily(
        transform.filter_dates(daily, start, end),
        transform.filter_dates(prev_daily, prev_start, prev_end),
        comparison_type,
        tz=tz,
        interval_min=utils.reading_interval(df),
        min_coverage_pct=cfg.quality.min_coverage_pct,
    )
    summary = summarise_comparison(rows)
    logger.info(
        f"Comparison produced {summary.total_records} row(s), "
        f"{summary.records_with_comparison} with a counterpart"
    )
    return ComparisonReport(
        comparison_type=comparison_type,
        date_from=start.date(),
        date_to=end.date(),
        previous_from=prev_start.date(),
        previous_to=prev_end.date(),
        rows=rows,
        summary=summary,
    )
