from __future__ import annotations
import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from ..core import canon, exceptions, transform, utils
from ..core.types import ReadingFrame
from .config import AnalyticsConfig, default_config
from .daily import daily_totals
from .types import DeviationSummary, TrendReport

logger = logging.getLogger(__name__)


def _check_window(window: int) -> int:
    exceptions.require(
        int(window) in canon.ROLLING_WINDOWS,
        f"Window size must be one of {', '.join(map(str, canon.ROLLING_WINDOWS))} days",
        exceptions.TransformError,
    )
    return int(window)


def rolling_averages(
    daily_totals: pd.Series, windows: Iterable[int] = canon.ROLLING_WINDOWS
) -> pd.DataFrame:
    """
    Trailing averages of daily consumption.

    Windows count rows (days present), not calendar days, and average over
    whatever history exists at the start of the series.

    Output columns: daily_consumption, rolling_avg_{n}d per window, record_count.
    """
    windows = [_check_window(w) for w in windows]
    s = daily_totals.sort_index().astype(float)
    out = pd.DataFrame({"daily_consumption": s})
    for w in windows:
        out[f"rolling_avg_{w}d"] = transform.rolling_mean(s, w)
    out.index.name = "date"
    return out


def significant_deviations(
    daily_totals: pd.Series,
    *,
    threshold_pct: float = 20.0,
    window: int = 30,
) -> pd.DataFrame:
    """
    Days whose consumption differs from the trailing `window`-day average
    by more than `threshold_pct` percent.

    Columns: daily_consumption, rolling_avg_{window}d, deviation_percent
    (2 dp), deviation_direction ('above' | 'below').
    """
    exceptions.require(
        threshold_pct > 0, "Threshold must be a positive number", exceptions.TransformError
    )
    col = f"rolling_avg_{_check_window(window)}d"
    roll = rolling_averages(daily_totals, windows=[window])

    avg = roll[col]
    valid = avg.notna() & (avg != 0)
    dev = pd.Series(np.nan, index=roll.index)
    dev[valid] = (roll.loc[valid, "daily_consumption"] - avg[valid]).abs() / avg[valid] * 100.0

    out = roll.assign(deviation_percent=dev.round(2))
    out = out[valid & (dev > threshold_pct)].copy()
    out["deviation_direction"] = np.where(
        out["daily_consumption"] > out[col],
        "above",
        np.where(out["daily_consumption"] < out[col], "below", "normal"),
    )
    logger.info(f"Found {len(out)} deviation(s) above {threshold_pct}%")
    return out


def deviation_summary(deviations: pd.DataFrame, threshold_pct: float) -> DeviationSummary:
    if deviations.empty:
        return DeviationSummary(threshold_percent=threshold_pct)
    return DeviationSummary(
        total_deviations=int(len(deviations)),
        above_average=int((deviations["deviation_direction"] == "above").sum()),
        below_average=int((deviations["deviation_direction"] == "below").sum()),
        max_deviation_percent=round(float(deviations["deviation_percent"].max()), 2),
        threshold_percent=threshold_pct,
    )


def trend_report(
    df: ReadingFrame,
    *,
    config: Optional[AnalyticsConfig] = None,
) -> TrendReport:
    """Readings -> rolling averages, flagged deviations and their summary, per config.trends."""
    cfg = config or default_config()
    totals = daily_totals(
        df,
        tz=utils.frame_tz(df, cfg.ingest.tz),
        include_zero_readings=cfg.daily.include_zero_readings,
    )
    threshold = cfg.trends.deviation_threshold_pct
    deviations = significant_deviations(
        totals, threshold_pct=threshold, window=cfg.trends.deviation_window
    )
    return TrendReport(
        rolling=rolling_averages(totals, windows=cfg.trends.rolling_windows),
        deviations=deviations,
        summary=deviation_summary(deviations, threshold),
    )
