from __future__ import annotations
import pandas as pd
from typing import Literal

from . import utils
from .types import ReadingFrame


def filter_dates(
    daily: pd.DataFrame, start: pd.Timestamp, end: pd.Timestamp
) -> pd.DataFrame:
    """Rows of a date-indexed frame within the inclusive [start, end] window."""
    if daily.empty:
        return daily
    mask = (daily.index >= start) & (daily.index <= end)
    return daily.loc[mask]


def dedupe_readings(
    df: ReadingFrame, keep: Literal["first", "last"] = "last"
) -> pd.DataFrame:
    """
    Drop readings sharing a timestamp.

    Keeps the last by default to match typical provider correction behaviour
    where a later period restates an earlier one.
    """
    df = df.sort_index(kind="stable")
    return df[~df.index.duplicated(keep=keep)].copy()


def drop_zero_readings(df: ReadingFrame) -> pd.DataFrame:
    return df[df["kwh"] != 0]


def groupby_day(df: ReadingFrame, tz: str | None = None) -> pd.DataFrame:
    """
    Per local calendar day: min, max, sum, count of kWh and whether every
    value was zero. Index 'date' holds naive midnight Timestamps.
    """
    cols = ["min", "max", "total", "count", "all_zeros"]
    if df.empty:
        out = pd.DataFrame(columns=cols, index=pd.DatetimeIndex([], name="date"))
        return out.astype({"min": float, "max": float, "total": float, "count": int, "all_zeros": bool})

    dates = utils.local_dates(pd.DatetimeIndex(df.index), tz)
    kwh = pd.Series(df["kwh"].to_numpy(dtype=float), index=dates)
    g = kwh.groupby(level="date", sort=True)
    out = pd.DataFrame(
        {
            "min": g.min(),
            "max": g.max(),
            "total": g.sum(),
            "count": g.size().astype(int),
            "all_zeros": (kwh == 0).groupby(level="date", sort=True).all(),
        }
    )
    out.index.name = "date"
    return out


def rolling_mean(
    daily_totals: pd.Series, window: int, *, min_periods: int = 1
) -> pd.Series:
    """Trailing row-based mean: each day averages itself and up to window-1 preceding rows."""
    return daily_totals.sort_index().rolling(window=window, min_periods=min_periods).mean()


def totals_by_date(daily: pd.DataFrame, col: str = "total") -> pd.Series:
    if daily.empty:
        return pd.Series(dtype=float, index=pd.DatetimeIndex([], name="date"), name=col)
    return daily[col].astype(float)
