# meteranalytics/core/utils.py
from __future__ import annotations
import numpy as np
import pandas as pd
from zoneinfo import ZoneInfo
from datetime import date, datetime
from typing import Optional, cast

from . import canon, exceptions
from .types import ReadingFrame


def ensure_tz_aware_index(df: pd.DataFrame, tz: str) -> pd.DataFrame:
    if df.index.name != canon.INDEX_NAME:
        raise ValueError(f"Index must be '{canon.INDEX_NAME}', got {df.index.name}")
    idx = pd.DatetimeIndex(df.index)
    if idx.tz is None:
        df = df.tz_localize(ZoneInfo(tz), ambiguous=False, nonexistent="shift_forward")
    else:
        df = df.tz_convert(ZoneInfo(tz))
    return df


def infer_cadence_minutes(
    idx: pd.DatetimeIndex, default: int = canon.DEFAULT_INTERVAL_MIN
) -> int:
    """
    Infer cadence in minutes from a DatetimeIndex, ignoring duplicate timestamps.
    """
    ts = pd.DatetimeIndex(idx).sort_values().unique()
    if len(ts) < 2:
        return int(default)

    diffs = ts[1:] - ts[:-1]
    diffs_min = (diffs / np.timedelta64(1, "s")).to_numpy(dtype=float) / 60.0
    diffs_min = diffs_min[diffs_min > 0]
    if len(diffs_min) == 0:
        return int(default)

    rounded = np.rint(diffs_min).astype(int)
    vals, counts = np.unique(rounded, return_counts=True)
    return int(vals[np.argmax(counts)])


def safe_localize_series(ts: pd.Series, tz: str) -> pd.Series:
    """
    Parse to datetimes and bring into `tz`.

    Naive wall times in a DST overlap resolve to standard time; wall times in
    a DST gap shift forward to the first valid instant.
    """
    s = pd.to_datetime(ts, errors="coerce")
    if getattr(s.dt, "tz", None) is None:
        return s.dt.tz_localize(
            ZoneInfo(tz), ambiguous=False, nonexistent="shift_forward"
        )
    return s.dt.tz_convert(ZoneInfo(tz))


def parse_resolution(resolution: Optional[str]) -> Optional[int]:
    """ISO-8601 period resolution ('PT1H', 'PT15M') to minutes, None if unknown."""
    if resolution is None:
        return None
    return canon.RESOLUTION_MAP.get(str(resolution).strip().upper())


def parse_date(value: str | date | datetime | pd.Timestamp) -> pd.Timestamp:
    """Calendar date as a naive midnight Timestamp; raises DateRangeError if unparsable."""
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise exceptions.DateRangeError(f"Invalid date {value!r}; use YYYY-MM-DD.") from e
    if pd.isna(ts):
        raise exceptions.DateRangeError(f"Invalid date {value!r}; use YYYY-MM-DD.")
    if ts.tz is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def local_dates(idx: pd.DatetimeIndex, tz: str | None = None) -> pd.DatetimeIndex:
    """
    Local calendar date of each timestamp as naive midnight Timestamps.
    Assumes idx is tz-aware; converts to `tz` first when given.
    """
    if idx.tz is None:
        raise ValueError("Index must be tz-aware for local_dates.")
    local = idx.tz_convert(ZoneInfo(tz)) if tz else idx
    return pd.DatetimeIndex(local.tz_localize(None).normalize(), name="date")


def date_label(ts: pd.Series | pd.DatetimeIndex) -> pd.Series:
    """Locale-independent DD/MM/YYYY labels."""
    if isinstance(ts, pd.DatetimeIndex):
        return pd.Series(ts.strftime("%d/%m/%Y"), index=ts)
    return ts.dt.strftime("%d/%m/%Y")


def hours_in_local_day(day: pd.Timestamp, tz: str) -> float:
    """Wall-clock length of a local calendar day: 24, or 23/25 on DST change days."""
    start = pd.Timestamp(day).normalize().tz_localize(
        ZoneInfo(tz), nonexistent="shift_forward", ambiguous=True
    )
    end = (pd.Timestamp(day).normalize() + pd.Timedelta(days=1)).tz_localize(
        ZoneInfo(tz), nonexistent="shift_forward", ambiguous=True
    )
    return (end - start) / pd.Timedelta(hours=1)


def build_reading_frame(
    idx: pd.DatetimeIndex,
    kwh: np.ndarray | pd.Series | list[float],
    *,
    metering_point: str | list[Optional[str]] | None,
    quality: str | list[str] = canon.DEFAULT_QUALITY,
    interval_min: int | list[int] = canon.DEFAULT_INTERVAL_MIN,
) -> ReadingFrame:
    """Assemble a ReadingFrame; rows are stably sorted so timestamp ties keep input order."""
    df = pd.DataFrame(
        {
            canon.INDEX_NAME: idx,
            "metering_point": metering_point,
            "kwh": np.asarray(kwh, dtype=float),
            "quality": quality,
            "interval_min": interval_min,
        }
    ).set_index(canon.INDEX_NAME)
    df = df.sort_index(kind="stable")
    df.__class__ = ReadingFrame
    return cast(ReadingFrame, df)


def empty_reading_frame(tz: str = canon.DEFAULT_TZ) -> ReadingFrame:
    """
    Return an empty ReadingFrame with the correct tz-aware index and required columns.
    """
    idx = pd.DatetimeIndex([], tz=ZoneInfo(tz), name=canon.INDEX_NAME)
    out = pd.DataFrame(
        {
            "metering_point": np.array([], dtype=object),
            "kwh": np.array([], dtype=float),
            "quality": np.array([], dtype=object),
            "interval_min": np.array([], dtype=int),
        },
        index=idx,
    )
    out.__class__ = ReadingFrame
    return cast(ReadingFrame, out)


def frame_tz(df: pd.DataFrame, default: str = canon.DEFAULT_TZ) -> str:
    idx = pd.DatetimeIndex(df.index)
    if idx.tz is None:
        return default
    return getattr(idx.tz, "key", str(idx.tz))


def reading_interval(df: pd.DataFrame, default: int = canon.DEFAULT_INTERVAL_MIN) -> int:
    """Most common interval_min of a ReadingFrame, or the default when empty."""
    if df.empty or "interval_min" not in df.columns:
        return int(default)
    return int(pd.Series(df["interval_min"]).astype(int).mode().iloc[0])
