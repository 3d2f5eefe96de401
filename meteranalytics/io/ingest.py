from __future__ import annotations
import logging
from typing import Any, Iterable, Iterator, Mapping, Optional

import numpy as np
import pandas as pd
from pydantic import ValidationError
from zoneinfo import ZoneInfo

from ..core import canon, exceptions, utils
from ..core.types import ReadingFrame
from .types import IntervalPoint, Period, Reading

logger = logging.getLogger(__name__)

WEATHER_COLS = [
    "temperature_celsius",
    "humidity_percent",
    "precipitation_mm",
    "weather_condition",
]


def _result_ok(item: Mapping[str, Any]) -> bool:
    if not item.get("success"):
        return False
    return str(item.get("errorCode")) == str(canon.PROVIDER_OK_CODE)


def _iter_periods(item: Mapping[str, Any]) -> Iterator[tuple[Optional[str], Period]]:
    doc = item.get("MyEnergyData_MarketDocument") or {}
    for series in doc.get("TimeSeries") or []:
        mp = series.get("mRID")
        for raw in series.get("Period") or []:
            start = (raw.get("timeInterval") or {}).get("start")
            if start is None:
                logger.warning(f"Skipping period without timeInterval.start for {mp}")
                continue
            try:
                period = Period(
                    start=start,
                    resolution=raw.get("resolution"),
                    points=list(raw.get("Point") or []),
                )
            except ValidationError as e:
                logger.warning(f"Skipping period with unusable start {start!r} for {mp}: {e.errors()[0]['msg']}")
                continue
            yield mp, period


def _interval_for(period: Period, interval_min: Optional[int]) -> int:
    """Explicit interval wins, then the period's declared resolution, then the default."""
    if interval_min is not None:
        return int(interval_min)
    if period.resolution is None:
        return canon.DEFAULT_INTERVAL_MIN
    declared = utils.parse_resolution(period.resolution)
    if declared is None:
        raise exceptions.IngestError(
            f"Unrecognised period resolution {period.resolution!r}; "
            "pass interval_min explicitly."
        )
    logger.debug(f"Using declared resolution {period.resolution} ({declared} min)")
    return declared


def _point_timestamp(start: pd.Timestamp, position: int, interval_min: int, tz: str) -> pd.Timestamp:
    # Daily points step by calendar day in local time; sub-daily ones by absolute duration.
    if interval_min == 1440:
        return start.tz_convert(ZoneInfo(tz)) + pd.DateOffset(days=position - 1)
    return start + pd.Timedelta(minutes=interval_min * (position - 1))


def from_provider(
    payload: Mapping[str, Any] | None,
    *,
    tz: str = canon.DEFAULT_TZ,
    interval_min: Optional[int] = None,
) -> ReadingFrame:
    """
    Flatten a provider time-series response into a ReadingFrame.

      - result items with success false or a non-OK errorCode are skipped;
        if nothing succeeds the frame is empty
      - timestamp = period start + (position - 1) x interval
      - malformed quantities read as 0.0; unplaceable points are dropped
      - rows are stably sorted, duplicates are kept
    """
    results = (payload or {}).get("result") or []
    ts: list[pd.Timestamp] = []
    kwh: list[float] = []
    quality: list[str] = []
    mps: list[Optional[str]] = []
    cadence: list[int] = []

    for item in results:
        if not _result_ok(item):
            logger.warning(
                f"Provider result not usable (success={item.get('success')}, "
                f"errorCode={item.get('errorCode')}, errorText={item.get('errorText')})"
            )
            continue
        for mp, period in _iter_periods(item):
            step = _interval_for(period, interval_min)
            start = pd.Timestamp(period.start)
            if start.tz is None:
                start = start.tz_localize(ZoneInfo(tz))
            start = start.tz_convert("UTC")
            for raw in period.points:
                try:
                    point = IntervalPoint.model_validate(raw)
                except ValidationError as e:
                    logger.warning(f"Dropping point without a valid position in {mp}: {e.errors()[0]['msg']}")
                    continue
                ts.append(_point_timestamp(start, point.position, step, tz))
                kwh.append(point.quantity)
                quality.append(point.quality)
                mps.append(mp)
                cadence.append(step)

    if not ts:
        return utils.empty_reading_frame(tz)

    idx = pd.DatetimeIndex(pd.to_datetime(ts, utc=True)).tz_convert(ZoneInfo(tz))
    out = utils.build_reading_frame(
        idx,
        kwh,
        metering_point=mps,
        quality=quality,
        interval_min=cadence,
    )
    logger.info(f"Reconstructed {len(out)} readings from {len(results)} provider result(s)")
    return out


def _auto_rename(df: pd.DataFrame) -> pd.DataFrame:
    new = df.copy()

    if isinstance(new.index, pd.DatetimeIndex):
        new.index.name = canon.INDEX_NAME
    else:
        cols = {str(c).lower(): c for c in new.columns}
        tcol = next((cols[k] for k in canon.COMMON_TIMESTAMP_NAMES if k in cols), None)
        if tcol is None:
            raise exceptions.IngestError(
                "No timestamp column found and index is not datetime. "
                f"Expected one of: {', '.join(canon.COMMON_TIMESTAMP_NAMES)}."
            )
        new = new.rename(columns={tcol: canon.INDEX_NAME})

    if "kwh" not in new.columns:
        for candidate in canon.COMMON_VALUE_NAMES:
            if candidate in new.columns:
                new = new.rename(columns={candidate: "kwh"})
                break
    if "kwh" not in new.columns:
        raise exceptions.IngestError(
            f"No consumption column found. Expected one of: {', '.join(canon.COMMON_VALUE_NAMES)}."
        )
    return new


def from_dataframe(
    df: pd.DataFrame,
    *,
    tz: str = canon.DEFAULT_TZ,
    metering_point: Optional[str] = None,
    interval_min: Optional[int] = None,
) -> ReadingFrame:
    """
    Normalise a flat readings frame to a ReadingFrame:
      - index: tz-aware 't_start' (naive values are taken as local to tz)
      - columns: metering_point, kwh (non-negative, malformed -> 0.0), quality, interval_min
    """
    if df.empty:
        return utils.empty_reading_frame(tz)

    df = _auto_rename(df)
    if isinstance(df.index, pd.DatetimeIndex):
        df = utils.ensure_tz_aware_index(df, tz).reset_index()
    else:
        df = df.reset_index(drop=True)
        df[canon.INDEX_NAME] = utils.safe_localize_series(df[canon.INDEX_NAME], tz)

    bad = df[canon.INDEX_NAME].isna()
    if bad.any():
        logger.warning(f"Dropping {int(bad.sum())} row(s) with unparsable timestamps")
        df = df[~bad]
    if df.empty:
        return utils.empty_reading_frame(tz)

    idx = pd.DatetimeIndex(df[canon.INDEX_NAME]).tz_convert(ZoneInfo(tz))
    kwh = pd.to_numeric(df["kwh"], errors="coerce").fillna(0.0).abs()
    cadence = interval_min if interval_min is not None else utils.infer_cadence_minutes(idx)

    if metering_point is None and "metering_point" in df.columns:
        mp = df["metering_point"].astype(str).to_list()
    else:
        mp = metering_point
    if "quality" in df.columns:
        quality = df["quality"].fillna(canon.DEFAULT_QUALITY).astype(str).to_list()
    else:
        quality = canon.DEFAULT_QUALITY

    return utils.build_reading_frame(
        idx,
        kwh.to_numpy(),
        metering_point=mp,
        quality=quality,
        interval_min=int(cadence),
    )


def from_rows(
    rows: Iterable[Mapping[str, Any]],
    *,
    tz: str = canon.DEFAULT_TZ,
    metering_point: Optional[str] = None,
    interval_min: Optional[int] = None,
) -> ReadingFrame:
    """Database-backed input: flat {reading_date, meter_reading} rows."""
    return from_dataframe(
        pd.DataFrame(list(rows)),
        tz=tz,
        metering_point=metering_point,
        interval_min=interval_min,
    )


def from_weather_rows(
    rows: Iterable[Mapping[str, Any]], *, tz: str = canon.DEFAULT_TZ
) -> pd.DataFrame:
    """
    Weather observations to a tz-aware frame indexed by 't_start' with
    numeric temperature/humidity/precipitation and a condition label.
    """
    df = pd.DataFrame(list(rows))
    if df.empty:
        idx = pd.DatetimeIndex([], tz=ZoneInfo(tz), name=canon.INDEX_NAME)
        return pd.DataFrame(columns=WEATHER_COLS, index=idx)

    cols = {str(c).lower(): c for c in df.columns}
    tcol = next((cols[k] for k in canon.COMMON_TIMESTAMP_NAMES if k in cols), None)
    if tcol is None:
        raise exceptions.IngestError("Weather rows need a timestamp column.")
    df = df.rename(columns={tcol: canon.INDEX_NAME})
    df[canon.INDEX_NAME] = utils.safe_localize_series(df[canon.INDEX_NAME], tz)
    df = df[df[canon.INDEX_NAME].notna()].copy()

    for col in WEATHER_COLS[:-1]:
        df[col] = pd.to_numeric(df[col], errors="coerce") if col in df.columns else np.nan
    if "weather_condition" not in df.columns:
        df["weather_condition"] = None

    return df.set_index(canon.INDEX_NAME).sort_index(kind="stable")[WEATHER_COLS]


def iter_readings(df: ReadingFrame) -> Iterator[Reading]:
    """Lazily yield Reading objects in frame order."""
    for ts, kwh, quality in zip(df.index, df["kwh"], df["quality"]):
        yield Reading(timestamp=ts.to_pydatetime(), consumption=float(kwh), quality=str(quality))


class ReadingSequence:
    """Finite, restartable view over a ReadingFrame; each iteration starts afresh."""

    def __init__(self, df: ReadingFrame):
        self._df = df

    def __iter__(self) -> Iterator[Reading]:
        return iter_readings(self._df)

    def __len__(self) -> int:
        return len(self._df)

    @property
    def frame(self) -> ReadingFrame:
        return self._df
