from __future__ import annotations
import logging
from typing import Optional

import numpy as np
import pandas as pd

from ..core import canon, exceptions, utils
from ..core.types import ReadingFrame, Strength
from .config import AnalyticsConfig, default_config
from .daily import daily_summary
from .quality import classify_daily
from .types import CorrelationResult

logger = logging.getLogger(__name__)


def pearson(x: pd.Series | np.ndarray, y: pd.Series | np.ndarray) -> Optional[float]:
    """
    Pearson product-moment correlation of two equal-length samples.

    None when fewer than two pairs or when either side has zero variance.
    """
    a = pd.Series(np.asarray(x, dtype=float))
    b = pd.Series(np.asarray(y, dtype=float))
    if len(a) != len(b):
        raise ValueError("pearson() needs equal-length inputs")
    if len(a) < 2 or a.nunique() < 2 or b.nunique() < 2:
        return None
    r = a.corr(b)
    if pd.isna(r):
        return None
    return float(np.clip(r, -1.0, 1.0))


def classify_strength(coefficient: Optional[float]) -> Strength:
    """|r| <= 0.3 Weak, <= 0.7 Moderate, above that Strong; boundaries fall in the lower bucket."""
    if coefficient is None:
        return "None"
    r = abs(coefficient)
    if r <= canon.WEAK_MAX:
        return "Weak"
    if r <= canon.MODERATE_MAX:
        return "Moderate"
    return "Strong"


def describe(coefficient: Optional[float], strength: Strength) -> str:
    if coefficient is None:
        return "Insufficient data or no correlation found"
    if strength == "Weak":
        return "Weak correlation - temperature has little effect on consumption"
    direction = "positive" if coefficient > 0 else "negative"
    effect = "increase" if coefficient > 0 else "decrease"
    if strength == "Strong":
        return f"Strong {direction} correlation - higher temperatures {effect} consumption"
    return f"Moderate {direction} correlation - higher temperatures somewhat {effect} consumption"


def _as_daily(s: pd.Series) -> pd.Series:
    # Normalise keys so date objects, strings and midnight Timestamps join alike
    s = s.copy()
    s.index = pd.DatetimeIndex([utils.parse_date(d) for d in s.index], name="date")
    exceptions.require(
        s.index.is_unique,
        f"{s.name or 'series'} has more than one value per date; aggregate to daily values first",
        exceptions.TransformError,
    )
    return pd.to_numeric(s, errors="coerce")


def correlate(
    consumption: pd.Series,
    temperature: pd.Series,
    *,
    drop_zero_days: bool = True,
) -> CorrelationResult:
    """
    Correlate daily consumption with daily temperature.

    Inner join on date: days present on one side only are left out, as are
    days with a missing value. `drop_zero_days` also leaves out zero-total
    consumption days, which are usually provider lag.
    """
    joined = pd.concat(
        {"consumption": _as_daily(consumption), "temperature": _as_daily(temperature)},
        axis=1,
        join="inner",
    ).dropna()
    if drop_zero_days:
        joined = joined[joined["consumption"] > 0]

    n = int(len(joined))
    r = pearson(joined["consumption"], joined["temperature"])
    strength = classify_strength(r)
    logger.info(f"Correlation over {n} day(s): r={r}, strength={strength}")

    return CorrelationResult(
        coefficient=None if r is None else round(r, 3),
        strength=strength,
        sample_size=n,
        description=describe(r, strength),
        avg_consumption=round(float(joined["consumption"].mean()), 2) if n else None,
        avg_temperature=round(float(joined["temperature"].mean()), 1) if n else None,
    )


def daily_weather(weather: pd.DataFrame, *, tz: Optional[str] = None) -> pd.DataFrame:
    """
    Hourly observations (from io.ingest.from_weather_rows) to local-day stats:
    avg/min/max temperature, avg humidity, total precipitation and the most
    frequent condition.
    """
    cols = [
        "avg_temperature",
        "min_temperature",
        "max_temperature",
        "avg_humidity",
        "total_precipitation",
        "weather_condition",
    ]
    if weather.empty:
        return pd.DataFrame(columns=cols, index=pd.DatetimeIndex([], name="date"))

    w = weather.copy()
    w.index = utils.local_dates(pd.DatetimeIndex(w.index), tz)
    g = w.groupby(level="date", sort=True)
    out = pd.DataFrame(
        {
            "avg_temperature": g["temperature_celsius"].mean().round(1),
            "min_temperature": g["temperature_celsius"].min().round(1),
            "max_temperature": g["temperature_celsius"].max().round(1),
            "avg_humidity": g["humidity_percent"].mean().round(1),
            "total_precipitation": g["precipitation_mm"].sum(min_count=1).round(2),
            "weather_condition": g["weather_condition"].agg(
                lambda s: s.dropna().mode().iloc[0] if s.notna().any() else None
            ),
        }
    )
    out.index.name = "date"
    return out[cols]


def consumption_weather_table(
    daily: pd.DataFrame, weather_daily: pd.DataFrame
) -> pd.DataFrame:
    """
    Full outer join of daily consumption and daily weather with a data_status
    column: 'complete', 'no_consumption_data' or 'no_weather_data'.
    Missing consumption reads as 0.0.
    """
    cons = daily["total"].rename("daily_consumption")
    out = pd.concat([cons, weather_daily], axis=1, join="outer").sort_index()
    out.index.name = "date"

    status = pd.Series("complete", index=out.index, dtype="object")
    status[out["avg_temperature"].isna()] = "no_weather_data"
    status[out["daily_consumption"].isna()] = "no_consumption_data"
    out["daily_consumption"] = out["daily_consumption"].fillna(0.0)
    out["data_status"] = status
    return out


def correlate_readings(
    df: ReadingFrame,
    weather: pd.DataFrame,
    *,
    config: Optional[AnalyticsConfig] = None,
) -> CorrelationResult:
    """
    Readings + hourly weather observations -> CorrelationResult.

    Days the quality check labels 'all_zero' are left out when
    config.correlation.drop_zero_days is set.
    """
    cfg = config or default_config()
    tz = utils.frame_tz(df, cfg.ingest.tz)
    daily = daily_summary(df, tz=tz, include_zero_readings=cfg.daily.include_zero_readings)
    if cfg.correlation.drop_zero_days and not daily.empty:
        labels = classify_daily(
            daily,
            tz=tz,
            interval_min=utils.reading_interval(df),
            min_coverage_pct=cfg.quality.min_coverage_pct,
        )
        daily = daily[labels.reindex(daily.index) != "all_zero"]
    weather_daily = daily_weather(weather, tz=tz)
    return correlate(
        daily["total"],
        weather_daily["avg_temperature"],
        drop_zero_days=cfg.correlation.drop_zero_days,
    )
