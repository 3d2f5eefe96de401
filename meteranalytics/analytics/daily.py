from __future__ import annotations
import logging
from typing import List, Optional

import pandas as pd

from ..core import canon, transform, utils
from ..core.types import ReadingFrame
from .types import DailySummary

logger = logging.getLogger(__name__)


def daily_summary(
    df: ReadingFrame,
    *,
    tz: Optional[str] = None,
    include_zero_readings: bool = True,
) -> pd.DataFrame:
    """
    Bucket readings by local calendar day.

    Returns a frame indexed by 'date' (naive midnight) with columns
    label, min, max, avg, total, range, count, all_zeros, has_data.
    Days without readings get no row; zero-filled days are kept and flagged
    so callers can tell "missing" from "present but all zeros".
    """
    tz = tz or utils.frame_tz(df)
    src = df if include_zero_readings else transform.drop_zero_readings(df)
    g = transform.groupby_day(src, tz)

    # keep min <= avg <= max exact under float rounding
    avg = (g["total"] / g["count"]).clip(lower=g["min"], upper=g["max"])
    out = g.assign(
        avg=avg.astype(float),
        range=(g["max"] - g["min"]).astype(float),
        has_data=g["total"] > 0,
        label=utils.date_label(pd.DatetimeIndex(g.index)).to_numpy(),
    )
    out["all_zeros"] = out["all_zeros"].astype(bool)
    out["count"] = out["count"].astype(int)
    logger.info(f"Aggregated {len(src)} readings into {len(out)} day(s)")
    return out[canon.DAILY_COLS]


def to_summaries(daily: pd.DataFrame) -> List[DailySummary]:
    return [
        DailySummary(
            date=pd.Timestamp(day).date(),
            label=row["label"],
            min=float(row["min"]),
            max=float(row["max"]),
            avg=float(row["avg"]),
            total=float(row["total"]),
            range=float(row["range"]),
            count=int(row["count"]),
            all_zeros=bool(row["all_zeros"]),
            has_data=bool(row["has_data"]),
        )
        for day, row in daily.iterrows()
    ]


def daily_totals(
    df: ReadingFrame,
    *,
    tz: Optional[str] = None,
    include_zero_readings: bool = True,
) -> pd.Series:
    """Total kWh per local calendar day."""
    daily = daily_summary(df, tz=tz, include_zero_readings=include_zero_readings)
    return transform.totals_by_date(daily).rename("daily_consumption")
