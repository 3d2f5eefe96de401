from __future__ import annotations
from typing import Literal
import pandas as pd

ComparisonType = Literal["year_over_year", "month_over_month"]
DayQuality = Literal["normal", "all_zero", "sparse", "missing"]
Strength = Literal["None", "Weak", "Moderate", "Strong"]


class ReadingFrame(pd.DataFrame):
    """
    Strongly-typed canonical readings dataframe.

    Expected:
      - DatetimeIndex named 't_start', tz-aware
      - Columns: ['metering_point', 'kwh', 'quality', 'interval_min']
    """

    @property
    def _constructor(self):
        return ReadingFrame

    @property
    def metering_point(self) -> pd.Series:
        return self["metering_point"]

    @property
    def kwh(self) -> pd.Series:
        return self["kwh"]

    @property
    def quality(self) -> pd.Series:
        return self["quality"]

    @property
    def interval_min(self) -> pd.Series:
        return self["interval_min"]
