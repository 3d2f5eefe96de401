from __future__ import annotations
from typing import List, Optional
import datetime as dt

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from ..core.types import ComparisonType, DayQuality, Strength


###
### DAILY
###


class DailySummary(BaseModel):
    """Statistics for one local calendar day of readings."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    label: str  # DD/MM/YYYY
    min: float
    max: float
    avg: float
    total: float
    range: float
    count: int = Field(ge=0)
    all_zeros: bool
    has_data: bool


###
### COMPARISON
###


class ComparisonRow(BaseModel):
    """One current-period day against its calendar-aligned counterpart."""
    date: dt.date
    previous_date: dt.date
    comparison_type: ComparisonType
    current_consumption: float
    previous_consumption: Optional[float] = None
    absolute_difference: Optional[float] = None
    percentage_change: Optional[float] = None
    has_previous_data: bool = False
    current_quality: DayQuality = "normal"
    previous_quality: DayQuality = "missing"


class ComparisonSummary(BaseModel):
    current_total: float = 0.0
    previous_total: float = 0.0
    total_change: float = 0.0
    average_percentage_change: Optional[float] = None
    records_with_comparison: int = 0
    total_records: int = 0


class ComparisonReport(BaseModel):
    """Rows plus dashboard summary for a comparison request."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    comparison_type: ComparisonType
    date_from: dt.date
    date_to: dt.date
    previous_from: dt.date
    previous_to: dt.date
    rows: pd.DataFrame
    summary: ComparisonSummary

    def records(self) -> List[ComparisonRow]:
        clean = self.rows.astype(object).where(self.rows.notna(), None)
        return [ComparisonRow(**r) for r in clean.to_dict(orient="records")]


###
### CORRELATION
###


class CorrelationResult(BaseModel):
    coefficient: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    strength: Strength = "None"
    sample_size: int = Field(default=0, ge=0)
    description: str = ""
    avg_consumption: Optional[float] = None
    avg_temperature: Optional[float] = None


###
### TRENDS
###


class DeviationSummary(BaseModel):
    total_deviations: int = 0
    above_average: int = 0
    below_average: int = 0
    max_deviation_percent: float = 0.0
    threshold_percent: float


class TrendReport(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    rolling: pd.DataFrame
    deviations: pd.DataFrame
    summary: DeviationSummary
