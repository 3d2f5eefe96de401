from __future__ import annotations
from typing import Final, Dict

INDEX_NAME: Final[str] = "t_start"
REQUIRED_COLS: Final[list[str]] = ["metering_point", "kwh", "quality", "interval_min"]
DAILY_COLS: Final[list[str]] = [
    "label",
    "min",
    "max",
    "avg",
    "total",
    "range",
    "count",
    "all_zeros",
    "has_data",
]
DEFAULT_TZ: Final[str] = "Europe/Copenhagen"
DEFAULT_INTERVAL_MIN: Final[int] = 60
DEFAULT_QUALITY: Final[str] = "A04"
COMMON_TIMESTAMP_NAMES = ("reading_date", "t_start", "timestamp", "time", "ts", "datetime", "date")
COMMON_VALUE_NAMES = ("meter_reading", "kwh", "quantity", "value", "consumption")

# Provider errorCode meaning "no error"
PROVIDER_OK_CODE: Final[int] = 10000

# ISO-8601 period resolution -> minutes
RESOLUTION_MAP: Dict[str, int] = {
    "PT15M": 15,
    "PT30M": 30,
    "PT1H": 60,
    "PT60M": 60,
    "P1D": 1440,
}

YEAR_OVER_YEAR: Final[str] = "year_over_year"
MONTH_OVER_MONTH: Final[str] = "month_over_month"
COMPARISON_TYPES: Final[tuple[str, ...]] = (YEAR_OVER_YEAR, MONTH_OVER_MONTH)

# |r| at or below the bound belongs to the bucket
WEAK_MAX: Final[float] = 0.3
MODERATE_MAX: Final[float] = 0.7

ROLLING_WINDOWS: Final[tuple[int, ...]] = (7, 30, 365)
MAX_RANGE_DAYS: Final[int] = 730
