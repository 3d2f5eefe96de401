from __future__ import annotations
import pandas as pd
from typing import cast

from . import canon, exceptions, utils


def assert_canon(df: pd.DataFrame) -> None:
    if df.index.name != canon.INDEX_NAME:
        raise exceptions.CanonError(f"Index must be '{canon.INDEX_NAME}'.")
    tz_index = cast(pd.DatetimeIndex, df.index)
    if tz_index.tz is None:
        raise exceptions.CanonError("Index must be tz-aware.")
    for col in canon.REQUIRED_COLS:
        if col not in df.columns:
            raise exceptions.CanonError(f"Missing required column '{col}'.")
    if not df.index.is_monotonic_increasing:
        raise exceptions.CanonError("Index must be sorted ascending.")
    if (df["kwh"] < 0).any():
        raise exceptions.CanonError(
            "Negative kWh values detected; energy should be non-negative."
        )


def validate_comparison_type(comparison_type: str) -> str:
    """Return the comparison type unchanged or fail fast on anything unsupported."""
    if comparison_type not in canon.COMPARISON_TYPES:
        raise exceptions.UnsupportedComparisonTypeError(
            f"Unsupported comparison type {comparison_type!r}. "
            f"Expected one of: {', '.join(canon.COMPARISON_TYPES)}."
        )
    return comparison_type


def validate_date_range(
    date_from,
    date_to,
    *,
    max_days: int | None = canon.MAX_RANGE_DAYS,
) -> tuple[pd.Timestamp, pd.Timestamp]:
    """
    Parse and check an inclusive [date_from, date_to] range.

    The analytics functions assume callers already enforced the span cap;
    pass max_days=None to check ordering only.
    """
    start = utils.parse_date(date_from)
    end = utils.parse_date(date_to)
    exceptions.require(
        start <= end, "date_from must be on or before date_to", exceptions.DateRangeError
    )
    if max_days is not None:
        span = int((end - start).days)
        exceptions.require(
            span <= max_days,
            f"Date range spans {span} days; the maximum is {max_days}.",
            exceptions.DateRangeError,
        )
    return start, end
