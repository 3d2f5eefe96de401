"""Validation tests for canonical reading frames and caller inputs."""

import pandas as pd
import pytest

from meteranalytics import validate
from meteranalytics.core.exceptions import CanonError, DateRangeError, MAError


def test_assert_canon_rejects_negative_kwh(hourly_week):
    """Energy readings are non-negative; a single negative value should fail."""
    df = hourly_week.copy()
    df.iloc[3, df.columns.get_loc("kwh")] = -1.0
    with pytest.raises(CanonError):
        validate.assert_canon(df)


def test_assert_canon_rejects_naive_index(hourly_week):
    """Naive indices are invalid; assert_canon should reject them."""
    df = hourly_week.copy()
    df.index = df.index.tz_localize(None)
    with pytest.raises(CanonError):
        validate.assert_canon(df)


def test_assert_canon_rejects_unsorted(hourly_week):
    df = hourly_week.iloc[::-1]
    with pytest.raises(CanonError):
        validate.assert_canon(df)


def test_assert_canon_rejects_missing_column(hourly_week):
    with pytest.raises(CanonError):
        validate.assert_canon(hourly_week.drop(columns="quality"))


def test_comparison_types():
    assert validate.validate_comparison_type("year_over_year") == "year_over_year"
    assert validate.validate_comparison_type("month_over_month") == "month_over_month"
    with pytest.raises(MAError):
        validate.validate_comparison_type("YEAR_OVER_YEAR")


def test_date_range_cap():
    """Spans up to 730 days pass; one more day is rejected."""
    start, end = validate.validate_date_range("2023-01-01", "2024-12-31")
    assert (end - start).days == 730
    with pytest.raises(DateRangeError):
        validate.validate_date_range("2023-01-01", "2025-01-01")
    # ordering-only check
    validate.validate_date_range("2020-01-01", "2025-01-01", max_days=None)


def test_date_range_single_day_and_inverted():
    start, end = validate.validate_date_range(pd.Timestamp("2025-01-01 13:00"), "2025-01-01")
    assert start == end == pd.Timestamp("2025-01-01")
    with pytest.raises(DateRangeError):
        validate.validate_date_range("2025-01-02", "2025-01-01")
