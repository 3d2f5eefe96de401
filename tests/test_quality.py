import pandas as pd
import pytest

import meteranalytics as ma
from meteranalytics.analytics.types import DailySummary


@pytest.mark.parametrize(
    "day,interval,expected",
    [
        ("2025-01-15", 60, 24),
        ("2025-03-30", 60, 23),
        ("2025-10-26", 60, 25),
        ("2025-01-15", 15, 96),
        ("2025-03-30", 15, 92),
        ("2025-01-15", 1440, 1),
    ],
)
def test_expected_readings(day, interval, expected):
    got = ma.quality.expected_readings(pd.Timestamp(day), tz="Europe/Copenhagen", interval_min=interval)
    assert got == expected


def test_missing_when_absent_or_empty():
    assert ma.quality.classify(None) == "missing"
    assert ma.quality.classify({"count": 0, "all_zeros": False}) == "missing"


def test_all_zero_beats_sparse():
    assert ma.quality.classify({"count": 2, "all_zeros": True}, expected=24) == "all_zero"


def test_sparse_below_coverage():
    row = {"count": 20, "all_zeros": False}
    assert ma.quality.classify(row, expected=24) == "sparse"
    assert ma.quality.classify(row, expected=24, min_coverage_pct=80.0) == "normal"
    # without an expected count the sparse check is skipped
    assert ma.quality.classify(row) == "normal"


def test_classify_accepts_summary_model():
    summary = DailySummary(
        date=pd.Timestamp("2025-01-01").date(),
        label="01/01/2025",
        min=1.0,
        max=1.0,
        avg=1.0,
        total=24.0,
        range=0.0,
        count=24,
        all_zeros=False,
        has_data=True,
    )
    assert ma.quality.classify(summary, expected=24) == "normal"


def test_dst_day_with_23_readings_is_normal(make_payload):
    payload = make_payload([("2025-03-29T23:00:00Z", [1.0] * 23)])
    daily = ma.daily.daily_summary(ma.ingest.from_provider(payload))
    labels = ma.quality.classify_daily(daily, tz="Europe/Copenhagen")
    assert labels.tolist() == ["normal"]


def test_classify_daily_covers_the_whole_range(make_hourly):
    df = pd.concat(
        [
            make_hourly("2025-01-01", 1),
            make_hourly("2025-01-02", 1, kwh=0.0),
            make_hourly("2025-01-04", 1).iloc[:6],
        ]
    )
    daily = ma.daily.daily_summary(df)
    labels = ma.quality.classify_daily(daily, end=pd.Timestamp("2025-01-05"))

    assert labels.name == "quality"
    assert labels.index.name == "date"
    assert labels.tolist() == ["normal", "all_zero", "missing", "sparse", "missing"]


def test_classify_daily_empty():
    labels = ma.quality.classify_daily(ma.daily.daily_summary(ma.utils.empty_reading_frame()))
    assert labels.empty
