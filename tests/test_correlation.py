import numpy as np
import pandas as pd
import pytest

import meteranalytics as ma


def _series(values, start="2025-01-01"):
    idx = pd.date_range(start, periods=len(values), freq="D", name="date")
    return pd.Series(values, index=idx, dtype=float)


def test_perfect_positive_and_negative():
    pos = ma.correlation.correlate(_series([1, 2, 3, 4]), _series([10, 20, 30, 40]))
    assert pos.coefficient == pytest.approx(1.0)
    assert pos.strength == "Strong"
    assert pos.sample_size == 4
    assert "positive" in pos.description

    neg = ma.correlation.correlate(_series([4, 3, 2, 1]), _series([10, 20, 30, 40]))
    assert neg.coefficient == pytest.approx(-1.0)
    assert neg.strength == "Strong"
    assert "negative" in neg.description


@pytest.mark.parametrize(
    "consumption,temperature",
    [
        ([5.0], [3.0]),
        ([], []),
        ([5.0, 5.0, 5.0], [1.0, 2.0, 3.0]),
        ([1.0, 2.0, 3.0], [4.0, 4.0, 4.0]),
    ],
)
def test_degenerate_inputs_give_no_coefficient(consumption, temperature):
    res = ma.correlation.correlate(_series(consumption), _series(temperature))
    assert res.coefficient is None
    assert res.strength == "None"
    assert res.description


@pytest.mark.parametrize(
    "r,expected",
    [
        (0.0, "Weak"),
        (0.3, "Weak"),
        (-0.3, "Weak"),
        (0.31, "Moderate"),
        (0.7, "Moderate"),
        (-0.71, "Strong"),
        (1.0, "Strong"),
        (None, "None"),
    ],
)
def test_strength_buckets(r, expected):
    assert ma.correlation.classify_strength(r) == expected


def test_pearson_matches_numpy():
    rng = np.random.default_rng(3)
    x = rng.normal(size=50)
    y = 0.5 * x + rng.normal(size=50)
    assert ma.correlation.pearson(x, y) == pytest.approx(np.corrcoef(x, y)[0, 1])


def test_only_shared_dates_count():
    consumption = _series([10.0, 12.0, 14.0, 16.0, 18.0], start="2025-01-01")
    temperature = _series([1.0, 2.0, 3.0, 5.0, 8.0], start="2025-01-03")
    res = ma.correlation.correlate(consumption, temperature)
    assert res.sample_size == 3
    assert res.coefficient is not None


def test_keys_may_be_date_strings():
    consumption = pd.Series([1.0, 2.0, 3.0], index=["2025-01-01", "2025-01-02", "2025-01-03"])
    temperature = _series([3.0, 2.0, 1.0])
    res = ma.correlation.correlate(consumption, temperature)
    assert res.sample_size == 3
    assert res.coefficient == pytest.approx(-1.0)


def test_zero_days_are_dropped_by_default():
    consumption = _series([0.0, 10.0, 20.0, 30.0])
    temperature = _series([50.0, 1.0, 2.0, 3.0])
    dropped = ma.correlation.correlate(consumption, temperature)
    kept = ma.correlation.correlate(consumption, temperature, drop_zero_days=False)
    assert dropped.sample_size == 3
    assert dropped.coefficient == pytest.approx(1.0)
    assert kept.sample_size == 4
    assert kept.coefficient < 0


def test_averages_are_reported():
    res = ma.correlation.correlate(_series([10.0, 20.0]), _series([2.0, 4.0]))
    assert res.avg_consumption == 15.0
    assert res.avg_temperature == 3.0


def _weather_rows(start, temps):
    rows = []
    for i, t in enumerate(temps):
        day = pd.Timestamp(start) + pd.Timedelta(days=i)
        for hour in (6, 18):
            rows.append(
                {
                    "timestamp": (day + pd.Timedelta(hours=hour)).strftime("%Y-%m-%d %H:%M"),
                    "temperature_celsius": t + (1.0 if hour == 18 else -1.0),
                    "humidity_percent": 80,
                    "precipitation_mm": 0.5,
                    "weather_condition": "Rain" if hour == 6 else "Cloudy",
                }
            )
    return rows


def test_daily_weather_rollup():
    weather = ma.ingest.from_weather_rows(_weather_rows("2025-01-01", [5.0, 7.0]))
    daily = ma.correlation.daily_weather(weather)
    assert list(daily.index) == [pd.Timestamp("2025-01-01"), pd.Timestamp("2025-01-02")]
    assert daily["avg_temperature"].tolist() == [5.0, 7.0]
    assert daily["min_temperature"].tolist() == [4.0, 6.0]
    assert daily["max_temperature"].tolist() == [6.0, 8.0]
    assert daily["total_precipitation"].tolist() == [1.0, 1.0]
    assert daily["avg_humidity"].iloc[0] == 80.0


def test_consumption_weather_table_status(make_hourly):
    daily = ma.daily.daily_summary(make_hourly("2025-01-01", 2))
    weather = ma.correlation.daily_weather(
        ma.ingest.from_weather_rows(_weather_rows("2025-01-02", [3.0, 4.0]))
    )
    table = ma.correlation.consumption_weather_table(daily, weather)
    assert table["data_status"].tolist() == ["no_weather_data", "complete", "no_consumption_data"]
    assert table["daily_consumption"].tolist() == [24.0, 24.0, 0.0]


def test_correlate_readings_end_to_end(make_hourly):
    temps = [0.0, 2.0, 4.0, 6.0, 8.0]
    # colder days use more energy
    frames = [
        make_hourly(f"2025-01-0{i + 1}", 1, kwh=2.0 - 0.2 * i) for i in range(len(temps))
    ]
    frames.append(make_hourly("2025-01-06", 1, kwh=0.0))
    df = pd.concat(frames)
    weather = ma.ingest.from_weather_rows(_weather_rows("2025-01-01", temps + [20.0]))

    res = ma.correlation.correlate_readings(df, weather)
    assert res.sample_size == 5
    assert res.coefficient == pytest.approx(-1.0)
    assert res.strength == "Strong"

    cfg = ma.default_config()
    cfg.correlation.drop_zero_days = False
    assert ma.correlation.correlate_readings(df, weather, config=cfg).sample_size == 6


def test_sub_daily_keys_are_rejected():
    idx = pd.date_range("2025-01-01", periods=4, freq="6h")
    hourly = pd.Series([1.0, 2.0, 3.0, 4.0], index=idx, name="consumption")
    with pytest.raises(ma.exceptions.TransformError):
        ma.correlation.correlate(hourly, _series([1.0]))


def test_pearson_degenerate_and_length_mismatch():
    assert ma.correlation.pearson([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]) is None
    assert ma.correlation.pearson([1.0], [2.0]) is None
    with pytest.raises(ValueError):
        ma.correlation.pearson([1.0, 2.0], [1.0])
