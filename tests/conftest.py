import numpy as np
import pandas as pd
import pytest

from meteranalytics.core import utils

TZ = "Europe/Copenhagen"
MRID = "571313100000000001"


def _point(position, quantity, quality="A04"):
    return {
        "position": str(position),
        "out_Quantity.quantity": quantity if quantity is None else str(quantity),
        "out_Quantity.quality": quality,
    }


def _period(start, quantities, resolution="PT1H"):
    return {
        "resolution": resolution,
        "timeInterval": {"start": start, "end": start},
        "Point": [_point(i + 1, q) for i, q in enumerate(quantities)],
    }


@pytest.fixture
def make_payload():
    """Build a provider-shaped response from (start, quantities) pairs."""

    def _make(periods, *, success=True, error_code=10000, resolution="PT1H"):
        return {
            "result": [
                {
                    "success": success,
                    "errorCode": error_code,
                    "errorText": "NoError" if error_code == 10000 else "WrongMeteringPointId",
                    "id": MRID,
                    "MyEnergyData_MarketDocument": {
                        "TimeSeries": [
                            {
                                "mRID": MRID,
                                "Period": [
                                    _period(start, qs, resolution) for start, qs in periods
                                ],
                            }
                        ]
                    },
                }
            ]
        }

    return _make


@pytest.fixture
def scenario_payload(make_payload):
    """Two day-sized periods: three readings on Jan 1, two on Jan 2."""
    return make_payload(
        [
            ("2025-01-01T00:00:00Z", [1.5, 2.0, 1.8]),
            ("2025-01-02T00:00:00Z", [2.5, 3.0]),
        ]
    )


def hourly_frame(start, days, kwh=1.0, tz=TZ):
    """Hourly ReadingFrame covering `days` whole local days from `start`."""
    first = pd.Timestamp(start).tz_localize(tz)
    last = (pd.Timestamp(start) + pd.Timedelta(days=days)).tz_localize(tz)
    idx = pd.date_range(first, last, freq="h", inclusive="left")
    values = np.full(len(idx), kwh, dtype=float) if np.isscalar(kwh) else np.asarray(kwh, dtype=float)
    return utils.build_reading_frame(idx, values, metering_point=MRID, interval_min=60)


@pytest.fixture
def hourly_week():
    """Seven full days at 1 kWh per hour (24 kWh/day)."""
    return hourly_frame("2025-01-06", 7)


@pytest.fixture
def make_hourly():
    return hourly_frame
