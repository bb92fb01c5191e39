# tests/conftest.py
from datetime import datetime, timezone

import pytest

from solarpanels.models import CurrentSnapshot, Averages, Sample, SeriesSet


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def make_sample(at, wh, cumulative_kwh=None, uv_level=None):
    return Sample(at_utc=at, wh=wh, cumulative_kwh=cumulative_kwh, uv_level=uv_level)


def frozen_clock(dt):
    return lambda: dt


@pytest.fixture
def today_samples():
    return (
        make_sample(utc(2024, 1, 1, 6, 0), 0.0, 0.0),
        make_sample(utc(2024, 1, 1, 9, 0), 1200.0, 1.5),
        make_sample(utc(2024, 1, 1, 9, 30), 1800.0, 2.25),
        make_sample(utc(2024, 1, 1, 10, 0), 2400.0, 3.4),
    )


@pytest.fixture
def yesterday_samples():
    return (
        make_sample(utc(2023, 12, 31, 8, 0), 500.0, 0.5),
        make_sample(utc(2023, 12, 31, 12, 0), 3500.0, 9.0),
        make_sample(utc(2023, 12, 31, 18, 0), 0.0, 14.2),
    )


@pytest.fixture
def series_set(today_samples, yesterday_samples):
    return SeriesSet(today=today_samples, yesterday=yesterday_samples)


@pytest.fixture
def snapshot():
    return CurrentSnapshot(
        current_production_wh=2400.0,
        today_production_kwh=3.4,
        month_production_kwh=3.4,
        all_time_production_kwh=12345.678,
        yesterday_production_kwh=14.2,
        averages=Averages(last_15_mins=2300.5, last_1_hour=2000.25, last_3_hours=1500.0),
    )


@pytest.fixture
def current_json():
    return {
        "currentProductionWh": 2400,
        "todayProductionKwh": 3.4,
        "yesterdayProductionKwh": 14.2,
        "monthProductionKwh": 3.4,
        "allTimeProductionKwh": 12345.678,
        "statistics": {
            "averages": {"last15Mins": 2300.5, "last1Hour": 2000.25, "last3Hours": 1500},
        },
    }


@pytest.fixture
def history_json():
    return {
        "today": [
            {"atUtc": "2024-01-01T09:00:00Z", "wh": 1200, "cumulativeKwh": 1.5},
            {"atUtc": "2024-01-01T10:00:00Z", "wh": 2400, "cumulativeKwh": 3.4},
        ],
        "yesterday": [
            {"atUtc": "2023-12-31T12:00:00Z", "wh": 3500, "cumulativeKwh": 9.0},
        ],
    }
