"""Shared test fixtures and synthetic record builders."""
from datetime import datetime, timedelta
from typing import List

import pytest

from ridetrace.fit.records import DecodedActivity, DeviceInfo, RawRecord

START = datetime(2025, 6, 1, 8, 0, 0)


def encode_altitude(meters: float) -> int:
    """Inverse of the FIT altitude encoding (scale 5, offset 500)."""
    return int(round((meters + 500.0) * 5))


def make_record(t: float, **fields) -> RawRecord:
    """RawRecord `t` seconds after START."""
    return RawRecord(timestamp=START + timedelta(seconds=t), **fields)


def make_ride(
    n: int = 120,
    power: int = 200,
    heart_rate: int = 140,
    cadence: int = 90,
    temperature: int = 20,
    start_alt_m: float = 100.0,
    climb_m_per_s: float = 0.2,
) -> List[RawRecord]:
    """
    Synthetic 1 Hz ride heading due east at 5 m/s on a steady climb.

    Every point lies on one straight line, so the simplifier keeps only
    the two endpoints.
    """
    return [
        make_record(
            t,
            power=power,
            cadence=cadence,
            temperature=temperature,
            heart_rate=heart_rate,
            latitude=45.0,
            longitude=7.0 + t * 0.0001,
            enhanced_altitude=encode_altitude(start_alt_m + climb_m_per_s * t),
            distance=t * 500,  # centimeters
        )
        for t in range(n)
    ]


def make_zigzag_ride(n: int = 60, power_cycle=(100, 300)) -> List[RawRecord]:
    """Ride that turns every 10 s, so the simplifier keeps the corners."""
    records = []
    lat, lon = 45.0, 7.0
    for t in range(n):
        if t > 0:
            lon += 0.0001
            lat += 0.0001 if (t // 10) % 2 == 0 else -0.0001
        records.append(make_record(
            t,
            power=power_cycle[(t // 10) % len(power_cycle)],
            cadence=85,
            temperature=18,
            heart_rate=130 + t % 20,
            latitude=lat,
            longitude=lon,
            enhanced_altitude=encode_altitude(200.0 + (t % 10)),
            distance=t * 700,
        ))
    return records


@pytest.fixture
def ride_records() -> List[RawRecord]:
    return make_ride()


@pytest.fixture
def ride_activity(ride_records) -> DecodedActivity:
    return DecodedActivity(records=ride_records, devices=[DeviceInfo(manufacturer=1)])


@pytest.fixture
def zigzag_activity() -> DecodedActivity:
    return DecodedActivity(records=make_zigzag_ride(), devices=[DeviceInfo(manufacturer=89)])
