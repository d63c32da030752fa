"""
RawRecord / DeviceInfo dataclasses and conversion from plain dict rows.

RawRecord is the decoder's output and the aggregator's input: one FIT
'record' message, with every channel optional (device may not record all
metrics). Altitude fields stay in the FIT encoded units (scale 5, offset
500) and distance stays in centimeters; the aggregator decodes them.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RawRecord:
    """One per-second sample as it came off the device."""

    timestamp: datetime
    power: Optional[int] = None              # watts
    cadence: Optional[int] = None            # rpm
    temperature: Optional[int] = None        # Celsius, 0 = not reported
    heart_rate: Optional[int] = None         # bpm
    latitude: Optional[float] = None         # decimal degrees, 0 = no fix
    longitude: Optional[float] = None        # decimal degrees, 0 = no fix
    altitude: Optional[int] = None           # encoded (m + 500) * 5
    enhanced_altitude: Optional[int] = None  # encoded (m + 500) * 5
    distance: Optional[int] = None           # cumulative centimeters


@dataclass(frozen=True)
class DeviceInfo:
    """Manufacturer code reported by one device_info message."""

    manufacturer: Optional[int] = None


@dataclass
class DecodedActivity:
    """Everything the core needs from a decoded FIT container."""

    records: List[RawRecord] = field(default_factory=list)
    devices: List[DeviceInfo] = field(default_factory=list)


def records_from_dicts(rows: List[Dict[str, Any]]) -> List[RawRecord]:
    """
    Convert dict rows (JSON fixtures, captured payloads) into RawRecords.

    ``timestamp`` is required and may be a datetime or an ISO-8601 string;
    every other key is optional.
    """
    records = []
    for row in rows:
        ts = row["timestamp"]
        if isinstance(ts, str):
            ts = datetime.fromisoformat(ts)
        records.append(RawRecord(
            timestamp=ts,
            power=row.get("power"),
            cadence=row.get("cadence"),
            temperature=row.get("temperature"),
            heart_rate=row.get("heart_rate"),
            latitude=row.get("latitude"),
            longitude=row.get("longitude"),
            altitude=row.get("altitude"),
            enhanced_altitude=row.get("enhanced_altitude"),
            distance=row.get("distance"),
        ))
    return records
