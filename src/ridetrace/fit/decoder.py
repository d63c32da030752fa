"""
FIT decoder: converts a .fit binary container into RawRecords + DeviceInfos.

Field mapping from FIT to RawRecord:
  FIT field             → RawRecord field (units)
  timestamp             → timestamp (datetime)
  power                 → power (watts)
  cadence               → cadence (rpm)
  temperature           → temperature (°C)
  heart_rate            → heart_rate (bpm)
  position_lat          → latitude (degrees, converted from semicircles)
  position_long         → longitude (degrees, converted from semicircles)
  altitude              → altitude (raw encoded, NOT scaled)
  enhanced_altitude     → enhanced_altitude (raw encoded, NOT scaled)
  distance              → distance (raw centimeters, NOT scaled)

fitparse applies scale/offset to `value`; we read `raw_value` for the
altitude and distance fields so the aggregator sees the encoded form.
Invalid markers are already turned into None by fitparse.
"""
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import fitparse

from ridetrace.errors import ActivityError
from ridetrace.fit.records import DecodedActivity, DeviceInfo, RawRecord

logger = logging.getLogger(__name__)

# Garmin semicircle → degree conversion constant
# Degrees = semicircles * (180 / 2^31)
_SEMICIRCLE_TO_DEGREES = 180.0 / (2**31)


class DecodeFailure(ActivityError):
    """Raised when a FIT container cannot be decoded into records."""


def _field_map(message) -> Dict[str, Tuple[Any, Any]]:
    """name → (value, raw_value) for every field in a fitparse DataMessage."""
    return {f.name: (f.value, f.raw_value) for f in message.fields}


def _semicircles_to_degrees(value: Optional[Any]) -> Optional[float]:
    if value is None:
        return None
    return float(value) * _SEMICIRCLE_TO_DEGREES


def _as_int(value: Optional[Any]) -> Optional[int]:
    if value is None:
        return None
    return int(value)


def _record_from_message(message) -> Optional[RawRecord]:
    fields = _field_map(message)
    timestamp = fields.get("timestamp", (None, None))[0]
    if timestamp is None:
        return None

    def value(name):
        return fields.get(name, (None, None))[0]

    def raw(name):
        return fields.get(name, (None, None))[1]

    return RawRecord(
        timestamp=timestamp,
        power=_as_int(value("power")),
        cadence=_as_int(value("cadence")),
        temperature=_as_int(value("temperature")),
        heart_rate=_as_int(value("heart_rate")),
        latitude=_semicircles_to_degrees(value("position_lat")),
        longitude=_semicircles_to_degrees(value("position_long")),
        altitude=_as_int(raw("altitude")),
        enhanced_altitude=_as_int(raw("enhanced_altitude")),
        distance=_as_int(raw("distance")),
    )


def _decode(fit: "fitparse.FitFile", source: str) -> DecodedActivity:
    try:
        messages = list(fit.get_messages("record"))
        device_messages = list(fit.get_messages("device_info"))
    except Exception as exc:
        raise DecodeFailure(f"Failed to decode FIT data from {source}: {exc}") from exc

    if not messages:
        raise DecodeFailure(f"No 'record' messages found in FIT data from {source}")

    records: List[RawRecord] = []
    for message in messages:
        record = _record_from_message(message)
        if record is None:
            continue  # skip records without a timestamp
        records.append(record)

    devices = [
        DeviceInfo(manufacturer=_as_int(_field_map(m).get("manufacturer", (None, None))[1]))
        for m in device_messages
    ]

    logger.debug(
        "Decoded %d records and %d device_info messages from %s",
        len(records), len(devices), source,
    )
    return DecodedActivity(records=records, devices=devices)


def decode_fit_file(path: Path) -> DecodedActivity:
    """
    Decode a .fit file on disk.

    Raises:
        DecodeFailure: if the file doesn't exist or cannot be parsed as a valid FIT file
    """
    if not path.exists():
        raise DecodeFailure(f"FIT file not found: {path}")

    try:
        fit = fitparse.FitFile(str(path))
    except Exception as exc:
        raise DecodeFailure(f"Failed to open FIT file {path}: {exc}") from exc
    return _decode(fit, str(path))


def decode_fit_bytes(data: bytes) -> DecodedActivity:
    """Decode an in-memory FIT container (HTTP uploads)."""
    if not data:
        raise DecodeFailure("Empty FIT payload")
    try:
        fit = fitparse.FitFile(io.BytesIO(data))
    except Exception as exc:
        raise DecodeFailure(f"Failed to open FIT payload: {exc}") from exc
    return _decode(fit, "upload")
