"""
Sample filter & aggregator: one pass over the raw records.

Produces two separate parallel-array sets:
  - CleanedChannels: one entry per traversed record (power/cadence/HR gaps
    become 0), plus temperature and distance arrays that only hold
    reported values. Fed to normalized power and the best-average curves.
  - CoordinateAlignedChannels: entries only for records carrying a usable
    GPS fix. Fed to the track simplifier and the merge step, which
    re-indexes these arrays with the simplifier's retained indices.

Along the way it accumulates elevation gain and stopped time.

Sentinels (the FIT "invalid" markers) are converted to None exactly once,
in _normalise(); nothing downstream re-checks magic numbers.
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from ridetrace.errors import ActivityError
from ridetrace.fit.records import DeviceInfo, RawRecord

logger = logging.getLogger(__name__)

# FIT manufacturer code for Wahoo Fitness
WAHOO_MANUFACTURER = 89

FEET_PER_METER = 3.28084

# FIT invalid markers per base type
_UINT8_INVALID = 0xFF
_UINT16_INVALID = 0xFFFF
_UINT32_INVALID = 0xFFFFFFFF

_SENTINELS = {
    "power": _UINT16_INVALID,
    "cadence": _UINT8_INVALID,
    "heart_rate": _UINT8_INVALID,
    "altitude": _UINT16_INVALID,
    "enhanced_altitude": _UINT32_INVALID,
    "distance": _UINT32_INVALID,
}


class EmptyActivity(ActivityError):
    """Raised when the activity contains no records at all."""


class NoValidSamples(ActivityError):
    """Raised when records exist but none of them carries a usable reading."""


@dataclass(frozen=True)
class CleanedChannels:
    power: Tuple[int, ...]
    cadence: Tuple[int, ...]
    temperature: Tuple[int, ...]   # reported readings only; never cross-indexed
    heart_rate: Tuple[int, ...]
    distance: Tuple[float, ...]    # meters, valid readings only


@dataclass(frozen=True)
class CoordinateAlignedChannels:
    """
    Parallel arrays with one entry per GPS-bearing record.

    Index i in every field refers to the same original record.
    """
    longitude: Tuple[float, ...]
    latitude: Tuple[float, ...]
    altitude_raw: Tuple[int, ...]        # encoded altitude, third coordinate
    elevation_ft: Tuple[float, ...]
    power: Tuple[int, ...]
    heart_rate: Tuple[int, ...]
    distance: Tuple[float, ...]          # meters, 0 when not reported
    elapsed_seconds: Tuple[float, ...]   # since the first raw record

    def __post_init__(self):
        lengths = {len(getattr(self, name)) for name in self.__dataclass_fields__}
        if len(lengths) > 1:
            raise ValueError(f"Coordinate-aligned arrays differ in length: {sorted(lengths)}")

    def __len__(self) -> int:
        return len(self.longitude)

    def coordinates(self) -> List[Tuple[float, float, float]]:
        """(longitude, latitude, raw altitude) triples for the simplifier."""
        return [
            (lon, lat, float(alt))
            for lon, lat, alt in zip(self.longitude, self.latitude, self.altitude_raw)
        ]


@dataclass(frozen=True)
class AggregateResult:
    cleaned: CleanedChannels
    aligned: CoordinateAlignedChannels
    elevation_gain_m: float
    stopped_seconds: int
    elapsed_seconds: int
    sample_count: int          # records that carried at least one usable reading
    average_power: float       # mean of the zero-filled power array
    total_distance_km: float   # last record's cumulative distance


def decode_altitude(raw: int) -> float:
    """FIT altitude encoding: scale 5, offset 500 → meters."""
    return raw / 5.0 - 500.0


def meters_to_feet(meters: float) -> float:
    return round(meters * FEET_PER_METER, 2)


def recording_manufacturer(devices: Iterable[DeviceInfo]) -> Optional[int]:
    """
    The manufacturer that decides the altitude policy for a recording.

    Any Wahoo device wins; otherwise the first reported code.
    """
    codes = [d.manufacturer for d in devices if d is not None and d.manufacturer is not None]
    if WAHOO_MANUFACTURER in codes:
        return WAHOO_MANUFACTURER
    return codes[0] if codes else None


def altitude_field_order(manufacturer: Optional[int]) -> Tuple[str, str]:
    """
    Preferred → fallback altitude field for elevation gain.

    Wahoo units report elevation primarily through `altitude`; everyone
    else through `enhanced_altitude`.
    """
    if manufacturer == WAHOO_MANUFACTURER:
        return ("altitude", "enhanced_altitude")
    return ("enhanced_altitude", "altitude")


def _normalise(record: RawRecord) -> RawRecord:
    """Replace FIT invalid markers with None."""
    changes = {
        name: None
        for name, sentinel in _SENTINELS.items()
        if getattr(record, name) == sentinel
    }
    return replace(record, **changes) if changes else record


def _is_nan(value: Optional[float]) -> bool:
    return value is not None and isinstance(value, float) and math.isnan(value)


def _coordinate_altitude(record: RawRecord) -> Optional[int]:
    if record.enhanced_altitude is not None:
        return record.enhanced_altitude
    return record.altitude


def _has_fix(record: RawRecord, altitude: Optional[int]) -> bool:
    if not record.latitude or not record.longitude:
        return False  # 0 means no fix
    if altitude is None:
        return False
    return not (
        _is_nan(record.latitude)
        or _is_nan(record.longitude)
        or _is_nan(float(altitude))
    )


def _gain_altitude(record: RawRecord, order: Tuple[str, str]) -> Optional[float]:
    """Decoded meters from the first usable field in `order`, else None. Raw 0 is unusable."""
    for name in order:
        raw = getattr(record, name)
        if raw:
            return decode_altitude(raw)
    return None


def _has_any_reading(record: RawRecord) -> bool:
    return any(
        v is not None
        for v in (
            record.power, record.cadence, record.heart_rate, record.distance,
            record.altitude, record.enhanced_altitude,
        )
    ) or bool(record.temperature) or bool(record.latitude and record.longitude)


def aggregate_records(
    records: Sequence[RawRecord],
    manufacturer: Optional[int] = None,
) -> AggregateResult:
    """
    Filter and aggregate raw records in a single pass.

    Args:
        records: Chronologically ordered raw records.
        manufacturer: FIT manufacturer code used to pick the altitude policy.

    Returns:
        AggregateResult with both channel sets and the accumulated totals.

    Raises:
        EmptyActivity: if `records` is empty.
        NoValidSamples: if no record carries any usable reading.
    """
    if not records:
        raise EmptyActivity("activity contains no records")

    order = altitude_field_order(manufacturer)
    samples = [_normalise(r) for r in records]
    start = samples[0].timestamp

    powers: List[int] = []
    cadences: List[int] = []
    temps: List[int] = []
    hearts: List[int] = []
    distances: List[float] = []

    lons: List[float] = []
    lats: List[float] = []
    alts: List[int] = []
    coord_elevations: List[float] = []
    coord_powers: List[int] = []
    coord_hearts: List[int] = []
    coord_distances: List[float] = []
    coord_elapsed: List[float] = []

    elevation_gain = 0.0
    previous_altitude: Optional[float] = None
    stopped = 0.0
    valid = 0

    for i, sample in enumerate(samples):
        # Equal cumulative distance (including both missing) counts as stopped
        if i > 0 and sample.distance == samples[i - 1].distance:
            stopped += (sample.timestamp - samples[i - 1].timestamp).total_seconds()

        if _has_any_reading(sample):
            valid += 1

        power = sample.power or 0
        heart = sample.heart_rate or 0
        powers.append(power)
        cadences.append(sample.cadence or 0)
        hearts.append(heart)
        if sample.temperature:
            temps.append(sample.temperature)
        if sample.distance is not None:
            distances.append(sample.distance / 100.0)

        altitude = _coordinate_altitude(sample)
        if _has_fix(sample, altitude):
            lons.append(float(sample.longitude))
            lats.append(float(sample.latitude))
            alts.append(altitude)
            coord_elevations.append(meters_to_feet(decode_altitude(altitude)))
            coord_powers.append(power)
            coord_hearts.append(heart)
            coord_distances.append(
                sample.distance / 100.0 if sample.distance is not None else 0.0
            )
            coord_elapsed.append((sample.timestamp - start).total_seconds())

        decoded = _gain_altitude(sample, order)
        if decoded is None:
            continue
        if previous_altitude is not None and decoded > previous_altitude:
            elevation_gain += decoded - previous_altitude
        previous_altitude = decoded

    if valid == 0:
        raise NoValidSamples("no valid records found after filtering")

    last = samples[-1]
    logger.debug(
        "Aggregated %d records: %d valid, %d with GPS, %.1f m gain, %.0f s stopped",
        len(samples), valid, len(lons), elevation_gain, stopped,
    )

    return AggregateResult(
        cleaned=CleanedChannels(
            power=tuple(powers),
            cadence=tuple(cadences),
            temperature=tuple(temps),
            heart_rate=tuple(hearts),
            distance=tuple(distances),
        ),
        aligned=CoordinateAlignedChannels(
            longitude=tuple(lons),
            latitude=tuple(lats),
            altitude_raw=tuple(alts),
            elevation_ft=tuple(coord_elevations),
            power=tuple(coord_powers),
            heart_rate=tuple(coord_hearts),
            distance=tuple(coord_distances),
            elapsed_seconds=tuple(coord_elapsed),
        ),
        elevation_gain_m=elevation_gain,
        stopped_seconds=int(stopped),
        elapsed_seconds=int((last.timestamp - start).total_seconds()),
        sample_count=valid,
        average_power=sum(powers) / len(powers),
        total_distance_km=(last.distance / 100.0 / 1000.0) if last.distance is not None else 0.0,
    )
