"""
Power zone classification and time-in-zone.

7-zone model based on % of threshold power (FTP):

  Zone 0: 0%        — not pedaling
  Zone 1: 1-56%     — active recovery
  Zone 2: 56-76%    — endurance
  Zone 3: 76-91%    — tempo
  Zone 4: 91-106%   — threshold
  Zone 5: 106-121%  — VO2max
  Zone 6: 121%+     — anaerobic capacity (open-ended)

Boundaries are truncated to whole watts. A power value belongs to the
highest zone whose lower bound it reaches.
"""
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ridetrace.analysis.merge import MergedPoint

# (zone, title, low %, high %)
_ZONE_PERCENTAGES = [
    (0, "Not pedaling", 0, 0),
    (1, "Active Recovery", 1, 56),
    (2, "Endurance", 56, 76),
    (3, "Tempo", 76, 91),
    (4, "Threshold", 91, 106),
    (5, "VO2max", 106, 121),
    (6, "Anaerobic Capacity", 121, None),
]


@dataclass(frozen=True)
class PowerZone:
    zone: int
    title: str
    power_low: Optional[int]
    power_high: Optional[int]  # None for the open-ended top zone


def _scale(percent: Optional[int], ftp: int) -> Optional[int]:
    if percent is None:
        return None
    return int((percent / 100.0) * ftp)


def calc_power_zones(ftp: int) -> List[PowerZone]:
    """Absolute zone boundaries (watts) for a threshold power."""
    return [
        PowerZone(zone=z, title=title, power_low=_scale(low, ftp), power_high=_scale(high, ftp))
        for z, title, low, high in _ZONE_PERCENTAGES
    ]


def classify_power_zone(power: int, zones: Sequence[PowerZone]) -> Optional[int]:
    """Index into `zones` of the highest zone whose lower bound is <= power."""
    for i in range(len(zones) - 1, -1, -1):
        low = zones[i].power_low
        if low is not None and power >= low:
            return i
    return None


def _round_half_up(seconds: float) -> int:
    return int(math.floor(seconds + 0.5))


def zone_time_buckets(
    zones: Sequence[PowerZone],
    merged: Sequence[MergedPoint],
    elapsed_seconds: float,
) -> List[int]:
    """
    Seconds spent in each zone, walking the simplified series.

    Each point holds its zone until the next point (the last one until
    `elapsed_seconds`). Negative spans count as zero; each span is rounded
    to the nearest second.
    """
    buckets = [0] * len(zones)
    for i, point in enumerate(merged):
        zone_idx = classify_power_zone(point.power, zones)
        if zone_idx is None:
            continue
        if i < len(merged) - 1:
            span = merged[i + 1].time - point.time
        else:
            span = elapsed_seconds - point.time
        buckets[zone_idx] += _round_half_up(max(span, 0.0))
    return buckets


def zone_sample_counts(zones: Sequence[PowerZone], powers: Sequence[int]) -> List[int]:
    """Number of raw power samples falling in each zone (zero power included)."""
    counts = [0] * len(zones)
    for p in powers:
        zone_idx = classify_power_zone(p, zones)
        if zone_idx is not None:
            counts[zone_idx] += 1
    return counts
