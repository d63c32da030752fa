"""
Merge & grade: re-align the coordinate-aligned channels onto the points the
simplifier retained, and attach a local grade to each.

Pure re-indexing plus a finite difference; no smoothing.
"""
import logging
from dataclasses import dataclass
from typing import List, Sequence

from ridetrace.analysis.aggregator import CoordinateAlignedChannels

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergedPoint:
    """One sample of the simplified output series."""
    power: int          # watts
    distance: float     # cumulative meters
    time: float         # seconds since the first raw record
    elevation: float    # feet
    heart_rate: int     # bpm
    grade: float        # rise / run (feet per meter, as recorded)


_EMPTY_SLOT = dict(power=0, distance=0.0, time=0.0, elevation=0.0, heart_rate=0)


def compute_grade(elevation_prev: float, elevation: float,
                  distance_prev: float, distance: float) -> float:
    """Rise over run between two consecutive points; 0.0 when the run is zero."""
    run = distance - distance_prev
    if run == 0:
        return 0.0
    return (elevation - elevation_prev) / run


def build_merged_series(
    indices: Sequence[int],
    channels: CoordinateAlignedChannels,
) -> List[MergedPoint]:
    """
    Build one MergedPoint per retained index.

    An index outside the channel arrays yields a zero-valued slot instead
    of raising, so the output always has len(indices) entries.
    """
    slots = []
    for idx in indices:
        if 0 <= idx < len(channels):
            slots.append(dict(
                power=channels.power[idx],
                distance=channels.distance[idx],
                time=channels.elapsed_seconds[idx],
                elevation=channels.elevation_ft[idx],
                heart_rate=channels.heart_rate[idx],
            ))
        else:
            logger.warning("Retained index %d outside %d aligned samples", idx, len(channels))
            slots.append(dict(_EMPTY_SLOT))

    merged: List[MergedPoint] = []
    for k, slot in enumerate(slots):
        grade = 0.0
        if k > 0:
            prev = slots[k - 1]
            grade = compute_grade(
                prev["elevation"], slot["elevation"], prev["distance"], slot["distance"]
            )
        merged.append(MergedPoint(grade=grade, **slot))
    return merged
