"""
Best-average ("critical power") curves.

For each interval length L in a catalog, find the contiguous window of L
samples with the highest mean. Used for power, cadence, temperature and
heart rate alike.

Window sums come from an integer prefix-sum array, so equal windows
compare exactly and np.argmax picks the earliest one.
"""
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np


@dataclass(frozen=True)
class ChannelExtremum:
    """Best window of one length within one channel."""
    interval: int   # window length in samples (≈ seconds)
    value: float    # mean over the best window
    offset: int     # index of the window's first sample


# (upper bound inclusive, step); finer steps for short durations
_CATALOG_BANDS = [
    (10, 1),
    (60, 5),
    (600, 30),
    (1200, 60),
    (3600, 300),
]
_LONG_STEP = 600


def generate_intervals(total_samples: int) -> List[int]:
    """
    Interval lengths to evaluate for a recording of `total_samples`.

    1–10 s every second, 15–60 s every 5 s, 90 s–10 min every 30 s,
    11–20 min every minute, 25–60 min every 5 min, then every 10 min.
    Nothing exceeds `total_samples`.
    """
    intervals: List[int] = []
    value = 0
    for upper, step in _CATALOG_BANDS:
        value += step
        while value <= upper:
            if value > total_samples:
                return intervals
            intervals.append(value)
            value += step
        value -= step
    value += _LONG_STEP
    while value <= total_samples:
        intervals.append(value)
        value += _LONG_STEP
    return intervals


def best_averages(intervals: Sequence[int], values: Sequence[int]) -> List[ChannelExtremum]:
    """
    Best mean over every interval length in `intervals`.

    Lengths longer than `values` (or non-positive) are skipped; an empty or
    too-short channel yields an empty list. Ties go to the lowest offset.
    """
    arr = np.asarray(values, dtype=np.int64)
    n = arr.size
    if n == 0:
        return []

    prefix = np.concatenate((np.zeros(1, dtype=np.int64), np.cumsum(arr)))
    results: List[ChannelExtremum] = []
    for length in intervals:
        if length <= 0 or length > n:
            continue
        sums = prefix[length:] - prefix[:-length]
        offset = int(np.argmax(sums))
        results.append(ChannelExtremum(
            interval=int(length),
            value=float(sums[offset]) / length,
            offset=offset,
        ))
    return results
