"""
Normalized power.

Two-stage procedure:
  1. 30-sample trailing moving average (shorter window at the start).
  2. Fourth-power mean of the smoothed series, then its fourth root.

Operates on the zero-filled power array: gaps are real coasting or
stationary time and must pull the result down.
"""
from typing import Sequence

import numpy as np

NP_WINDOW_SECONDS = 30


def trailing_moving_average(values: Sequence[float], window: int = NP_WINDOW_SECONDS) -> np.ndarray:
    """Mean of the last `window` samples at each index, using fewer at the start."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return arr
    prefix = np.concatenate(([0.0], np.cumsum(arr)))
    idx = np.arange(arr.size)
    start = np.maximum(idx - window + 1, 0)
    return (prefix[idx + 1] - prefix[start]) / (idx + 1 - start)


def normalized_power(powers: Sequence[int], window: int = NP_WINDOW_SECONDS) -> float:
    """
    Normalized power of a zero-filled, one-sample-per-second power series.

    Returns 0.0 for an empty series.
    """
    if len(powers) == 0:
        return 0.0
    rolling = trailing_moving_average(powers, window)
    return float(np.mean(rolling ** 4) ** 0.25)


def average_power(powers: Sequence[int]) -> float:
    if len(powers) == 0:
        return 0.0
    return float(np.mean(np.asarray(powers, dtype=float)))
