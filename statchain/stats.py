"""
stats.py - Per-batch statistics for statchain blocks.

Every function converts its input into a private numpy array, so callers may
run them concurrently over the same batch without one computation observing
another's ordering.
"""

from typing import List, Sequence, Tuple

import numpy as np

from .exceptions import InvalidInput


def _as_array(values: Sequence[float]) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.size == 0:
        raise InvalidInput("Statistics require at least one sample.")
    return arr


def mean(values: Sequence[float]) -> float:
    """
    Arithmetic average of the samples.
    """
    return float(np.mean(_as_array(values)))


def median(values: Sequence[float]) -> float:
    """
    Middle sample of the sorted batch, or the average of the two central
    samples for an even count. Sorting happens on a private copy.
    """
    ordered = np.sort(_as_array(values))
    n = ordered.size
    if n % 2 == 0:
        return float((ordered[n // 2 - 1] + ordered[n // 2]) / 2.0)
    return float(ordered[n // 2])


def two_sd_range(values: Sequence[float]) -> Tuple[float, float]:
    """
    Band of two population standard deviations around the mean.
    """
    arr = _as_array(values)
    center = float(np.mean(arr))
    std_dev = float(np.std(arr))  # ddof=0: population deviation
    return center - 2 * std_dev, center + 2 * std_dev


def outliers(values: Sequence[float], lower: float, upper: float) -> List[float]:
    """
    Samples strictly outside [lower, upper], in their original order.
    """
    return [float(v) for v in values if v < lower or v > upper]


__all__ = ["mean", "median", "two_sd_range", "outliers"]
