from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np


SQRT_2PI = math.sqrt(2 * math.pi)


def incremental_mean(n: int, prev_mean: Optional[float], x: float) -> float:
    """Running mean after the n-th observation."""
    if prev_mean is None:
        return x
    return prev_mean + (x - prev_mean) / n


def incremental_second_moment(n: int, prev_moment: Optional[float], x: float) -> float:
    """Running mean of squares ("scalar product") after the n-th observation."""
    squared = x * x
    if prev_moment is None:
        return squared
    return prev_moment + (squared - prev_moment) / n


def density(mean: float, second_moment: float, x: float) -> float:
    """Inverse-distance score of x against the regime statistics.

    The denominator is 1 + (x - mean)^2 + variance, so the score lies in (0, 1]
    and equals 1 only when x sits on the mean of a zero-variance regime.
    """
    deviation = x - mean
    return 1.0 / (1.0 + deviation * deviation + second_moment - mean * mean)


def mean_density(prev_avg: Optional[float], occurrence_count: int, new_density: float) -> float:
    """Smoothed density baseline.

    The absolute change between the new density and the baseline is used both
    as a step size and as a confidence weight: a stable density moves the
    baseline by an incremental-mean step, a jump snaps it towards the new value.
    """
    if prev_avg is None:
        return 1.0
    diff = abs(new_density - prev_avg)
    stepped = prev_avg + (new_density - prev_avg) / occurrence_count
    return stepped * (1 - diff) + new_density * diff


def pewma_probability(distance: float, prev_distance: float, std: float) -> float:
    """Gaussian-kernel likelihood of the observed distance under the prior estimate."""
    if std == 0:
        return 1.0 if distance == prev_distance else 0.0
    z = (distance - prev_distance) / std
    return math.exp(-z * z / 2) / SQRT_2PI


def distance_std(distance: float) -> float:
    """Per-sample standard deviation proxy for a single distance measurement."""
    return distance / (2 * math.sqrt(2))


def median_absolute_deviation(values: Sequence[float]) -> float:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    median = float(np.median(arr))
    return float(np.median(np.abs(arr - median)))
