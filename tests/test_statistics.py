from __future__ import annotations

import math

import pytest

from adamon.core.statistics import (
    density,
    distance_std,
    incremental_mean,
    incremental_second_moment,
    mean_density,
    median_absolute_deviation,
    pewma_probability,
)


def test_incremental_mean() -> None:
    assert incremental_mean(1, None, 5.0) == 5.0
    assert incremental_mean(2, 5.0, 7.0) == 6.0
    assert incremental_mean(3, 6.0, 9.0) == 7.0


def test_incremental_second_moment() -> None:
    assert incremental_second_moment(1, None, 3.0) == 9.0
    # mean of squares of [3, 1]
    assert incremental_second_moment(2, 9.0, 1.0) == 5.0


def test_density_bounds() -> None:
    assert density(10.0, 100.0, 10.0) == 1.0
    assert density(0.0, 0.0, 2.0) == pytest.approx(0.2)
    d = density(11.9, 214.3, 50.0)
    assert 0.0 < d < 1.0


def test_mean_density_cold_start_and_stable() -> None:
    assert mean_density(None, 1, 0.3) == 1.0
    assert mean_density(1.0, 5, 1.0) == 1.0
    assert mean_density(0.5, 2, 0.5) == 0.5


def test_mean_density_snaps_on_jump() -> None:
    # full jump: the baseline follows the new density entirely
    assert mean_density(1.0, 1, 0.0) == 0.0
    small = mean_density(0.50, 10, 0.52)
    assert 0.50 < small < 0.52


def test_pewma_probability() -> None:
    assert pewma_probability(0.0, 0.0, 0.0) == 1.0
    assert pewma_probability(2.0, 2.0, 0.0) == 1.0
    assert pewma_probability(1.0, 0.0, 0.0) == 0.0
    assert pewma_probability(1.0, 1.0, 1.0) == pytest.approx(1 / math.sqrt(2 * math.pi))
    assert pewma_probability(3.0, 1.0, 1.0) == pytest.approx(math.exp(-2) / math.sqrt(2 * math.pi))


def test_distance_std() -> None:
    assert distance_std(0.0) == 0.0
    assert distance_std(2 * math.sqrt(2)) == pytest.approx(1.0)


def test_median_absolute_deviation() -> None:
    assert median_absolute_deviation([1.0, 2.0, 3.0, 4.0, 100.0]) == 1.0
    assert median_absolute_deviation([5.0]) == 0.0
    assert median_absolute_deviation([0.0, 100.0]) == 50.0
    assert median_absolute_deviation([]) == 0.0
