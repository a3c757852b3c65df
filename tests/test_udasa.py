from __future__ import annotations

import pytest

from adamon.core.errors import UnknownMetricError
from adamon.core.metrics import ResourceMetric
from adamon.core.parameters import UDASAParameters
from adamon.core.udasa import UDASASampler, udasa_period


CPU = ResourceMetric.CPU_USAGE
RAM = ResourceMetric.RAM_USAGE
DISK = ResourceMetric.DISK_USAGE

PARAMS = UDASAParameters(window_size=3, saving_size=2, base_sampling_period=2)


def test_calm_window_stretches_period() -> None:
    assert udasa_period([5.0, 5.0, 5.0], PARAMS) == 3


def test_volatile_window_returns_base_period() -> None:
    assert udasa_period([0.0, 100.0, 200.0], PARAMS) == 2


def test_saving_size_one_keeps_base_period() -> None:
    params = UDASAParameters(window_size=3, saving_size=1, base_sampling_period=4)
    assert udasa_period([0.0, 100.0, 200.0], params) == 4
    assert udasa_period([1.0, 1.0, 1.0], params) == 4


def test_observe_holds_period_between_windows() -> None:
    sampler = UDASASampler(PARAMS)
    assert sampler.observe(CPU, 5.0) == 2
    assert sampler.observe(CPU, 5.0) == 2
    assert sampler.observe(CPU, 5.0) == 3
    assert sampler.observe(CPU, 90.0) == 3
    assert sampler.period(CPU) == 3


def test_cross_metric_minimum() -> None:
    sampler = UDASASampler(PARAMS)
    ticks = [
        {CPU: 5.0, RAM: 0.0, DISK: 7.0},
        {CPU: 5.0, RAM: 100.0, DISK: 7.0},
        {CPU: 5.0, RAM: 200.0, DISK: 7.0},
    ]
    periods = [sampler.estimate_sampling_period(t) for t in ticks]
    assert periods == [2, 2, 2]
    assert sampler.period(CPU) == 3
    assert sampler.period(RAM) == 2


def test_unknown_metric_fails_fast() -> None:
    sampler = UDASASampler(PARAMS, metrics=[CPU])
    with pytest.raises(UnknownMetricError):
        sampler.estimate_sampling_period({CPU: 1.0, RAM: 1.0})
    assert sampler.observe(CPU, 1.0) == 2


def test_tick_missing_configured_metric_fails_fast() -> None:
    sampler = UDASASampler(PARAMS, metrics=[CPU, RAM])
    with pytest.raises(UnknownMetricError):
        sampler.estimate_sampling_period({CPU: 1.0})
    with pytest.raises(UnknownMetricError):
        sampler.estimate_sampling_period({})
    # nothing was buffered by the rejected ticks
    assert [sampler.observe(CPU, 5.0) for _ in range(3)] == [2, 2, 3]


def test_replay_is_deterministic() -> None:
    ticks = [{CPU: float(i % 7), RAM: 100.0 + (i // 10) * 50, DISK: 3.0} for i in range(60)]
    first, second = UDASASampler(PARAMS), UDASASampler(PARAMS)
    assert [first.estimate_sampling_period(t) for t in ticks] == [second.estimate_sampling_period(t) for t in ticks]
    assert [first.period(m) for m in (CPU, RAM, DISK)] == [second.period(m) for m in (CPU, RAM, DISK)]
