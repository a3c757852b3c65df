from __future__ import annotations

from adamon.core.anomaly import DensityAnomalyDetector
from adamon.core.awbs import AWBSSampler
from adamon.core.metrics import ResourceMetric
from adamon.core.outcomes import Measured, Repeated
from adamon.core.parameters import (
    AWBSParameters,
    DensityAnomalyConfig,
    DensityAnomalyParameters,
    PEWMASamplingConfig,
)
from adamon.core.pewma import PEWMASampler
from adamon.data.replay import replay_detection, replay_periodic, replay_windowed


CPU = ResourceMetric.CPU_USAGE
RAM = ResourceMetric.RAM_USAGE
DISK = ResourceMetric.DISK_USAGE


def make_ticks(n: int) -> list:
    return [{CPU: float(i), RAM: 10.0 * i, DISK: 100.0} for i in range(n)]


def test_replay_periodic_measures_on_period() -> None:
    ticks = make_ticks(7)
    run = replay_periodic(lambda tick: 3, ticks)
    assert run.measured_count == 3
    kinds = [type(o) for o in run.outcomes]
    assert kinds == [Measured, Repeated, Repeated, Measured, Repeated, Repeated, Measured]
    assert run.values(CPU) == [0.0, 0.0, 0.0, 3.0, 3.0, 3.0, 6.0]


def test_replay_periodic_zero_period_still_advances() -> None:
    run = replay_periodic(lambda tick: 0, make_ticks(4))
    assert run.measured_count == 4


def test_replay_periodic_with_pewma() -> None:
    ticks = [{CPU: 5.0, RAM: 5.0, DISK: 5.0}] * 20
    sampler = PEWMASampler(PEWMASamplingConfig())
    run = replay_periodic(sampler.estimate_sampling_period, ticks)
    assert len(run.outcomes) == 20
    assert isinstance(run.outcomes[0], Measured)
    assert run.measured_count < 20


def test_replay_windowed_carries_first_tick() -> None:
    ticks = make_ticks(4)
    sampler = AWBSSampler(AWBSParameters(threshold=5.0, max_window_size=4, initial_window_size=2))
    run = replay_windowed(sampler, ticks)
    assert isinstance(run.outcomes[0], Repeated)
    assert run.outcomes[0].values == ticks[0]
    assert isinstance(run.outcomes[1], Measured)
    assert run.outcomes[1].values[CPU] == 0.5
    assert run.measured_count == 2
    assert len(run.outcomes) == len(ticks)


def test_replay_detection_indexes_from_one() -> None:
    config = DensityAnomalyConfig(models=[
        DensityAnomalyParameters(name=CPU, tolerance_threshold_anomaly=0.9, window_anomaly=3),
    ])
    ticks = [{CPU: 10.0}] * 20 + [{CPU: 50.0}] * 5
    anomalies = replay_detection(DensityAnomalyDetector(config), ticks)
    assert anomalies == {23: ["CPU_USAGE_INCREASE"]}


def test_replay_detection_ignores_unmonitored_columns() -> None:
    config = DensityAnomalyConfig(models=[
        DensityAnomalyParameters(name=CPU, tolerance_threshold_anomaly=0.9, window_anomaly=3),
    ])
    ticks = [{CPU: 10.0, RAM: 2048.0, DISK: 500.0}] * 20 + [{CPU: 50.0, RAM: 4096.0, DISK: 500.0}] * 5
    anomalies = replay_detection(DensityAnomalyDetector(config), ticks)
    assert anomalies == {23: ["CPU_USAGE_INCREASE"]}
