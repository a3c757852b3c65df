from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Sequence

from ..core.anomaly import DensityAnomalyDetector
from ..core.awbs import AWBSSampler
from ..core.metrics import ResourceMetric
from ..core.outcomes import Measured, Repeated, SampleOutcome


logger = logging.getLogger(__name__)


Tick = Mapping[ResourceMetric, float]
PeriodEstimator = Callable[[Tick], int]


@dataclass
class SamplingRun:
    """Per-tick outcomes of one replay; ``outcomes`` is aligned with the input ticks."""

    outcomes: List[SampleOutcome] = field(default_factory=list)
    measured_count: int = 0

    def values(self, metric: ResourceMetric) -> List[float]:
        return [o.values[metric] for o in self.outcomes]


def replay_detection(detector: DensityAnomalyDetector, ticks: Sequence[Tick]) -> Dict[int, List[str]]:
    """Feed every tick to the detector; map 1-based tick index to its labels (non-empty only).

    Ticks are narrowed to the detector's configured metrics, so a scenario may
    monitor fewer metrics than its trace records.
    """
    metrics = detector.metrics
    anomalies: Dict[int, List[str]] = {}
    for idx, tick in enumerate(ticks, start=1):
        labels = detector.detect_all({m: tick[m] for m in metrics if m in tick})
        if labels:
            anomalies[idx] = labels
    logger.info("Replay finished", extra={"ticks": len(ticks), "anomalous_ticks": len(anomalies)})
    return anomalies


def replay_periodic(estimate: PeriodEstimator, ticks: Sequence[Tick]) -> SamplingRun:
    """Replay a period-based sampler (PEWMA, UDASA).

    The first tick is always measured; afterwards a tick is measured only when
    the elapsed tick count reaches the period returned at the last measurement.
    """
    run = SamplingRun()
    next_idx = 0
    last: Tick = {}
    for i, tick in enumerate(ticks):
        if i != next_idx:
            run.outcomes.append(Repeated(values=last))
            continue
        period = estimate(tick)
        last = dict(tick)
        run.outcomes.append(Measured(values=last))
        run.measured_count += 1
        next_idx = i + max(1, int(period))
    return run


def replay_windowed(sampler: AWBSSampler, ticks: Sequence[Tick]) -> SamplingRun:
    """Replay AWBS: a tick is measured only when every metric completes a window on it.

    Before the first combined window the first raw tick is carried forward.
    """
    run = SamplingRun()
    if not ticks:
        return run
    last: Tick = dict(ticks[0])
    for tick in ticks:
        averages = sampler.step(tick)
        if averages is None:
            run.outcomes.append(Repeated(values=last))
            continue
        last = averages
        run.outcomes.append(Measured(values=last))
        run.measured_count += 1
    return run
