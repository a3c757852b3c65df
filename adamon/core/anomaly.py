from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from .cache import MetricCache
from .metrics import MetricKey, ResourceMetric, anomaly_label
from .parameters import DensityAnomalyConfig, DensityAnomalyParameters
from .statistics import density, incremental_mean, incremental_second_moment, mean_density


logger = logging.getLogger(__name__)


class DetectorState(str, Enum):
    NORMAL = "NORMAL"
    ANOMALOUS = "ANOMALOUS"


@dataclass(frozen=True)
class MetricAnomalyState:
    """Sufficient statistics of one metric's current regime plus the hysteresis counters."""

    state: DetectorState = DetectorState.NORMAL
    sample_count: int = 0
    state_counter: int = 0
    change_counter: int = 0
    mean: Optional[float] = None
    second_moment: Optional[float] = None
    density: Optional[float] = None
    average_density: Optional[float] = None

    @property
    def is_anomalous(self) -> bool:
        return self.state is DetectorState.ANOMALOUS


Step = Tuple[MetricAnomalyState, Optional[str]]


def update_statistics(state: MetricAnomalyState, value: float) -> Tuple[MetricAnomalyState, float]:
    """Fold one value into the regime statistics.

    Returns the state with refreshed mean, second moment and density, and the
    candidate density baseline for this tick (stored only by the normal branch).
    """
    sample_count = state.sample_count + 1
    state_counter = state.state_counter + 1
    mean = incremental_mean(sample_count, state.mean, value)
    moment = incremental_second_moment(sample_count, state.second_moment, value)
    d = density(mean, moment, value)
    avg = mean_density(state.average_density, state_counter, d)
    updated = replace(
        state,
        sample_count=sample_count,
        state_counter=state_counter,
        mean=mean,
        second_moment=moment,
        density=d,
    )
    return updated, avg


def step_normal(
    state: MetricAnomalyState, params: DensityAnomalyParameters, value: float, average_density: float
) -> Step:
    state = replace(state, average_density=average_density)
    if state.density > average_density * params.tolerance_threshold_anomaly:
        return replace(state, change_counter=0), None

    change_counter = state.change_counter + 1
    if change_counter < params.window_anomaly:
        return replace(state, change_counter=change_counter), None

    label = anomaly_label(params.name, value > state.mean)
    return (
        replace(state, state=DetectorState.ANOMALOUS, state_counter=0, change_counter=change_counter),
        label,
    )


def step_anomalous(state: MetricAnomalyState, params: DensityAnomalyParameters, value: float) -> Step:
    if state.density < state.average_density * params.tolerance_threshold_normal:
        return replace(state, change_counter=0), None

    change_counter = state.change_counter + 1
    if change_counter < params.window_normal:
        return replace(state, change_counter=change_counter), None

    # Recovery starts a fresh regime seeded with the current value.
    recovered = replace(
        state,
        state=DetectorState.NORMAL,
        state_counter=0,
        change_counter=change_counter,
        mean=value,
        second_moment=value * value,
        density=1.0,
        average_density=1.0,
    )
    return recovered, None


def advance(state: MetricAnomalyState, params: DensityAnomalyParameters, value: float) -> Step:
    """Full per-tick transition: statistics update followed by the state machine branch."""
    updated, avg = update_statistics(state, value)
    if updated.is_anomalous:
        return step_anomalous(updated, params, value)
    return step_normal(updated, params, value, avg)


class DensityAnomalyDetector:
    """Unsupervised detector of distribution shifts, one regime model per metric.

    Call ``detect`` once per metric per tick (or ``detect_all`` with the whole
    tick). Labels have the form ``<METRIC>_INCREASE`` / ``<METRIC>_DECREASE``
    and are emitted only on the normal-to-anomalous transition.
    """

    def __init__(self, config: DensityAnomalyConfig) -> None:
        self.config = config
        self._params: Dict[ResourceMetric, DensityAnomalyParameters] = {
            p.name: p for p in config.models
        }
        self._cache: MetricCache[MetricAnomalyState] = MetricCache(self._params, MetricAnomalyState)

    @property
    def metrics(self) -> List[ResourceMetric]:
        return list(self._params)

    def detect(self, metric: MetricKey, value: float) -> List[str]:
        key = self._cache.resolve(metric)
        params = self._params[key]
        value = float(value)

        def step(state: MetricAnomalyState) -> Step:
            new_state, label = advance(state, params, value)
            if label is not None:
                logger.info("Detected anomaly: %s", label, extra={"metric": key.value, "value": value})
            elif state.is_anomalous and not new_state.is_anomalous:
                logger.info("Resetting anomalous state", extra={"metric": key.value, "value": value})
            return new_state, label

        label = self._cache.apply(key, step)
        return [label] if label is not None else []

    def detect_all(self, tick: Mapping[MetricKey, float]) -> List[str]:
        """Run every configured metric for one tick, in configuration order."""
        values = self._cache.resolve_tick(tick)
        labels: List[str] = []
        for metric in self._params:
            labels.extend(self.detect(metric, values[metric]))
        return labels

    def state(self, metric: MetricKey) -> MetricAnomalyState:
        return self._cache.get(metric)

    def reset(self, metric: Optional[MetricKey] = None) -> None:
        if metric is None:
            self._cache.reset_all()
        else:
            self._cache.reset(metric)
