from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from .cache import MetricCache
from .errors import UnknownMetricError
from .metrics import MetricClass, MetricKey, ResourceMetric, as_metric
from .parameters import PEWMASamplingConfig, PEWMASamplingParameters
from .statistics import distance_std, pewma_probability


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PEWMASamplerState:
    """Either all fields are unset (before the first observation) or all are set."""

    last_value: Optional[float] = None
    last_distance: Optional[float] = None
    last_moving_std: Optional[float] = None
    last_period: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.last_period is None


@dataclass(frozen=True)
class PEWMAEstimate:
    distance: float
    moving_std: float


def next_estimate(
    state: PEWMASamplerState, distance: float, probability: float, params: PEWMASamplingParameters
) -> PEWMAEstimate:
    """Probabilistically weighted update of the moving distance and its spread.

    Unlikely distances (low probability) get a smaller weight on history, so the
    estimate reacts faster to genuine changes in volatility.
    """
    adapt = params.value_weight_factor * (1 - params.probability_weight_factor * probability)
    new_distance = adapt * state.last_distance + (1 - adapt) * distance
    new_variance = adapt * (state.last_moving_std ** 2 + state.last_distance ** 2) + (1 - adapt) * distance ** 2
    # rounding may push the variance a hair below the squared mean
    spread = new_variance - new_distance ** 2
    return PEWMAEstimate(distance=new_distance, moving_std=math.sqrt(spread) if spread > 0 else 0.0)


def estimation_confidence(estimated_std: float, observed_std: float) -> float:
    if observed_std == 0:
        return 1.0
    return 1 - abs(estimated_std - observed_std) / observed_std


def next_period(last_period: int, confidence: float, params: PEWMASamplingParameters) -> int:
    if confidence < 1 - params.imprecision:
        return params.min_period
    grown = last_period + params.multiplicity * (1 + (confidence - params.imprecision) / confidence)
    return int(min(max(math.ceil(grown), params.min_period), params.max_period))


class PEWMASampler:
    """Adaptive sampler built on a PEWMA of inter-sample distance.

    While the observed variability matches the moving estimate within the
    configured imprecision the period grows by ``multiplicity`` steps; any
    surprise drops it back to ``min_period``.
    """

    def __init__(self, config: PEWMASamplingConfig) -> None:
        self.config = config
        self._params: Dict[MetricClass, PEWMASamplingParameters] = {}
        for p in config.models:
            self._params.setdefault(p.type, p)
        self._cache: MetricCache[PEWMASamplerState] = MetricCache(list(ResourceMetric), PEWMASamplerState)

    def params_for(self, metric: ResourceMetric) -> PEWMASamplingParameters:
        try:
            return self._params[metric.metric_class]
        except KeyError:
            raise UnknownMetricError(metric.metric_class.value, "sampling parameters") from None

    def estimate_period(self, metric: MetricKey, value: float) -> int:
        key = as_metric(metric)
        params = self.params_for(key)
        value = float(value)

        def step(state: PEWMASamplerState) -> Tuple[PEWMASamplerState, int]:
            if state.is_empty:
                seeded = PEWMASamplerState(
                    last_value=value, last_distance=0.0, last_moving_std=0.0, last_period=params.min_period
                )
                return seeded, params.min_period

            distance = abs(value - state.last_value)
            observed_std = distance_std(distance)
            probability = pewma_probability(distance, state.last_distance, state.last_moving_std)
            estimate = next_estimate(state, distance, probability, params)
            confidence = estimation_confidence(estimate.moving_std, observed_std)
            period = next_period(state.last_period, confidence, params)
            logger.debug(
                "Estimated sampling period",
                extra={"metric": key.value, "period": period, "confidence": confidence},
            )
            return (
                PEWMASamplerState(
                    last_value=value,
                    last_distance=estimate.distance,
                    last_moving_std=estimate.moving_std,
                    last_period=period,
                ),
                period,
            )

        return self._cache.apply(key, step)

    def estimate_sampling_period(self, tick: Mapping[MetricKey, float]) -> int:
        """Minimum period across the metrics of one tick."""
        values = self._cache.resolve_tick(tick)
        for metric in values:
            self.params_for(metric)
        periods: List[int] = [self.estimate_period(m, v) for m, v in values.items()]
        return min(periods)

    def state(self, metric: MetricKey) -> PEWMASamplerState:
        return self._cache.get(metric)

    def reset(self, metric: Optional[MetricKey] = None) -> None:
        if metric is None:
            self._cache.reset_all()
        else:
            self._cache.reset(metric)
