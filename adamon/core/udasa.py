from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from .buffers import WindowBuffer
from .cache import MetricCache
from .metrics import MetricKey, ResourceMetric
from .parameters import UDASAParameters
from .statistics import median_absolute_deviation


logger = logging.getLogger(__name__)


@dataclass
class _PeriodState:
    buffer: WindowBuffer[float]
    period: int


def udasa_period(window: Sequence[float], params: UDASAParameters) -> int:
    """Sampling period for a completed window.

    The MAD of the full window is compared with the average MAD of its
    prefixes; a window more volatile than its own history pulls the period
    towards the base period, a calm one stretches it towards
    ``saving_size * base_sampling_period``.
    """
    size = len(window)
    mean_mad = sum(median_absolute_deviation(window[:k]) for k in range(1, size + 1)) / size
    current_mad = median_absolute_deviation(window)
    saving = params.saving_size
    saving_ratio = (saving + 1) / 2
    change_deg = current_mad - saving_ratio * mean_mad
    scale = saving + (1 - saving) / (1 + math.exp(-saving * change_deg))
    # half-up rounding
    return int(math.floor(scale * params.base_sampling_period + 0.5))


class UDASASampler:
    """User-Driven Adaptive Sampling baseline with a fixed window and a mutable period."""

    def __init__(self, params: UDASAParameters, metrics: Iterable[ResourceMetric] = tuple(ResourceMetric)) -> None:
        self.params = params
        self._cache: MetricCache[_PeriodState] = MetricCache(
            metrics,
            lambda: _PeriodState(buffer=WindowBuffer(params.window_size), period=params.base_sampling_period),
        )

    @property
    def metrics(self) -> List[ResourceMetric]:
        return self._cache.metrics()

    def observe(self, metric: MetricKey, value: float) -> int:
        value = float(value)

        def step(state: _PeriodState) -> Tuple[_PeriodState, int]:
            window = state.buffer.add(value)
            if window is not None:
                state.period = udasa_period(window, self.params)
                logger.debug("Estimated sampling period", extra={"period": state.period})
            return state, state.period

        return self._cache.apply(metric, step)

    def estimate_sampling_period(self, tick: Mapping[MetricKey, float]) -> int:
        """Minimum period across the metrics of one tick."""
        values = self._cache.resolve_tick(tick)
        periods = [self.observe(m, v) for m, v in values.items()]
        return min(periods)

    def period(self, metric: MetricKey) -> int:
        return self._cache.get(metric).period

    def reset(self, metric: Optional[MetricKey] = None) -> None:
        if metric is None:
            self._cache.reset_all()
        else:
            self._cache.reset(metric)
