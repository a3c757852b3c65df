from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from .buffers import WindowBuffer
from .cache import MetricCache
from .metrics import MetricKey, ResourceMetric
from .parameters import AWBSParameters


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowReport:
    window_size: int
    average: float


@dataclass
class _WindowState:
    buffer: WindowBuffer[float]
    last_average: Optional[float] = None


def relative_change(prev_average: float, average: float) -> float:
    """Relative change of consecutive window averages, in percent."""
    if prev_average == 0:
        return 0.0
    return abs((prev_average - average) / prev_average) * 100


class AWBSSampler:
    """Adaptive Window Based Sampling baseline.

    Each metric collects raw values into a window; at completion the window
    average is compared with the previous one and the window grows by one when
    the change stays within ``threshold`` percent, otherwise it shrinks by one.
    """

    def __init__(self, params: AWBSParameters, metrics: Iterable[ResourceMetric] = tuple(ResourceMetric)) -> None:
        self.params = params
        self._cache: MetricCache[_WindowState] = MetricCache(
            metrics, lambda: _WindowState(buffer=WindowBuffer(params.initial_window_size))
        )

    @property
    def metrics(self) -> List[ResourceMetric]:
        return self._cache.metrics()

    def window_size(self, metric: MetricKey) -> int:
        return self._cache.get(metric).buffer.target()

    def observe(self, metric: MetricKey, value: float) -> Optional[WindowReport]:
        value = float(value)

        def step(state: _WindowState) -> Tuple[_WindowState, Optional[WindowReport]]:
            window = state.buffer.add(value)
            if window is None:
                return state, None
            size = state.buffer.target()
            average = float(np.mean(window))
            if state.last_average is not None:
                if relative_change(state.last_average, average) <= self.params.threshold:
                    size = min(size + 1, self.params.max_window_size)
                else:
                    size = max(size - 1, 1)
                state.buffer.set_target(size)
            state.last_average = average
            return state, WindowReport(window_size=size, average=average)

        return self._cache.apply(metric, step)

    def step(self, tick: Mapping[MetricKey, float]) -> Optional[Dict[ResourceMetric, float]]:
        """Feed one tick; return the window averages only when every metric completed a window."""
        values = self._cache.resolve_tick(tick)
        reports = {m: self.observe(m, values[m]) for m in self.metrics}
        if any(r is None for r in reports.values()):
            return None

        # keep the metrics phase-aligned on the smallest window
        common = min(r.window_size for r in reports.values())
        for metric in self.metrics:
            with self._cache.locked(metric) as key:
                self._cache.get(key).buffer.set_target(common)
        logger.debug("Window completed", extra={"window_size": common})
        return {m: r.average for m, r in reports.items()}

    def reset(self, metric: Optional[MetricKey] = None) -> None:
        if metric is None:
            self._cache.reset_all()
        else:
            self._cache.reset(metric)
