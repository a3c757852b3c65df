from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Iterable, Iterator, List, Mapping, Tuple, TypeVar

from .errors import UnknownMetricError
from .metrics import MetricKey, ResourceMetric, as_metric


S = TypeVar("S")
R = TypeVar("R")


class MetricCache(Generic[S]):
    """Per-metric state holder with one lock per metric key.

    Calls for different metrics never contend. Calls for the same metric are
    serialised because every estimator step both reads and replaces the state.
    """

    def __init__(self, metrics: Iterable[ResourceMetric], factory: Callable[[], S]) -> None:
        self._factory = factory
        self._states: Dict[ResourceMetric, S] = {}
        self._locks: Dict[ResourceMetric, threading.RLock] = {}
        for metric in metrics:
            self._states[metric] = factory()
            self._locks[metric] = threading.RLock()

    def metrics(self) -> List[ResourceMetric]:
        return list(self._states)

    def resolve(self, metric: MetricKey) -> ResourceMetric:
        key = as_metric(metric)
        if key not in self._states:
            raise UnknownMetricError(key)
        return key

    def resolve_tick(self, tick: Mapping[MetricKey, float]) -> Dict[ResourceMetric, float]:
        """Key a whole tick by metric; it must cover exactly the cached metrics."""
        values: Dict[ResourceMetric, float] = {}
        for metric, value in tick.items():
            values[self.resolve(metric)] = value
        for metric in self._states:
            if metric not in values:
                raise UnknownMetricError(metric, "tick value")
        return values

    @contextmanager
    def locked(self, metric: MetricKey) -> Iterator[ResourceMetric]:
        key = self.resolve(metric)
        with self._locks[key]:
            yield key

    def get(self, metric: MetricKey) -> S:
        with self.locked(metric) as key:
            return self._states[key]

    def apply(self, metric: MetricKey, step: Callable[[S], Tuple[S, R]]) -> R:
        """Run one read-transition-replace step for a metric under its lock."""
        with self.locked(metric) as key:
            new_state, result = step(self._states[key])
            self._states[key] = new_state
            return result

    def reset(self, metric: MetricKey) -> None:
        with self.locked(metric) as key:
            self._states[key] = self._factory()

    def reset_all(self) -> None:
        for metric in self.metrics():
            self.reset(metric)
