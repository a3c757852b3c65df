from __future__ import annotations

from enum import Enum
from typing import Union

from .errors import UnknownMetricError


class MetricClass(str, Enum):
    """Groups of metrics sharing one set of sampling parameters."""

    RESOURCE = "RESOURCE"


class ResourceMetric(str, Enum):
    CPU_USAGE = "CPU_USAGE"
    RAM_USAGE = "RAM_USAGE"
    DISK_USAGE = "DISK_USAGE"

    @property
    def metric_class(self) -> MetricClass:
        return MetricClass.RESOURCE


MetricKey = Union[ResourceMetric, str]


def as_metric(metric: MetricKey) -> ResourceMetric:
    """Coerce a metric name to the closed vocabulary, failing fast on unknown names."""
    if isinstance(metric, ResourceMetric):
        return metric
    try:
        return ResourceMetric(metric)
    except ValueError:
        raise UnknownMetricError(metric, "metric vocabulary") from None


def anomaly_label(metric: ResourceMetric, increase: bool) -> str:
    return f"{metric.value}_{'INCREASE' if increase else 'DECREASE'}"
