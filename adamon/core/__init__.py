"""Stateful incremental estimators.

Density-based detection flags a metric as anomalous when the density of the
latest value, relative to the running mean and second moment of its regime,
collapses below a smoothed baseline for several consecutive ticks.
"""

from .anomaly import DensityAnomalyDetector, DetectorState, MetricAnomalyState
from .awbs import AWBSSampler, WindowReport
from .errors import UnknownMetricError
from .metrics import MetricClass, ResourceMetric
from .outcomes import Measured, Repeated, SampleOutcome
from .pewma import PEWMASampler, PEWMASamplerState
from .udasa import UDASASampler

__all__ = [
    "AWBSSampler",
    "DensityAnomalyDetector",
    "DetectorState",
    "Measured",
    "MetricAnomalyState",
    "MetricClass",
    "PEWMASampler",
    "PEWMASamplerState",
    "Repeated",
    "ResourceMetric",
    "SampleOutcome",
    "UDASASampler",
    "UnknownMetricError",
    "WindowReport",
]
