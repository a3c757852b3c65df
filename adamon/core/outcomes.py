from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Union

from .metrics import ResourceMetric


@dataclass(frozen=True)
class Measured:
    """A genuine new measurement taken on this tick."""

    values: Mapping[ResourceMetric, float]


@dataclass(frozen=True)
class Repeated:
    """No measurement on this tick; the last known values are carried forward."""

    values: Mapping[ResourceMetric, float]


SampleOutcome = Union[Measured, Repeated]
