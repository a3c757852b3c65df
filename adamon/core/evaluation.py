from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence

from pydantic import BaseModel, Field, model_validator

from .metrics import ResourceMetric
from .outcomes import SampleOutcome


class AnomalyWindow(BaseModel):
    """Tick range (1-based, inclusive) within which an anomaly should be flagged."""

    start_idx: int = Field(..., ge=0)
    end_idx: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> "AnomalyWindow":
        if self.end_idx < self.start_idx:
            raise ValueError("end_idx must be >= start_idx")
        return self

    @property
    def size(self) -> int:
        return max(1, self.end_idx - self.start_idx)

    def contains(self, idx: int) -> bool:
        return self.start_idx <= idx <= self.end_idx

    def is_after(self, idx: int) -> bool:
        return idx > self.end_idx


class AnomalyScoringParameters(BaseModel):
    anomaly_windows: List[AnomalyWindow] = Field(default_factory=list)
    true_positive_weight: float = 1.0
    false_positive_weight: float = 0.11
    false_negative_weight: float = 1.0
    baseline: float = 0.0


@dataclass
class SamplingQuality:
    mape: float
    ratio: float

    @property
    def jpm(self) -> float:
        return joint_performance(self.mape, self.ratio)


def scaled_sigmoid(x: float) -> float:
    """Maps relative position to (-1, 1): early detections score close to 1."""
    return 2 / (1 + math.exp(5 * x)) - 1


def mape(true_values: Sequence[float], monitored_values: Sequence[float]) -> float:
    """Mean absolute percentage error of the monitored series against the full one."""
    if len(true_values) != len(monitored_values):
        raise ValueError("series must have equal length")
    if not true_values:
        return 0.0
    total = 0.0
    for t, m in zip(true_values, monitored_values):
        total += abs(m) if t == 0 else abs((t - m) / t) * 100
    return total / len(true_values)


def sample_ratio(measured_count: int, total: int) -> float:
    return (measured_count / total) * 100 if total else 0.0


def joint_performance(mape_value: float, ratio: float) -> float:
    """JPM: rewards both low error and few samples."""
    return 100 - (mape_value + ratio) / 2


def sampling_quality(
    true_ticks: Sequence[Mapping[ResourceMetric, float]],
    outcomes: Sequence[SampleOutcome],
    measured_count: int,
    metric: ResourceMetric,
) -> SamplingQuality:
    true_series = [t[metric] for t in true_ticks]
    monitored_series = [o.values[metric] for o in outcomes]
    return SamplingQuality(
        mape=mape(true_series, monitored_series),
        ratio=sample_ratio(measured_count, len(true_ticks)),
    )


def detected_indexes(anomalies: Mapping[int, Iterable[str]], metric: ResourceMetric) -> List[int]:
    prefix = f"{metric.value}_"
    return sorted(idx for idx, labels in anomalies.items() if any(label.startswith(prefix) for label in labels))


def normalized_score(raw: float, window_count: int, params: AnomalyScoringParameters) -> float:
    perfect = window_count * scaled_sigmoid(-1) * params.true_positive_weight
    if perfect == params.baseline:
        return 0.0
    return 100 * (raw - params.baseline) / (perfect - params.baseline)


def anomaly_score(indexes: Sequence[int], params: AnomalyScoringParameters) -> float:
    """NAB-style windowed score of detections, normalised to percent of a perfect detector.

    Only the first detection inside a window is rewarded; detections outside
    windows are penalised, increasingly so the later they fall after a window.
    """
    windows = params.anomaly_windows
    if not windows:
        return 0.0

    detected: List[int] = []
    total = 0.0
    w = 0
    for idx in sorted(indexes):
        while w + 1 < len(windows) and windows[w].is_after(idx):
            if idx - windows[w].end_idx <= windows[w + 1].start_idx - idx:
                break
            w += 1
        window = windows[w]
        if window.is_after(idx):
            total += scaled_sigmoid((idx - window.end_idx) / window.size) * params.false_positive_weight
        elif window.contains(idx):
            if w in detected:
                continue
            detected.append(w)
            position = (idx - window.start_idx) / window.size - 1
            total += scaled_sigmoid(position) * params.true_positive_weight
        else:
            total -= params.false_positive_weight

    missed = (len(windows) - len(detected)) * params.false_negative_weight
    return normalized_score(total - missed, len(windows), params)
