from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator

from .metrics import MetricClass, ResourceMetric


class DensityAnomalyParameters(BaseModel):
    """Hysteresis thresholds for one monitored metric."""

    name: ResourceMetric
    tolerance_threshold_anomaly: float = Field(
        0.5, gt=0, description="Density <= baseline * this is evidence of an anomaly"
    )
    tolerance_threshold_normal: float = Field(
        0.9, gt=0, description="Density >= baseline * this is evidence of recovery"
    )
    window_anomaly: int = Field(3, ge=1, description="Consecutive ticks needed to flag an anomaly")
    window_normal: int = Field(3, ge=1, description="Consecutive ticks needed to return to normal")


class DensityAnomalyConfig(BaseModel):
    models: List[DensityAnomalyParameters] = Field(default_factory=list)

    @field_validator("models")
    @classmethod
    def _unique_names(cls, v: List[DensityAnomalyParameters]) -> List[DensityAnomalyParameters]:
        names = [m.name for m in v]
        if len(names) != len(set(names)):
            raise ValueError("duplicate metric entries in anomaly configuration")
        return v


class PEWMASamplingParameters(BaseModel):
    type: MetricClass = MetricClass.RESOURCE
    min_period: int = Field(1, ge=1, description="Shortest sampling period, in ticks")
    max_period: int = Field(10, ge=1, description="Longest sampling period, in ticks")
    value_weight_factor: float = Field(0.9, ge=0.0, le=1.0)
    probability_weight_factor: float = Field(0.5, ge=0.0, le=1.0)
    imprecision: float = Field(0.1, ge=0.0, lt=1.0)
    multiplicity: int = Field(1, ge=0, description="Period growth step while confident")

    @model_validator(mode="after")
    def _period_bounds(self) -> "PEWMASamplingParameters":
        if self.max_period < self.min_period:
            raise ValueError("max_period must be >= min_period")
        return self


class PEWMASamplingConfig(BaseModel):
    models: List[PEWMASamplingParameters] = Field(
        default_factory=lambda: [PEWMASamplingParameters()]
    )


class AWBSParameters(BaseModel):
    threshold: float = Field(5.0, ge=0.0, description="Max relative change of window averages, in %")
    max_window_size: int = Field(10, ge=1)
    initial_window_size: int = Field(2, ge=1)

    @model_validator(mode="after")
    def _initial_within_max(self) -> "AWBSParameters":
        if self.initial_window_size > self.max_window_size:
            raise ValueError("initial_window_size must be <= max_window_size")
        return self


class UDASAParameters(BaseModel):
    window_size: int = Field(5, ge=1)
    saving_size: float = Field(3, ge=0.0, description="Period multiplier granted to stable windows")
    base_sampling_period: int = Field(1, ge=1, description="Base period, in ticks")
