from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.evaluation import AnomalyScoringParameters
from .core.metrics import ResourceMetric
from .core.parameters import (
    AWBSParameters,
    DensityAnomalyConfig,
    PEWMASamplingConfig,
    UDASAParameters,
)


class InfrastructureElement(BaseModel):
    """Static description of the monitored node and the file holding its trace."""

    id: str = "ie-1"
    cpu_cores: int = Field(1, ge=1)
    ram_capacity: int = Field(0, ge=0, description="MB")
    disk_capacity: int = Field(0, ge=0, description="MB")
    data: str = Field(..., description="CSV or JSON trace, relative to the scenario file")


class ScenarioConfig(BaseModel):
    name: str
    description: str = ""
    infrastructure: InfrastructureElement
    anomaly: DensityAnomalyConfig = Field(default_factory=DensityAnomalyConfig)
    sampling: PEWMASamplingConfig = Field(default_factory=PEWMASamplingConfig)
    awbs: Optional[AWBSParameters] = None
    udasa: Optional[UDASAParameters] = None
    evaluation: Dict[ResourceMetric, AnomalyScoringParameters] = Field(default_factory=dict)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ADAMON_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    LOG_LEVEL: str = "INFO"
    SCENARIO_DIR: Optional[Path] = None


class AppConfig(BaseModel):
    env: EnvSettings
    scenario: ScenarioConfig
    base_dir: Path = Path(".")

    def data_path(self) -> Path:
        path = Path(self.scenario.infrastructure.data)
        if path.is_absolute():
            return path
        root = self.env.SCENARIO_DIR or self.base_dir
        return root / path

    @staticmethod
    def load(config_path: Path) -> "AppConfig":
        env = EnvSettings()
        config_path = Path(config_path)
        if not config_path.exists() and env.SCENARIO_DIR is not None:
            config_path = env.SCENARIO_DIR / config_path
        if not config_path.exists():
            raise FileNotFoundError(f"Scenario file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        try:
            scenario = ScenarioConfig(**raw)
        except ValidationError as ve:
            raise ValueError(f"Invalid scenario {config_path}: {ve}")
        return AppConfig(env=env, scenario=scenario, base_dir=config_path.parent)


def load_config(config_path: Path) -> AppConfig:
    """Load a scenario from YAML merged with environment settings."""

    return AppConfig.load(config_path)
