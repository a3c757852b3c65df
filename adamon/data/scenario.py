from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Union

import pandas as pd

from ..config import InfrastructureElement
from ..core.metrics import ResourceMetric


Tick = Dict[ResourceMetric, float]

REQUIRED_COLUMNS = ("cpu_usage", "ram_usage", "disk_usage")


def _read_table(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == ".json":
        return pd.read_json(path)
    return pd.read_csv(path)


def frame_to_ticks(frame: pd.DataFrame, infrastructure: InfrastructureElement) -> List[Tick]:
    """Map a utilisation table to ticks.

    ``cpu_usage`` is a percentage of the node and is converted to used cores;
    RAM and disk usage are taken as-is.
    """
    columns = {c.lower(): c for c in frame.columns}
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise ValueError(f"Scenario data is missing columns: {', '.join(missing)}")

    cpu = frame[columns["cpu_usage"]].astype(float) * infrastructure.cpu_cores / 100
    ram = frame[columns["ram_usage"]].astype(float)
    disk = frame[columns["disk_usage"]].astype(float)
    return [
        {
            ResourceMetric.CPU_USAGE: float(c),
            ResourceMetric.RAM_USAGE: float(r),
            ResourceMetric.DISK_USAGE: float(d),
        }
        for c, r, d in zip(cpu, ram, disk)
    ]


def read_scenario_data(path: Union[str, Path], infrastructure: InfrastructureElement) -> List[Tick]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario data not found: {path}")
    return frame_to_ticks(_read_table(path), infrastructure)
