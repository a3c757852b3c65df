from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from adamon.config import AppConfig, load_config
from adamon.core.anomaly import DensityAnomalyDetector
from adamon.core.awbs import AWBSSampler
from adamon.core.evaluation import anomaly_score, detected_indexes, sampling_quality
from adamon.core.metrics import ResourceMetric
from adamon.core.pewma import PEWMASampler
from adamon.core.udasa import UDASASampler
from adamon.data.replay import SamplingRun, replay_detection, replay_periodic, replay_windowed
from adamon.data.scenario import Tick, read_scenario_data
from adamon.utils.logging import setup_logging


app = typer.Typer(add_completion=False)


def _prepare(scenario: Path, log_level: Optional[str]) -> tuple[AppConfig, list[Tick]]:
    cfg = load_config(scenario)
    setup_logging(log_level or cfg.env.LOG_LEVEL)
    ticks = read_scenario_data(cfg.data_path(), cfg.scenario.infrastructure)
    typer.echo(f"Executing scenario {cfg.scenario.name}: {len(ticks)} ticks. {cfg.scenario.description}")
    return cfg, ticks


def _report_sampling(method: str, ticks: list[Tick], run: SamplingRun) -> None:
    typer.echo(f"Results of {method} sampling:")
    for metric in ResourceMetric:
        q = sampling_quality(ticks, run.outcomes, run.measured_count, metric)
        typer.echo(f"  {metric.value}: MAPE={q.mape:.3f}% JPM={q.jpm:.3f}%")
    typer.echo(f"  monitored samples: {run.measured_count}/{len(ticks)}")


@app.command()
def detect(
    scenario: Path = typer.Argument(..., help="Scenario YAML file"),
    log_level: Optional[str] = typer.Option(None),
) -> None:
    """Replay a scenario through the density-based anomaly detector."""
    cfg, ticks = _prepare(scenario, log_level)
    detector = DensityAnomalyDetector(cfg.scenario.anomaly)
    anomalies = replay_detection(detector, ticks)
    for idx in sorted(anomalies):
        typer.echo(f"{idx}: {', '.join(anomalies[idx])}")
    for metric, params in cfg.scenario.evaluation.items():
        score = anomaly_score(detected_indexes(anomalies, metric), params)
        typer.echo(f"[S] Anomaly Score ({metric.value}): {score:.3f}%")


@app.command()
def sample(
    scenario: Path = typer.Argument(..., help="Scenario YAML file"),
    log_level: Optional[str] = typer.Option(None),
) -> None:
    """Replay a scenario through PEWMA and the configured comparison samplers."""
    cfg, ticks = _prepare(scenario, log_level)
    pewma = PEWMASampler(cfg.scenario.sampling)
    _report_sampling("PEWMA", ticks, replay_periodic(pewma.estimate_sampling_period, ticks))
    if cfg.scenario.udasa is not None:
        udasa = UDASASampler(cfg.scenario.udasa)
        _report_sampling("UDASA", ticks, replay_periodic(udasa.estimate_sampling_period, ticks))
    if cfg.scenario.awbs is not None:
        _report_sampling("AWBS", ticks, replay_windowed(AWBSSampler(cfg.scenario.awbs), ticks))


if __name__ == "__main__":
    app()
