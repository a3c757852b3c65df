"""Adaptive monitoring estimators for resource utilisation streams.

The package evaluates two online monitoring strategies over per-resource
(CPU, RAM, disk) measurements: density-based anomaly detection guarded by a
hysteresis state machine, and adaptive sampling that decides how long to wait
before the next observation. PEWMA is the primary sampler; AWBS and UDASA are
comparison baselines implementing the same contract.
"""

__all__ = [
    "config",
    "core",
    "data",
    "utils",
]
