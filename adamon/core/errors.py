from __future__ import annotations


class UnknownMetricError(KeyError):
    """Raised when a metric has no matching entry in the static configuration."""

    def __init__(self, metric: object, where: str = "configuration") -> None:
        self.metric = metric
        self.where = where
        super().__init__(f"No {where} entry for metric {metric!r}")

    def __str__(self) -> str:
        return self.args[0]
