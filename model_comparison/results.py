"""Result containers produced by resampling and tuning."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class MetricRecord:
    """
    One aggregated metric for one model configuration over a fold set.

    Attributes:
        model: Label of the model family (``lm``, ``knn``, ``tree``)
        metric: Metric name, e.g. ``rmse``
        mean: Mean of the metric across folds
        std_err: Standard error of that mean
        n: Number of folds the mean was taken over
        config_id: Identifier of the grid point within its family
        params: Hyperparameter values of the configuration
    """

    model: str
    metric: str
    mean: float
    std_err: float = 0.0
    n: int = 0
    config_id: str = ""
    params: Dict[str, Any] = field(default_factory=dict, compare=False)

    def as_row(self) -> dict:
        return {
            "model": self.model,
            "config_id": self.config_id,
            "metric": self.metric,
            "mean": self.mean,
            "std_err": self.std_err,
            "n": self.n,
            **self.params,
        }


@dataclass(frozen=True)
class FoldScore:
    """Metric values of one grid point evaluated on one fold."""

    config_index: int
    fold_index: int
    scores: Dict[str, float]


def config_id(index: int) -> str:
    return f"Model{index + 1:02d}"


def aggregate_fold_scores(label, grid, fold_scores, metrics) -> list[MetricRecord]:
    """
    Reduces per-fold scores into one record per (grid point, metric).

    Records come out in grid order, then in ``metrics`` order, whatever the
    order of ``fold_scores``.
    """
    by_config = {i: [] for i in range(len(grid))}
    for fs in fold_scores:
        by_config[fs.config_index].append(fs)

    records = []
    for i, params in enumerate(grid):
        scores = sorted(by_config[i], key=lambda fs: fs.fold_index)
        for metric in metrics:
            values = np.array([fs.scores[metric] for fs in scores], dtype=float)
            n = len(values)
            mean = float(values.mean()) if n else math.nan
            std_err = float(values.std(ddof=1) / math.sqrt(n)) if n > 1 else 0.0
            records.append(
                MetricRecord(
                    model=label,
                    metric=metric,
                    mean=mean,
                    std_err=std_err,
                    n=n,
                    config_id=config_id(i),
                    params=dict(params),
                )
            )
    return records


@dataclass
class TuningResults:
    """All metric records for one model family, plus the raw fold scores."""

    family: str
    label: str
    records: list[MetricRecord]
    fold_scores: list[FoldScore] = field(default_factory=list)

    def collect_metrics(self, metric: str | None = None) -> list[MetricRecord]:
        if metric is None:
            return list(self.records)
        return [r for r in self.records if r.metric == metric]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([r.as_row() for r in self.records])
