"""Regression metrics computed on a single resample."""

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score


def rmse(y_true, y_pred) -> float:
    """Root-mean-squared error."""
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


def mae(y_true, y_pred) -> float:
    """Mean absolute error."""
    return float(mean_absolute_error(y_true, y_pred))


def rsq(y_true, y_pred) -> float:
    """Coefficient of determination."""
    return float(r2_score(y_true, y_pred))


METRICS = {
    "rmse": rmse,
    "mae": mae,
    "rsq": rsq,
}

# Metrics where a lower value is better; only these can drive selection
ERROR_METRICS = ("rmse", "mae")


def compute_metrics(y_true, y_pred, metrics=("rmse",)) -> dict[str, float]:
    """
    Evaluates every named metric on one set of predictions.

    Raises:
        ValueError: For an unknown metric name.
    """
    unknown = [m for m in metrics if m not in METRICS]
    if unknown:
        raise ValueError(f"Unknown metrics {unknown}; available: {sorted(METRICS)}")
    return {name: METRICS[name](y_true, y_pred) for name in metrics}
