import numpy as np
import pytest

from model_comparison.metrics import ERROR_METRICS, compute_metrics, mae, rmse, rsq


def test_perfect_predictions():
    y = np.array([1.0, 2.0, 3.0])
    assert rmse(y, y) == 0.0
    assert mae(y, y) == 0.0
    assert rsq(y, y) == 1.0


def test_known_values():
    y_true = np.array([0.0, 0.0, 0.0, 0.0])
    y_pred = np.array([1.0, -1.0, 1.0, -1.0])
    assert rmse(y_true, y_pred) == pytest.approx(1.0)
    assert mae(y_true, y_pred) == pytest.approx(1.0)


def test_compute_metrics_keeps_requested_order():
    y = np.array([1.0, 2.0, 4.0])
    result = compute_metrics(y, y + 0.5, ["mae", "rmse"])
    assert list(result) == ["mae", "rmse"]
    assert result["mae"] == pytest.approx(0.5)


def test_unknown_metric_raises():
    with pytest.raises(ValueError):
        compute_metrics([1.0], [1.0], ["mape"])


def test_rsq_is_not_an_error_metric():
    assert "rsq" not in ERROR_METRICS
