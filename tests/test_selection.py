import math

import numpy as np
import pytest

from model_comparison.results import MetricRecord
from model_comparison.selection import (
    InvalidInputError,
    compare_models,
    select_best,
    show_best,
)


def _rec(model, mean, metric="rmse", n=10, config_id=""):
    return MetricRecord(model=model, metric=metric, mean=mean, n=n, config_id=config_id)


class TestSelectBest:
    """Selection of the lowest-error configuration."""

    def test_scenario_three_families(self):
        records = [_rec("lm", 1200), _rec("knn", 980), _rec("tree", 1050)]
        best = select_best(records, "rmse")
        assert best.model == "knn"
        assert best.metric == "rmse"
        assert best.mean == 980

    def test_tie_returns_first_in_input_order(self):
        records = [_rec("a", 500), _rec("b", 500)]
        best = select_best(records, "rmse")
        assert best is records[0]

    def test_tie_is_deterministic_across_calls(self):
        records = [_rec("c", 700), _rec("a", 500), _rec("b", 500), _rec("d", 500)]
        picks = {id(select_best(records, "rmse")) for _ in range(20)}
        assert picks == {id(records[1])}

    def test_empty_collection_raises(self):
        with pytest.raises(InvalidInputError):
            select_best([], "rmse")

    def test_empty_generator_raises(self):
        with pytest.raises(InvalidInputError):
            select_best((r for r in []), "rmse")

    def test_metric_absent_from_every_record_raises(self):
        records = [_rec("lm", 0.2, metric="mae"), _rec("knn", 0.1, metric="rsq")]
        with pytest.raises(InvalidInputError, match="rmse"):
            select_best(records, "rmse")

    def test_only_requested_metric_is_considered(self):
        records = [
            _rec("lm", 0.05, metric="mae"),
            _rec("lm", 0.30, metric="rmse"),
            _rec("knn", 0.20, metric="rmse"),
            _rec("knn", 0.01, metric="mae"),
        ]
        assert select_best(records, "rmse").model == "knn"
        assert select_best(records, "mae").model == "knn"
        assert select_best(records, "mae").mean == 0.01

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_value_raises(self, bad):
        records = [_rec("lm", 0.3), _rec("knn", bad)]
        with pytest.raises(InvalidInputError):
            select_best(records, "rmse")

    def test_numpy_values_are_accepted(self):
        records = [_rec("lm", np.float64(0.3)), _rec("knn", np.int64(1))]
        assert select_best(records, "rmse").model == "lm"

    def test_result_is_minimum_for_random_collections(self):
        rng = np.random.default_rng(0)
        for _ in range(50):
            size = int(rng.integers(1, 30))
            # Coarse values so ties happen regularly
            values = rng.integers(0, 10, size=size).astype(float)
            records = [_rec(f"m{i}", v) for i, v in enumerate(values)]
            best = select_best(records, "rmse")
            assert all(best.mean <= r.mean for r in records)
            first_min = int(np.argmin(values))
            assert best is records[first_min]

    def test_invalid_input_is_a_value_error(self):
        with pytest.raises(ValueError):
            select_best([], "rmse")


class TestShowBest:

    def test_returns_lowest_in_order(self):
        records = [_rec("a", 3), _rec("b", 1), _rec("c", 2), _rec("d", 1)]
        top = show_best(records, "rmse", n=3)
        assert [r.model for r in top] == ["b", "d", "c"]

    def test_n_larger_than_collection(self):
        records = [_rec("a", 3), _rec("b", 1)]
        assert len(show_best(records, "rmse", n=10)) == 2

    def test_bad_n_raises(self):
        with pytest.raises(InvalidInputError):
            show_best([_rec("a", 1)], "rmse", n=0)


class TestCompareModels:
    """The comparison report across model families."""

    def test_scenario_three_families(self):
        records = [_rec("lm", 1200), _rec("knn", 980), _rec("tree", 1050)]
        assert compare_models(records) == [("knn", 980), ("tree", 1050), ("lm", 1200)]

    def test_output_sorted_ascending_for_random_inputs(self):
        rng = np.random.default_rng(1)
        for _ in range(50):
            size = int(rng.integers(1, 12))
            records = [_rec(f"m{i}", float(v)) for i, v in enumerate(rng.normal(size=size))]
            means = [mean for _, mean in compare_models(records)]
            assert means == sorted(means)
            assert len(means) == size

    def test_ties_keep_input_order(self):
        records = [_rec("a", 500), _rec("b", 500), _rec("c", 100)]
        assert [label for label, _ in compare_models(records)] == ["c", "a", "b"]

    def test_empty_raises(self):
        with pytest.raises(InvalidInputError):
            compare_models([])

    def test_mixed_metric_names_raise(self):
        records = [_rec("lm", 0.2), _rec("knn", 0.1, metric="mae")]
        with pytest.raises(InvalidInputError, match="different metrics"):
            compare_models(records)

    def test_mismatched_fold_counts_raise(self):
        records = [_rec("lm", 0.2, n=10), _rec("knn", 0.1, n=5)]
        with pytest.raises(InvalidInputError, match="fold counts"):
            compare_models(records)

    def test_non_finite_mean_raises(self):
        with pytest.raises(InvalidInputError):
            compare_models([_rec("lm", 0.2), _rec("knn", math.nan)])

    def test_selector_agrees_with_report_head(self):
        records = [_rec("lm", 0.21), _rec("knn", 0.19), _rec("tree", 0.25)]
        assert compare_models(records)[0][0] == select_best(records).model
