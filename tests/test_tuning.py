import math
import random

import numpy as np
import pytest

from model_comparison.config import Config
from model_comparison.data_processing import initial_split, make_folds
from model_comparison.models import TUNE, ModelKind, ModelSpec, Workflow
from model_comparison.preprocessing import Recipe
from model_comparison.results import FoldScore, aggregate_fold_scores
from model_comparison.selection import select_best
from model_comparison.training import tuning
from model_comparison.training.tuning import fit_resamples, last_fit, tune_grid


@pytest.fixture
def recipe():
    return Recipe(target="Sale_Price")


@pytest.fixture
def folds(housing_df):
    return make_folds(housing_df, v=3, strata="Sale_Price", random_state=42)


class TestTuneGrid:

    def test_one_record_per_grid_point_and_metric(self, housing_df, folds, recipe):
        spec = Config.model_spec("knn_regression")
        grid = Config.get_grid("knn_regression", spec)
        results = tune_grid(spec, recipe, housing_df, folds, grid, metrics=["rmse", "rsq"])

        assert len(results.records) == len(grid) * 2
        assert len(results.collect_metrics("rmse")) == len(grid)
        assert len(results.fold_scores) == len(grid) * len(folds)
        assert all(r.n == 3 for r in results.records)
        assert all(r.model == "knn" for r in results.records)

    def test_records_follow_grid_order(self, housing_df, folds, recipe):
        spec = Config.model_spec("knn_regression")
        grid = Config.get_grid("knn_regression", spec)
        records = tune_grid(spec, recipe, housing_df, folds, grid).collect_metrics("rmse")
        assert [r.params["n_neighbors"] for r in records] == [p["n_neighbors"] for p in grid]
        assert [r.config_id for r in records[:2]] == ["Model01", "Model02"]

    def test_std_err_matches_fold_scores(self, housing_df, folds, recipe):
        spec = ModelSpec(kind=ModelKind.LINEAR, label="lm")
        results = tune_grid(spec, recipe, housing_df, folds, [{}])
        values = np.array([fs.scores["rmse"] for fs in results.fold_scores])
        record = results.records[0]
        assert record.mean == pytest.approx(values.mean())
        assert record.std_err == pytest.approx(values.std(ddof=1) / math.sqrt(3))

    def test_parallel_matches_serial(self, housing_df, folds, recipe):
        spec = Config.model_spec("decision_tree")
        grid = Config.get_grid("decision_tree", spec)[:4]
        serial = tune_grid(spec, recipe, housing_df, folds, grid, n_workers=1)
        parallel = tune_grid(spec, recipe, housing_df, folds, grid, n_workers=2)
        assert [r.mean for r in serial.records] == pytest.approx([r.mean for r in parallel.records])
        assert [r.config_id for r in serial.records] == [r.config_id for r in parallel.records]

    def test_best_config_is_argmin(self, housing_df, folds, recipe):
        spec = Config.model_spec("knn_regression")
        grid = Config.get_grid("knn_regression", spec)
        records = tune_grid(spec, recipe, housing_df, folds, grid).collect_metrics("rmse")
        best = select_best(records, "rmse")
        assert best.mean == min(r.mean for r in records)

    def test_each_fold_is_sliced_once(self, housing_df, folds, recipe, monkeypatch):
        seen = []
        score_fold = tuning._score_fold

        def recording(config_index, fold_index, spec, recipe, train_df, val_df, metrics, random_state):
            seen.append((fold_index, train_df, val_df))
            return score_fold(config_index, fold_index, spec, recipe, train_df, val_df, metrics, random_state)

        monkeypatch.setattr(tuning, "_score_fold", recording)
        spec = Config.model_spec("knn_regression")
        grid = Config.get_grid("knn_regression", spec)[:3]
        tune_grid(spec, recipe, housing_df, folds, grid)

        for j in range(len(folds)):
            frames = [(train_df, val_df) for fold_index, train_df, val_df in seen if fold_index == j]
            assert len(frames) == 3
            assert all(tr is frames[0][0] and va is frames[0][1] for tr, va in frames), \
                "grid points must share the fold's frames"

    def test_worker_task_slices_its_own_fold(self, housing_df, folds, recipe, monkeypatch):
        monkeypatch.setattr(tuning, "_worker_state", {})
        tuning._init_worker(recipe, housing_df, folds)
        spec = ModelSpec(kind=ModelKind.LINEAR, label="lm")
        fold = folds.folds[1]

        from_worker = tuning._evaluate_task(0, 1, spec, ["rmse"], 42)
        direct = tuning._score_fold(
            0, 1, spec, recipe,
            housing_df.iloc[fold.train_idx], housing_df.iloc[fold.val_idx], ["rmse"], 42,
        )
        assert from_worker == direct

    def test_empty_grid_raises(self, housing_df, folds, recipe):
        with pytest.raises(ValueError):
            tune_grid(Config.model_spec("knn_regression"), recipe, housing_df, folds, [])

    def test_task_failure_propagates(self, housing_df, folds):
        spec = ModelSpec(kind=ModelKind.LINEAR, label="lm")
        broken = Recipe(target="Sale_Price", numeric_features=["Not_A_Column"])
        with pytest.raises(ValueError):
            tune_grid(spec, broken, housing_df, folds, [{}])


class TestAggregation:

    def test_completion_order_does_not_matter(self):
        grid = [{"k": 1}, {"k": 2}]
        scores = [
            FoldScore(config_index=i, fold_index=j, scores={"rmse": float(i * 10 + j)})
            for i in range(2) for j in range(3)
        ]
        shuffled = list(scores)
        random.Random(0).shuffle(shuffled)

        a = aggregate_fold_scores("knn", grid, scores, ["rmse"])
        b = aggregate_fold_scores("knn", grid, shuffled, ["rmse"])
        assert a == b
        assert [r.mean for r in a] == [1.0, 11.0]
        assert [r.params for r in a] == grid


class TestFitResamples:

    def test_single_configuration(self, housing_df, folds, recipe):
        spec = Config.model_spec("knn_regression", tuned=False)
        results = fit_resamples(spec, recipe, housing_df, folds, metrics=["rmse", "mae"])
        assert len(results.records) == 2
        assert results.records[0].params == {"n_neighbors": 5, "weights": "uniform"}

    def test_tuned_spec_raises(self, housing_df, folds, recipe):
        with pytest.raises(ValueError):
            fit_resamples(Config.model_spec("knn_regression"), recipe, housing_df, folds)


class TestLastFit:

    def test_scores_test_rows(self, housing_df, recipe):
        split = initial_split(housing_df, prop=0.75, strata="Sale_Price")
        spec = ModelSpec(kind=ModelKind.KNN, params={"n_neighbors": 7, "weights": "distance"})
        workflow, metrics = last_fit(spec, recipe, split, metrics=["rmse", "rsq"])
        assert isinstance(workflow, Workflow)
        assert set(metrics) == {"rmse", "rsq"}
        assert metrics["rmse"] > 0

    def test_recipe_argument_is_left_unfitted(self, housing_df, recipe):
        split = initial_split(housing_df, prop=0.75)
        last_fit(ModelSpec(kind=ModelKind.LINEAR), recipe, split)
        assert not getattr(recipe, "is_fitted_", False)

    def test_needs_final_spec(self, housing_df, recipe):
        split = initial_split(housing_df, prop=0.75)
        with pytest.raises(ValueError):
            last_fit(ModelSpec(kind=ModelKind.KNN, params={"n_neighbors": TUNE}), recipe, split)
