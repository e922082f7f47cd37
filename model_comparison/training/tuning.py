"""Resampled fitting and grid tuning.

Every (grid point x fold) pair is an independent task: it clones the recipe,
fits it and the model on the fold's training rows and scores the fold's
validation rows. Tasks run inline or on a process pool; their scores are
reduced per grid point afterwards, so completion order never matters.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed

import pandas as pd
from sklearn.base import clone
from tqdm import tqdm

from model_comparison.data_processing.splitting import FoldSet, Split
from model_comparison.metrics import compute_metrics
from model_comparison.models import ModelSpec, Workflow
from model_comparison.preprocessing import Recipe
from model_comparison.results import FoldScore, TuningResults, aggregate_fold_scores

logger = logging.getLogger(__name__)


def _fit_and_score(spec, recipe, train_df, eval_df, metrics, random_state):
    """Fits a fresh workflow on ``train_df`` and scores it on ``eval_df``."""
    workflow = Workflow(spec, clone(recipe), random_state=random_state)
    workflow.fit(train_df)
    preds = workflow.predict(eval_df)
    y_true = workflow.recipe.transform_target(eval_df[recipe.target])
    return workflow, compute_metrics(y_true, preds, metrics)


def _score_fold(config_index, fold_index, spec, recipe, train_df, val_df, metrics, random_state):
    _, scores = _fit_and_score(spec, recipe, train_df, val_df, metrics, random_state)
    return FoldScore(config_index=config_index, fold_index=fold_index, scores=scores)


# Filled once per worker process by _init_worker
_worker_state = {}


def _init_worker(recipe, data, folds):
    _worker_state.update(recipe=recipe, data=data, folds=folds)


def _evaluate_task(config_index, fold_index, spec, metrics, random_state):
    """One unit of work for the pool. Must stay a module-level function.

    Only indices travel with the task; the rows come from the data each
    worker received at startup.
    """
    data = _worker_state["data"]
    fold = _worker_state["folds"].folds[fold_index]
    return _score_fold(
        config_index, fold_index, spec, _worker_state["recipe"],
        data.iloc[fold.train_idx], data.iloc[fold.val_idx], metrics, random_state,
    )


def tune_grid(
    spec: ModelSpec,
    recipe: Recipe,
    data: pd.DataFrame,
    folds: FoldSet,
    grid: list[dict],
    metrics=("rmse",),
    n_workers: int = 1,
    random_state: int = 42,
    family: str | None = None,
) -> TuningResults:
    """
    Evaluates every grid point of ``spec`` on every fold of ``folds``.

    Args:
        spec: Model configuration; ``TUNE`` parameters are bound per grid point
        recipe: Unfitted recipe, cloned for every task
        data: Training rows the fold indices refer to
        folds: Cross-validation folds over ``data``
        grid: Hyperparameter values, one dict per grid point
        metrics: Metric names to compute on each fold
        n_workers: Size of the process pool; 1 or less runs tasks inline
        random_state: Random state for the predictors
        family: Family name recorded on the results

    Returns:
        TuningResults: one record per (grid point, metric), in grid order.
    """
    if not grid:
        raise ValueError("Hyperparameter grid is empty")
    if len(folds) == 0:
        raise ValueError("Fold set is empty")

    metrics = list(metrics)
    specs = [spec.finalize(point) for point in grid]
    tasks = [(i, j) for i in range(len(specs)) for j in range(len(folds))]

    desc = f"Resampling {spec.label}"
    fold_scores = []
    if n_workers <= 1:
        # Each fold is sliced once and shared by every grid point
        fold_frames = [(data.iloc[fold.train_idx], data.iloc[fold.val_idx]) for fold in folds]
        for i, j in tqdm(tasks, desc=desc):
            train_df, val_df = fold_frames[j]
            fold_scores.append(_score_fold(i, j, specs[i], recipe, train_df, val_df, metrics, random_state))
            logger.debug("%s config %d fold %d: %s", spec.label, i, j, fold_scores[-1].scores)
    else:
        with ProcessPoolExecutor(max_workers=n_workers, initializer=_init_worker,
                                 initargs=(recipe, data, folds)) as executor:
            futures = {
                executor.submit(_evaluate_task, i, j, specs[i], metrics, random_state): (i, j)
                for i, j in tasks
            }
            try:
                for future in tqdm(as_completed(futures), total=len(futures), desc=desc):
                    fold_scores.append(future.result())
                    logger.debug("%s config %d fold %d done", spec.label, *futures[future])
            except Exception:
                for future in futures:
                    future.cancel()
                raise

    records = aggregate_fold_scores(spec.label, [s.params for s in specs], fold_scores, metrics)
    return TuningResults(
        family=family or spec.label,
        label=spec.label,
        records=records,
        fold_scores=fold_scores,
    )


def fit_resamples(
    spec: ModelSpec,
    recipe: Recipe,
    data: pd.DataFrame,
    folds: FoldSet,
    metrics=("rmse",),
    n_workers: int = 1,
    random_state: int = 42,
    family: str | None = None,
) -> TuningResults:
    """Evaluates a fully specified model across the folds (a one-point grid)."""
    if spec.is_tuned:
        raise ValueError(
            f"fit_resamples needs fixed hyperparameters; '{spec.label}' still tunes "
            f"{spec.tunable_params()}"
        )
    return tune_grid(
        spec, recipe, data, folds, [dict(spec.params)],
        metrics=metrics, n_workers=n_workers, random_state=random_state, family=family,
    )


def last_fit(
    spec: ModelSpec,
    recipe: Recipe,
    split: Split,
    metrics=("rmse",),
    random_state: int = 42,
) -> tuple[Workflow, dict]:
    """
    Fits ``spec`` on the full training subset and scores it once on the test subset.

    Returns:
        tuple: The fitted workflow and a dict of test-set metrics.
    """
    return _fit_and_score(spec, recipe, split.train, split.test, list(metrics), random_state)
