"""Hyperparameter optimisation utilities using Optuna."""

import math

import numpy as np
import optuna
import pandas as pd

from model_comparison.config import Config
from model_comparison.data_processing.splitting import FoldSet
from model_comparison.preprocessing import Recipe
from model_comparison.results import MetricRecord, TuningResults
from model_comparison.training.tuning import _fit_and_score


class OptunaOptimizer:
    """
    Searches the hyperparameter ranges of each model family with Optuna.

    This is the alternative to the regular grid: a TPE sampler proposes values
    inside the ``min``/``max``/``choices`` ranges of ``HYPERPARAMETER_CONFIGS``
    and each trial is scored by k-fold cross-validation on the same folds the
    grid search uses.
    """

    def __init__(
        self,
        config: Config,
        data: pd.DataFrame,
        folds: FoldSet,
        recipe: Recipe,
        model_families: list[str] | None = None,
        metric: str = "rmse",
    ):
        self.config = config
        self.data = data
        self.folds = folds
        self.recipe = recipe
        self.model_families = model_families
        self.metric = metric
        self.metrics = list(dict.fromkeys([metric] + list(config.METRICS)))
        self.config.OPTUNA_DB_DIR.mkdir(exist_ok=True, parents=True)

    def _cross_validate(self, spec, trial=None):
        """Scores ``spec`` fold by fold, reporting the running mean for pruning."""
        fold_scores = {m: [] for m in self.metrics}
        for fold_idx, fold in enumerate(self.folds):
            train_df = self.data.iloc[fold.train_idx]
            val_df = self.data.iloc[fold.val_idx]
            _, scores = _fit_and_score(
                spec, self.recipe, train_df, val_df, self.metrics, self.config.RANDOM_STATE
            )
            for m, value in scores.items():
                fold_scores[m].append(value)

            if trial is not None and hasattr(trial, "report") and hasattr(trial, "should_prune"):
                trial.report(float(np.mean(fold_scores[self.metric])), step=fold_idx)
                if trial.should_prune():
                    raise optuna.exceptions.TrialPruned()

        summary = {}
        for m, values in fold_scores.items():
            values = np.asarray(values, dtype=float)
            n = len(values)
            summary[m] = (
                float(values.mean()),
                float(values.std(ddof=1) / math.sqrt(n)) if n > 1 else 0.0,
                n,
            )
        return summary

    def _objective(self, trial, family_name, spec):
        """The core objective function for Optuna to minimize."""
        params = self.config.get_search_space(trial, family_name, spec)
        summary = self._cross_validate(spec.finalize(params), trial)
        for m, (mean, std_err, n) in summary.items():
            trial.set_user_attr(f"{m}_mean", mean)
            trial.set_user_attr(f"{m}_std_err", std_err)
            trial.set_user_attr("n", n)
        return summary[self.metric][0]

    def _to_results(self, family_name, spec, study):
        """Turns the completed trials of ``study`` into metric records."""
        fixed = {k: v for k, v in spec.params.items() if k not in spec.tunable_params()}
        records = []
        completed = [t for t in study.trials if t.state == optuna.trial.TrialState.COMPLETE]
        for t in completed:
            for m in self.metrics:
                if f"{m}_mean" not in t.user_attrs:
                    continue
                records.append(
                    MetricRecord(
                        model=spec.label,
                        metric=m,
                        mean=t.user_attrs[f"{m}_mean"],
                        std_err=t.user_attrs[f"{m}_std_err"],
                        n=t.user_attrs["n"],
                        config_id=f"Trial{t.number:03d}",
                        params={**fixed, **t.params},
                    )
                )
        return TuningResults(family=family_name, label=spec.label, records=records)

    def run(self):
        """
        Runs the search for all selected model families. Every run starts a
        new study per family; its SQLite file replaces the one left by the
        previous run and is never read back.

        Families without tunable parameters are scored once with a single
        fixed trial.

        Returns:
            list[TuningResults]: one entry per searched family.
        """
        all_results = []
        for family_name in self.config.MODEL_FAMILIES:
            if self.model_families and family_name not in self.model_families:
                continue

            spec = self.config.model_spec(family_name)
            db_path = self.config.OPTUNA_DB_DIR / f"{family_name}.db"
            # The database only records this run; trials from earlier runs are discarded
            db_path.unlink(missing_ok=True)
            print(f"Creating study '{family_name}' in {db_path}.")
            sampler = optuna.samplers.TPESampler(
                seed=self.config.RANDOM_STATE,
                constant_liar=True,
                n_startup_trials=max(10, 2 * self.config.NUM_PARALLEL_WORKERS),
            )
            study = optuna.create_study(
                study_name=family_name,
                storage=f"sqlite:///{db_path}",
                direction="minimize",
                sampler=sampler,
                pruner=optuna.pruners.MedianPruner(n_startup_trials=5),
                load_if_exists=False,
            )

            n_trials = self.config.N_TRIALS_PER_FAMILY if spec.is_tuned else 1
            print(f"Optimising {family_name.upper()} – running {n_trials} trials...")
            study.optimize(
                lambda trial: self._objective(trial, family_name, spec),
                n_trials=n_trials,
                n_jobs=self.config.NUM_PARALLEL_WORKERS,
                show_progress_bar=True,
            )

            all_results.append(self._to_results(family_name, spec, study))

        return all_results
