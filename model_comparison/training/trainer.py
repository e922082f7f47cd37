"""High-level training orchestration and evaluation helpers."""

from dataclasses import dataclass, field

import pandas as pd

from model_comparison.config import Config
from model_comparison.data_processing import DataLoader, initial_split, make_folds
from model_comparison.metrics import ERROR_METRICS
from model_comparison.models import Workflow
from model_comparison.preprocessing import Recipe
from model_comparison.reporting import (
    comparison_frame,
    format_comparison,
    save_table,
    tuning_results_frame,
)
from model_comparison.results import MetricRecord, TuningResults
from model_comparison.selection import compare_models, select_best
from model_comparison.training.hyperparameter import OptunaOptimizer
from model_comparison.training.tuning import fit_resamples, last_fit, tune_grid


@dataclass
class FinalEvaluation:
    """The winning configuration refitted on all training rows and scored on the test rows."""

    family: str
    record: MetricRecord
    test_metrics: dict
    workflow: Workflow


@dataclass
class RunSummary:
    ranking: list[tuple[str, float]]
    best_records: dict[str, MetricRecord]
    final: FinalEvaluation
    tuning_results: list[TuningResults] = field(default_factory=list)


class Trainer:
    """
    Orchestrates the pipeline: split, resampling or search, selection,
    comparison and final evaluation.
    """

    def __init__(self, config: Config, model_families: list[str] | None = None,
                 search_strategy: str = "grid", save_models: bool = False,
                 use_defaults: bool = False, data_path=None):
        """
        Initializes the Trainer and loads the dataset.

        Args:
            config: Configuration object
            model_families: Families to run (e.g., ['knn_regression', 'decision_tree']); all if None
            search_strategy: 'grid' for the regular grid, 'optuna' for the TPE search
            save_models: Whether to save the final fitted workflow
            use_defaults: Resample every family with default hyperparameters instead of tuning
            data_path: Dataset location; ``config.RAW_DATA_PATH`` if None
        """
        if search_strategy not in ("grid", "optuna"):
            raise ValueError(f"Unknown search strategy '{search_strategy}'")
        if config.SELECTION_METRIC not in ERROR_METRICS:
            raise ValueError(
                f"Selection metric must be one of {ERROR_METRICS}, got '{config.SELECTION_METRIC}'"
            )
        unknown = [f for f in (model_families or []) if f not in config.MODEL_FAMILIES]
        if unknown:
            raise ValueError(f"Unknown model families: {unknown}")

        self.config = config
        self.model_families = model_families
        self.search_strategy = search_strategy
        self.save_models = save_models
        self.use_defaults = use_defaults
        self.metric = config.SELECTION_METRIC
        self.metrics = list(dict.fromkeys([self.metric] + list(config.METRICS)))

        self.data = self._load_data(data_path)
        self.split = None
        self.folds = None
        self.recipe = Recipe(
            target=config.TARGET_COLUMN,
            numeric_features=config.NUMERIC_FEATURES,
            categorical_features=config.CATEGORICAL_FEATURES,
            log_base=config.TARGET_LOG_BASE,
            drop_first=config.DROP_FIRST_LEVEL,
        )

    def _load_data(self, data_path):
        """Loads the dataset, or returns None when the file is missing."""
        try:
            return DataLoader(self.config).load(data_path)
        except FileNotFoundError:
            print("Error: Dataset not found. Pass --data or place the CSV at Config.RAW_DATA_PATH.")
            return None

    def _families(self):
        return [f for f in self.config.MODEL_FAMILIES
                if not self.model_families or f in self.model_families]

    def _prepare_resamples(self):
        """Creates the train/test split and the fold set on the training rows."""
        strata = None
        if self.config.STRATIFY:
            strata = self.config.STRATA_COLUMN or self.config.TARGET_COLUMN

        print(f"Splitting data with training fraction {self.config.TRAIN_FRACTION} "
              f"(stratified on {strata or 'nothing'})...")
        self.split = initial_split(
            self.data,
            prop=self.config.TRAIN_FRACTION,
            strata=strata,
            bins=self.config.STRATA_BINS,
            random_state=self.config.RANDOM_STATE,
        )
        self.split.validate(self.data)

        self.folds = make_folds(
            self.split.train,
            v=self.config.CV_SPLITS,
            strata=strata,
            bins=self.config.STRATA_BINS,
            random_state=self.config.RANDOM_STATE,
        )
        self.folds.validate()
        print(f"Training rows: {len(self.split.train)}, test rows: {len(self.split.test)}, "
              f"folds: {len(self.folds)}")

    def run_optimization_and_evaluation(self) -> RunSummary | None:
        """
        Tunes (or resamples with defaults) every selected family, compares the
        best configuration of each, and evaluates the overall winner on the
        test set. Writes the tuning, comparison and final result CSV files.
        """
        if self.data is None:
            print("Exiting due to missing data.")
            return None

        self._prepare_resamples()

        if self.use_defaults:
            print("\nResampling models with default hyperparameters...")
            all_results = self._train_with_defaults()
        elif self.search_strategy == "optuna":
            print("\nInitiating Optuna hyperparameter search...")
            optimizer = OptunaOptimizer(
                self.config, self.split.train, self.folds, self.recipe,
                self.model_families, metric=self.metric)
            all_results = optimizer.run()
        else:
            print("\nInitiating grid search...")
            all_results = self._run_grid_search()

        save_table(tuning_results_frame(all_results), self.config.TUNING_RESULTS_CSV_PATH)

        best_records = self._best_per_family(all_results)
        ranking = self._compare(best_records)
        final = self._final_evaluation(best_records)
        return RunSummary(ranking=ranking, best_records=best_records,
                          final=final, tuning_results=all_results)

    def _run_grid_search(self):
        all_results = []
        for family_name in self._families():
            spec = self.config.model_spec(family_name)
            grid = self.config.get_grid(family_name, spec)
            print(f"Tuning {family_name.upper()} – {len(grid)} grid points x {len(self.folds)} folds...")
            all_results.append(tune_grid(
                spec, self.recipe, self.split.train, self.folds, grid,
                metrics=self.metrics,
                n_workers=self.config.NUM_PARALLEL_WORKERS,
                random_state=self.config.RANDOM_STATE,
                family=family_name,
            ))
        return all_results

    def _train_with_defaults(self):
        all_results = []
        for family_name in self._families():
            spec = self.config.model_spec(family_name, tuned=False)
            print(f"Resampling {family_name} with default parameters...")
            results = fit_resamples(
                spec, self.recipe, self.split.train, self.folds,
                metrics=self.metrics,
                n_workers=self.config.NUM_PARALLEL_WORKERS,
                random_state=self.config.RANDOM_STATE,
                family=family_name,
            )
            record = select_best(results.records, self.metric)
            print(f"  {family_name}: CV {self.metric} = {record.mean:.4f}")
            all_results.append(results)
        return all_results

    def _best_per_family(self, all_results):
        best_records = {}
        for results in all_results:
            best = select_best(results.records, self.metric)
            best_records[results.family] = best
            print(f"Best {results.family}: {self.metric} = {best.mean:.4f} "
                  f"(± {best.std_err:.4f}) with {best.params}")
        return best_records

    def _compare(self, best_records):
        ranking = compare_models(list(best_records.values()))
        table = comparison_frame(ranking, best_records)
        print("\nModel comparison (lower is better):")
        print(format_comparison(table))
        save_table(table, self.config.COMPARISON_CSV_PATH)
        return ranking

    def _final_evaluation(self, best_records) -> FinalEvaluation:
        """
        Refits the overall best configuration on the whole training subset and
        scores it once on the untouched test subset.
        """
        winner = select_best(list(best_records.values()), self.metric)
        family_name = self.config.family_for_label(winner.model)
        spec = self.config.model_spec(family_name).finalize(winner.params)

        print(f"\nFinal evaluation of {family_name.upper()} on the test set...")
        workflow, test_metrics = last_fit(
            spec, self.recipe, self.split, metrics=self.metrics,
            random_state=self.config.RANDOM_STATE)
        for name, value in test_metrics.items():
            print(f"  test {name}: {value:.4f}")

        row = {
            "model": winner.model,
            "family": family_name,
            f"{self.metric}_cv": winner.mean,
            **winner.params,
            **{f"{name}_test": value for name, value in test_metrics.items()},
        }
        save_table(pd.DataFrame([row]), self.config.FINAL_RESULTS_CSV_PATH)

        if self.save_models:
            workflow.metadata.update({
                "model_family": family_name,
                "cv_metric": self.metric,
                "cv_mean": winner.mean,
                "test_metrics": test_metrics,
                "training_timestamp": str(pd.Timestamp.now()),
            })
            path = self.config.MODELS_DIR / f"{family_name}.pkl"
            workflow.save(path)
            print(f"Saved workflow artifact for '{family_name}' to {path}")

        return FinalEvaluation(family=family_name, record=winner,
                               test_metrics=test_metrics, workflow=workflow)

    def run_evaluation_from_files(self) -> RunSummary | None:
        """
        Runs the final evaluation by READING the comparison file of a previous
        search, without tuning again.
        """
        print("\nInitiating evaluation using parameters from the comparison file...")
        if self.data is None:
            print("Exiting due to missing data.")
            return None

        path = self.config.COMPARISON_CSV_PATH
        if not path.exists():
            print("\nError: No comparison file found. Run a search first with --run-search.")
            return None

        comparison_df = pd.read_csv(path)
        print(f"\nFound {len(comparison_df)} model families in {path}.")

        if self.model_families:
            comparison_df = comparison_df[comparison_df["family"].isin(self.model_families)]
        if comparison_df.empty:
            print("\nError: The comparison file has no rows for the selected model families.")
            return None

        stored_metrics = sorted(set(comparison_df["metric"]))
        if stored_metrics != [self.metric]:
            print(f"\nError: The comparison file was built for {stored_metrics}, not '{self.metric}'. "
                  f"Pass --metric to match it or run a new search.")
            return None

        best_records = {}
        for _, row in comparison_df.iterrows():
            family_name = row["family"]
            best_records[family_name] = MetricRecord(
                model=row["model"],
                metric=row["metric"],
                mean=float(row["mean"]),
                std_err=float(row["std_err"]),
                n=int(row["n"]),
                config_id=str(row["config_id"]),
                params=self._params_from_row(family_name, row),
            )

        self._prepare_resamples()
        ranking = compare_models(list(best_records.values()))
        final = self._final_evaluation(best_records)
        return RunSummary(ranking=ranking, best_records=best_records, final=final)

    def _params_from_row(self, family_name, row):
        """Rebuilds a family's hyperparameters from a CSV row, defaults filling gaps."""
        params = self.config.get_defaults(family_name)
        for param_name in self.config.HYPERPARAMETER_CONFIGS.get(family_name, {}):
            if param_name in row and not pd.isna(row[param_name]):
                value = row[param_name]
                # Type conversion
                if isinstance(value, float) and value.is_integer():
                    value = int(value)
                elif str(value).lower() in ['true', 'false']:
                    value = str(value).lower() == 'true'
                params[param_name] = value
        return params
