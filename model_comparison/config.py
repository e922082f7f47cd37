"""Project configuration and hyperparameter search spaces."""

from pathlib import Path

from sklearn.model_selection import ParameterGrid

from model_comparison.models import TUNE, ModelKind, ModelSpec


class Config:
    """
    Central configuration class for the model comparison project.

    This class holds all static configuration values, including file paths,
    split and resampling settings, the model family registry and the
    hyperparameter grids used when tuning.
    """

    PROJECT_ROOT = Path(__file__).parent.parent
    DATA_DIR = PROJECT_ROOT / "data"
    OUTPUT_DIR = PROJECT_ROOT / "artifacts" / "experiments"
    MODELS_DIR = PROJECT_ROOT / "artifacts" / "trained_models"

    RAW_DATA_PATH = DATA_DIR / "raw" / "ames.csv"
    CSV_SEPARATOR = ","

    OPTUNA_DB_DIR = OUTPUT_DIR / "optuna_db"
    TUNING_RESULTS_CSV_PATH = OUTPUT_DIR / "tuning_results.csv"
    COMPARISON_CSV_PATH = OUTPUT_DIR / "model_comparison.csv"
    FINAL_RESULTS_CSV_PATH = OUTPUT_DIR / "final_evaluation.csv"

    TARGET_COLUMN = "Sale_Price"
    TARGET_LOG_BASE = 10
    # None means "infer from dtypes" in the recipe
    NUMERIC_FEATURES = None
    CATEGORICAL_FEATURES = None
    DROP_FIRST_LEVEL = True

    TRAIN_FRACTION = 0.75
    STRATIFY = True
    # Column used for stratification; None stratifies on the target
    STRATA_COLUMN = None
    STRATA_BINS = 4
    RANDOM_STATE = 42

    CV_SPLITS = 10
    NUM_PARALLEL_WORKERS = 4
    N_TRIALS_PER_FAMILY = 30

    SELECTION_METRIC = "rmse"
    METRICS = ["rmse", "rsq", "mae"]

    MODEL_FAMILIES = {
        "linear_regression": {
            "kind": ModelKind.LINEAR,
            "label": "lm",
        },
        "knn_regression": {
            "kind": ModelKind.KNN,
            "label": "knn",
        },
        "decision_tree": {
            "kind": ModelKind.TREE,
            "label": "tree",
        },
    }

    # Each family lists only the parameters it exposes. "grid" drives the
    # regular grid search, "min"/"max"/"choices" drive the optuna search.
    HYPERPARAMETER_CONFIGS = {
        "linear_regression": {},
        "knn_regression": {
            "n_neighbors": {
                "grid": [3, 5, 7, 9, 11, 15, 21],
                "min": 1,
                "max": 30,
                "type": "int",
                "default": 5,
            },
            "weights": {
                "choices": ["uniform", "distance"],
                "default": "uniform",
            },
        },
        "decision_tree": {
            "max_depth": {
                "grid": [2, 4, 8, 15],
                "min": 1,
                "max": 15,
                "type": "int",
                "default": 30,
            },
            "ccp_alpha": {
                "grid": [1e-10, 1e-6, 1e-3, 1e-1],
                "min": 1e-10,
                "max": 1e-1,
                "type": "float",
                "log": True,
                "default": 0.01,
            },
            "min_samples_split": {
                "grid": [2, 20, 40],
                "min": 2,
                "max": 40,
                "type": "int",
                "default": 2,
            },
        },
    }

    # Which parameters are left open for tuning in a standard run
    TUNED_PARAMETERS = {
        "linear_regression": [],
        "knn_regression": ["n_neighbors"],
        "decision_tree": ["max_depth", "ccp_alpha", "min_samples_split"],
    }

    @classmethod
    def model_spec(cls, family_name, tuned=True):
        """
        Builds the model configuration for a family.

        Parameters listed in ``TUNED_PARAMETERS`` carry the ``TUNE`` marker
        when ``tuned`` is True; every other parameter is fixed to its default.
        """
        if family_name not in cls.MODEL_FAMILIES:
            raise ValueError(f"Unknown model family '{family_name}'")
        family = cls.MODEL_FAMILIES[family_name]
        params = cls.get_defaults(family_name)
        if tuned:
            for name in cls.TUNED_PARAMETERS.get(family_name, []):
                params[name] = TUNE
        return ModelSpec(kind=family["kind"], params=params, label=family["label"])

    @classmethod
    def get_grid(cls, family_name, spec):
        """
        Expands the regular grid for every parameter of ``spec`` marked ``TUNE``.

        Fixed parameters are merged into every grid point. A spec with nothing
        to tune yields a single point.

        Returns:
            list[dict]: grid points in deterministic order.
        """
        family_config = cls.HYPERPARAMETER_CONFIGS.get(family_name)
        if family_config is None:
            raise ValueError(f"No config for model family '{family_name}'")

        axes = {}
        for name in spec.tunable_params():
            param_config = family_config.get(name)
            if param_config is None:
                raise ValueError(f"'{name}' is not a hyperparameter of '{family_name}'")
            if "grid" in param_config:
                axes[name] = list(param_config["grid"])
            elif "choices" in param_config:
                axes[name] = list(param_config["choices"])
            else:
                raise ValueError(f"No grid values for '{name}' in '{family_name}'")

        fixed = {k: v for k, v in spec.params.items() if v is not TUNE}
        return [{**fixed, **point} for point in ParameterGrid(axes)]

    @staticmethod
    def _suggest_param(trial, param_name, param_config):
        """
        Helper method to generate optuna suggestion based on parameter configuration.

        Args:
            trial: Optuna trial object
            param_name (str): Name of the parameter
            param_config (dict): Configuration for the parameter

        Returns:
            Suggested parameter value
        """
        if "choices" in param_config:
            return trial.suggest_categorical(param_name, param_config["choices"])
        elif param_config.get("type") == "int":
            return trial.suggest_int(
                param_name, param_config["min"], param_config["max"]
            )
        elif param_config.get("type") == "float":
            log = param_config.get("log", False)
            return trial.suggest_float(
                param_name, param_config["min"], param_config["max"], log=log
            )
        else:
            raise ValueError(
                f"Invalid parameter configuration for {param_name}: {param_config}"
            )

    @classmethod
    def get_search_space(cls, trial, family_name, spec):
        """
        Suggests a value for every tunable parameter of ``spec``.

        Args:
            trial (optuna.trial.Trial): The Optuna trial object.
            family_name (str): The model family name.
            spec (ModelSpec): Configuration whose ``TUNE`` markers are filled.

        Returns:
            dict: Complete hyperparameters for the trial.
        """
        family_config = cls.HYPERPARAMETER_CONFIGS.get(family_name)
        if family_config is None:
            raise ValueError(f"No config for model family '{family_name}'")

        params = {k: v for k, v in spec.params.items() if v is not TUNE}
        for name in spec.tunable_params():
            params[name] = cls._suggest_param(trial, name, family_config[name])
        return params

    @classmethod
    def get_defaults(cls, family_name):
        """
        Get default hyperparameters for a given model family.

        Args:
            family_name (str): The model family name.

        Returns:
            dict: A dictionary of default hyperparameters.
        """
        family_config = cls.HYPERPARAMETER_CONFIGS.get(family_name)
        if family_config is None:
            raise ValueError(f"No config for model family '{family_name}'")

        params = {}
        for param, config in family_config.items():
            if "default" in config:
                params[param] = config["default"]
            else:
                raise ValueError(f"No default for '{param}' in '{family_name}'")
        return params

    @classmethod
    def family_for_label(cls, label):
        """Maps a model label (``lm``, ``knn``, ...) back to its family name."""
        for family_name, family in cls.MODEL_FAMILIES.items():
            if family["label"] == label:
                return family_name
        raise ValueError(f"No model family with label '{label}'")
