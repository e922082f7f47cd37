"""Top-level package for the model comparison project.

This package fits several regression model families to one tabular dataset,
tunes their hyper-parameters with cross-validation and compares them. The
subpackages expose cohesive pieces of functionality:

``data_processing``
    Loading the dataset, the train/test split and the fold set.

``models``
    Predictor wrappers, model configurations and the deployable workflow.

``training``
    Grid tuning, Optuna search and the end-to-end orchestration.

The selection rules live in :mod:`model_comparison.selection` and the
preprocessing recipe in :mod:`model_comparison.preprocessing`.
"""

from .config import Config
from .data_processing import DataLoader
from .preprocessing import Recipe
from .results import MetricRecord
from .selection import InvalidInputError, compare_models, select_best, show_best
from .training import OptunaOptimizer, Trainer

__all__ = [
    "Config",
    "DataLoader",
    "Recipe",
    "MetricRecord",
    "InvalidInputError",
    "select_best",
    "show_best",
    "compare_models",
    "Trainer",
    "OptunaOptimizer",
]
