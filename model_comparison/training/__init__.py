"""Training and evaluation utilities for the model comparison project.

The :mod:`training` package contains modules that handle resampled fitting,
hyper-parameter search and final model evaluation.  It provides:

``tuning``
    Grid tuning and resampled fitting, fanned out as independent
    (configuration x fold) tasks.

``hyperparameter``
    An Optuna-based search over the hyper-parameter ranges.

``trainer``
    The high-level orchestration logic that ties splitting, tuning,
    selection and reporting together.
"""

from .hyperparameter import OptunaOptimizer
from .trainer import FinalEvaluation, RunSummary, Trainer
from .tuning import fit_resamples, last_fit, tune_grid

__all__ = [
    "OptunaOptimizer",
    "Trainer",
    "RunSummary",
    "FinalEvaluation",
    "tune_grid",
    "fit_resamples",
    "last_fit",
]
