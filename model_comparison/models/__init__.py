"""Model implementations for the model comparison project.

This package contains the predictor wrappers, the model configuration types
used to describe what to fit, and the deployable workflow that bundles a
fitted recipe with a fitted predictor. All models implement the
BasePredictor interface.
"""

from .base import BasePredictor
from .implementations import DecisionTreeRegressor, KNNRegressor, LinearRegressor
from .spec import PREDICTORS, TUNE, ModelKind, ModelSpec, build_predictor
from .workflow import Workflow, load_model

__all__ = [
    "BasePredictor",
    "LinearRegressor",
    "KNNRegressor",
    "DecisionTreeRegressor",
    "ModelKind",
    "ModelSpec",
    "TUNE",
    "PREDICTORS",
    "build_predictor",
    "Workflow",
    "load_model",
]
