"""Base model interface for all prediction models."""

from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np
import pandas as pd


class BasePredictor(ABC):
    """
    Base interface for all regression models in the model comparison project.

    Predictors receive features that have already been through the recipe, so
    they only need to wrap the underlying estimator. Every model family goes
    through this contract when fitted on a resample or on the full training set.
    """

    @abstractmethod
    def fit(self, X: pd.DataFrame, y: pd.Series, **fit_params) -> "BasePredictor":
        """
        Fit the model to training data.

        Args:
            X: Preprocessed feature matrix
            y: Transformed target values
            **fit_params: Additional fitting parameters

        Returns:
            Self for method chaining
        """

    @abstractmethod
    def predict(self, X: pd.DataFrame) -> np.ndarray:
        """
        Make predictions on new data.

        Args:
            X: Preprocessed feature matrix

        Returns:
            Predicted values on the transformed target scale
        """

    def get_params(self) -> Dict[str, Any]:
        """
        Get model parameters.

        Returns:
            Dictionary of model parameters
        """
        return {}

    def _check_fitted(self):
        if not getattr(self, "is_fitted_", False):
            raise ValueError("Model must be fitted before making predictions")
