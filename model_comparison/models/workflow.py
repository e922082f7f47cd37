"""Deployable workflow: a fitted recipe bundled with a fitted predictor."""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import joblib
import numpy as np
import pandas as pd

from ..preprocessing import Recipe
from .base import BasePredictor
from .spec import ModelSpec, build_predictor


class Workflow(BasePredictor):
    """
    Couples a preprocessing recipe with a model configuration.

    ``fit`` takes raw rows (target column included or passed separately),
    fits the recipe on them, transforms features and target, and fits the
    predictor. ``predict`` takes raw rows and returns predictions on the
    transformed (log) target scale, or on the original scale on request.
    """

    def __init__(
        self,
        spec: ModelSpec,
        recipe: Recipe,
        random_state: int = 42,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the workflow.

        Args:
            spec: Final model configuration (no parameters left to tune)
            recipe: Unfitted recipe, fitted as part of ``fit``
            random_state: Random state handed to the predictor
            metadata: Additional information kept alongside the model
        """
        self.spec = spec
        self.recipe = recipe
        self.random_state = random_state
        self.metadata = metadata or {}
        self.model = build_predictor(spec, random_state=random_state)
        self.is_fitted_ = False

    def fit(self, X: pd.DataFrame, y: Optional[pd.Series] = None, **fit_params) -> "Workflow":
        """
        Fit the recipe and the predictor on raw training rows.

        Args:
            X: Raw training rows
            y: Raw target values; taken from ``X[recipe.target]`` when omitted
            **fit_params: Additional fitting parameters for the predictor

        Returns:
            Self for method chaining
        """
        if y is None:
            y = X[self.recipe.target]
        self.recipe.fit(X)
        X_processed = self.recipe.transform(X)
        y_processed = self.recipe.transform_target(y)
        self.model.fit(X_processed, y_processed, **fit_params)
        self.is_fitted_ = True
        return self

    def predict(self, X: pd.DataFrame, original_scale: bool = False) -> np.ndarray:
        """
        Predict for raw rows.

        Args:
            X: Raw (unprocessed) input dataframe
            original_scale: Undo the target log transform on the predictions

        Returns:
            np.ndarray: Predicted values
        """
        self._check_fitted()
        preds = self.model.predict(self.recipe.transform(X))
        if original_scale:
            return self.recipe.inverse_transform_target(preds)
        return preds

    def get_model_info(self) -> Dict[str, Any]:
        """
        Get information about the wrapped model.

        Returns:
            Dictionary containing model metadata
        """
        info = {
            "model": self.spec.label,
            "kind": self.spec.kind.value,
            "params": dict(self.spec.params),
            **self.metadata,
        }
        if getattr(self.recipe, "is_fitted_", False):
            info["num_features"] = len(self.recipe.encoded_feature_names_)
            info["features"] = list(self.recipe.encoded_feature_names_)
        return info

    def save(self, filepath: Union[str, Path]) -> None:
        """
        Save the workflow to disk.

        Args:
            filepath: Path to save the model
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self, filepath)

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> "Workflow":
        """
        Load a workflow from disk.

        Args:
            filepath: Path to the saved model

        Returns:
            Loaded Workflow instance
        """
        return load_model(filepath)


def load_model(filepath: Union[str, Path]) -> Workflow:
    """
    Load a Workflow from disk.

    Args:
        filepath: Path to the workflow file

    Returns:
        Workflow instance

    Raises:
        ValueError: If the file doesn't contain a Workflow
    """
    model = joblib.load(Path(filepath))
    if not isinstance(model, Workflow):
        raise ValueError(f"File contains {type(model)}, expected Workflow")
    return model
