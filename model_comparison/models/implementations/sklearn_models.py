"""Sklearn model wrappers implementing BasePredictor interface."""

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression as SKLinearRegression
from sklearn.neighbors import KNeighborsRegressor as SKKNeighborsRegressor
from sklearn.tree import DecisionTreeRegressor as SKDecisionTreeRegressor

from ..base import BasePredictor


class LinearRegressor(BasePredictor):
    """Ordinary least squares regression wrapper."""

    def __init__(self, random_state: int = 42, **kwargs):
        """
        Initialize the linear regression model.

        Args:
            random_state: Accepted for a uniform constructor, unused by OLS
            **kwargs: Additional LinearRegression parameters
        """
        self.random_state = random_state
        self.model = SKLinearRegression(**kwargs)
        self.is_fitted_ = False

    def fit(self, X: pd.DataFrame, y: pd.Series, **fit_params) -> "LinearRegressor":
        """Fit the linear model."""
        self.model.fit(X, y, **fit_params)
        self.is_fitted_ = True
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        self._check_fitted()
        return self.model.predict(X)

    def get_params(self) -> Dict[str, Any]:
        """Get model parameters."""
        return {}


class KNNRegressor(BasePredictor):
    """K-nearest-neighbours regression wrapper."""

    def __init__(
        self,
        n_neighbors: int = 5,
        weights: str = "uniform",
        random_state: int = 42,
        **kwargs
    ):
        """
        Initialize the k-NN regressor.

        Args:
            n_neighbors: Number of neighbours averaged for a prediction
            weights: 'uniform' or 'distance' weighting of the neighbours
            random_state: Accepted for a uniform constructor, k-NN is deterministic
            **kwargs: Additional KNeighborsRegressor parameters
        """
        self.n_neighbors = int(n_neighbors)
        self.weights = weights
        self.random_state = random_state

        knn_params = {
            "n_neighbors": self.n_neighbors,
            "weights": weights,
            "n_jobs": 1,
        }
        knn_params.update(kwargs)

        self.model = SKKNeighborsRegressor(**knn_params)
        self.is_fitted_ = False

    def fit(self, X: pd.DataFrame, y: pd.Series, **fit_params) -> "KNNRegressor":
        """Fit the k-NN regressor."""
        self.model.fit(X, y, **fit_params)
        self.is_fitted_ = True
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        self._check_fitted()
        return self.model.predict(X)

    def get_params(self) -> Dict[str, Any]:
        return {"n_neighbors": self.n_neighbors, "weights": self.weights}


class DecisionTreeRegressor(BasePredictor):
    """CART regression tree wrapper."""

    def __init__(
        self,
        max_depth: Optional[int] = None,
        ccp_alpha: float = 0.0,
        min_samples_split: int = 2,
        random_state: int = 42,
        **kwargs
    ):
        """
        Initialize the decision tree regressor.

        Args:
            max_depth: Maximum depth of the tree
            ccp_alpha: Cost-complexity pruning parameter
            min_samples_split: Minimum number of rows required to split a node
            random_state: Random state for reproducibility
            **kwargs: Additional DecisionTreeRegressor parameters
        """
        self.max_depth = None if max_depth is None else int(max_depth)
        self.ccp_alpha = float(ccp_alpha)
        self.min_samples_split = int(min_samples_split)
        self.random_state = random_state

        tree_params = {
            "max_depth": self.max_depth,
            "ccp_alpha": self.ccp_alpha,
            "min_samples_split": self.min_samples_split,
            "random_state": random_state,
        }
        tree_params.update(kwargs)

        self.model = SKDecisionTreeRegressor(**tree_params)
        self.is_fitted_ = False

    def fit(self, X: pd.DataFrame, y: pd.Series, **fit_params) -> "DecisionTreeRegressor":
        """Fit the regression tree."""
        self.model.fit(X, y, **fit_params)
        self.is_fitted_ = True
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        self._check_fitted()
        return self.model.predict(X)

    def get_params(self) -> Dict[str, Any]:
        """Get model parameters."""
        return {
            "max_depth": self.max_depth,
            "ccp_alpha": self.ccp_alpha,
            "min_samples_split": self.min_samples_split,
        }
