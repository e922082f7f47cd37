"""Preprocessing recipe applied identically to every row subset."""

from typing import List, Optional

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

MISSING_LEVEL = "_missing_"


class Recipe(BaseEstimator, TransformerMixin):
    """
    Declarative preprocessing for a regression dataset.

    The recipe performs, in order:
    - log transform of the target (through ``transform_target``)
    - normalization of numeric predictors (``StandardScaler``, missing values
      imputed with the training mean first)
    - one-hot encoding of categorical predictors (``OneHotEncoder``)

    Statistics are learned in ``fit`` on one row subset only and then applied
    unchanged by ``transform`` to any other subset, so resamples never see
    information from their evaluation rows. Because it is a scikit-learn
    estimator it can be ``clone``d into an unfitted copy for each resample.
    """

    def __init__(
        self,
        target: str,
        numeric_features: Optional[List[str]] = None,
        categorical_features: Optional[List[str]] = None,
        log_base: float = 10,
        drop_first: bool = True,
    ):
        """
        Initialize the recipe.

        Args:
            target: Name of the outcome column; never used as a predictor
            numeric_features: Columns to normalize. Inferred from dtypes if None
            categorical_features: Columns to one-hot encode. Inferred if None
            log_base: Base of the target log transform
            drop_first: Drop the first level of each categorical (reference coding)
        """
        self.target = target
        self.numeric_features = numeric_features
        self.categorical_features = categorical_features
        self.log_base = log_base
        self.drop_first = drop_first

    def fit(self, X: pd.DataFrame, y: Optional[pd.Series] = None):
        """
        Learn normalization statistics and category levels from ``X``.

        Args:
            X: Training rows; may still contain the target column
            y: Unused, for sklearn compatibility

        Returns:
            self

        Raises:
            ValueError: If roles overlap, a column is missing, or two encoded
                columns end up with the same name.
        """
        predictors = X.drop(columns=[self.target], errors="ignore")
        numeric, categorical = self._resolve_roles(predictors)

        self.numeric_features_ = numeric
        self.categorical_features_ = categorical

        numeric_steps = Pipeline([
            ("impute", SimpleImputer(strategy="mean")),
            ("scale", StandardScaler()),
        ])
        encoder = OneHotEncoder(
            drop="first" if self.drop_first else None,
            handle_unknown="ignore",
            sparse_output=False,
        )
        self.column_transformer_ = ColumnTransformer(
            [("num", numeric_steps, numeric), ("cat", encoder, categorical)],
            remainder="drop",
            verbose_feature_names_out=False,
        )
        self.column_transformer_.fit(self._predictor_frame(X))
        # Raises on colliding "<column>_<level>" names
        self.encoded_feature_names_ = list(self.column_transformer_.get_feature_names_out())
        self.is_fitted_ = True
        return self

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        """
        Apply the learned steps to ``X``.

        Args:
            X: Rows to transform; any target column is dropped

        Returns:
            Numeric DataFrame with the fitted column order
        """
        self._check_fitted()
        missing = [
            c for c in self.numeric_features_ + self.categorical_features_
            if c not in X.columns
        ]
        if missing:
            raise ValueError(f"Columns missing from input: {missing}")

        values = self.column_transformer_.transform(self._predictor_frame(X))
        return pd.DataFrame(values, columns=self.encoded_feature_names_, index=X.index)

    def transform_target(self, y) -> np.ndarray:
        """Log-transform the outcome."""
        values = np.asarray(y, dtype=float)
        if np.any(~np.isfinite(values)) or np.any(values <= 0):
            raise ValueError("Target must be finite and strictly positive for the log transform")
        return np.log(values) / np.log(self.log_base)

    def inverse_transform_target(self, y) -> np.ndarray:
        """Map values on the log scale back to the original target scale."""
        return np.power(float(self.log_base), np.asarray(y, dtype=float))

    def get_feature_names_out(self, input_features=None) -> List[str]:
        """Get output feature names for sklearn compatibility."""
        self._check_fitted()
        return list(self.encoded_feature_names_)

    def _predictor_frame(self, X: pd.DataFrame) -> pd.DataFrame:
        """Predictor columns in fitted order, categoricals as strings."""
        frame = X[self.numeric_features_ + self.categorical_features_].copy()
        for col in self.categorical_features_:
            frame[col] = frame[col].astype(str).where(frame[col].notna(), MISSING_LEVEL)
        return frame

    def _resolve_roles(self, predictors: pd.DataFrame):
        if self.numeric_features is not None:
            numeric = list(self.numeric_features)
        else:
            numeric = [
                c for c in predictors.columns
                if pd.api.types.is_numeric_dtype(predictors[c])
                and not pd.api.types.is_bool_dtype(predictors[c])
            ]
        if self.categorical_features is not None:
            categorical = list(self.categorical_features)
        else:
            categorical = [c for c in predictors.columns if c not in numeric]

        overlap = set(numeric) & set(categorical)
        if overlap:
            raise ValueError(f"Columns declared both numeric and categorical: {sorted(overlap)}")
        absent = [c for c in numeric + categorical if c not in predictors.columns]
        if absent:
            raise ValueError(f"Columns missing from training data: {absent}")
        return numeric, categorical

    def _check_fitted(self):
        if not getattr(self, "is_fitted_", False):
            raise ValueError("Recipe must be fitted before transform")
