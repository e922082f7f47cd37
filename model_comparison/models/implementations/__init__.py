"""Concrete model implementations for the model comparison project.

Every family delegates the learning algorithm itself to scikit-learn; the
wrappers only adapt it to the :class:`~model_comparison.models.base.BasePredictor`
contract.
"""

from .sklearn_models import DecisionTreeRegressor, KNNRegressor, LinearRegressor

__all__ = [
    "LinearRegressor",
    "KNNRegressor",
    "DecisionTreeRegressor",
]
