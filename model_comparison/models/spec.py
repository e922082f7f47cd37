"""Model configurations: which family to fit and with which hyperparameters."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from .base import BasePredictor
from .implementations import DecisionTreeRegressor, KNNRegressor, LinearRegressor


class ModelKind(Enum):
    LINEAR = "linear"
    KNN = "knn"
    TREE = "tree"


class _Tune:
    """Marker for a hyperparameter that is left open for tuning."""

    def __repr__(self):
        return "tune()"

    def __reduce__(self):
        # Keeps the marker a singleton across pickling
        return "TUNE"


TUNE = _Tune()

PREDICTORS = {
    ModelKind.LINEAR: LinearRegressor,
    ModelKind.KNN: KNNRegressor,
    ModelKind.TREE: DecisionTreeRegressor,
}


@dataclass
class ModelSpec:
    """
    A model kind plus its hyperparameters.

    Each hyperparameter value is either fixed or the ``TUNE`` marker. A spec
    without any ``TUNE`` value is final and can be turned into a predictor.
    """

    kind: ModelKind
    params: Dict[str, Any] = field(default_factory=dict)
    label: str = ""

    def __post_init__(self):
        if not self.label:
            self.label = self.kind.value

    def tunable_params(self) -> list[str]:
        """Names of the parameters still marked for tuning, in declaration order."""
        return [name for name, value in self.params.items() if value is TUNE]

    @property
    def is_tuned(self) -> bool:
        return bool(self.tunable_params())

    def finalize(self, values: Dict[str, Any]) -> "ModelSpec":
        """
        Returns a copy of the spec with tuned parameters bound to ``values``.

        Raises:
            ValueError: If a ``TUNE`` parameter has no value, or ``values``
                names a parameter the spec does not have.
        """
        unknown = set(values) - set(self.params)
        if unknown:
            raise ValueError(
                f"Unknown hyperparameters for '{self.label}': {sorted(unknown)}"
            )
        params = {**self.params, **values}
        missing = [name for name, value in params.items() if value is TUNE]
        if missing:
            raise ValueError(f"No value given for tuned parameters {missing}")
        return ModelSpec(kind=self.kind, params=params, label=self.label)


def build_predictor(spec: ModelSpec, random_state: int = 42) -> BasePredictor:
    """Instantiates the predictor class registered for ``spec.kind``."""
    if spec.is_tuned:
        raise ValueError(
            f"Model '{spec.label}' still has parameters marked for tuning: "
            f"{spec.tunable_params()}"
        )
    predictor_class = PREDICTORS[spec.kind]
    return predictor_class(**spec.params, random_state=random_state)
