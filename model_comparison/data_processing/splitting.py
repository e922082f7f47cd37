"""Train/test splitting and k-fold resampling."""

from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold, StratifiedKFold, train_test_split


@dataclass
class Split:
    """Disjoint training and evaluation subsets of one dataset."""

    train: pd.DataFrame
    test: pd.DataFrame

    def validate(self, original: pd.DataFrame) -> None:
        """Checks that the two subsets partition ``original``'s rows."""
        train_idx, test_idx = set(self.train.index), set(self.test.index)
        if train_idx & test_idx:
            raise ValueError("Training and test subsets overlap")
        if train_idx | test_idx != set(original.index):
            raise ValueError("Training and test subsets do not cover the dataset")


@dataclass
class Fold:
    """Positional row indices of one (training, validation) pair."""

    train_idx: np.ndarray
    val_idx: np.ndarray


@dataclass
class FoldSet:
    """An ordered collection of folds drawn from one dataset."""

    folds: list[Fold] = field(default_factory=list)
    n_rows: int = 0
    stratified: bool = False

    def __len__(self):
        return len(self.folds)

    def __iter__(self):
        return iter(self.folds)

    def validate(self) -> None:
        """Every row is validated exactly once and never trains its own fold."""
        counts = np.zeros(self.n_rows, dtype=int)
        for i, fold in enumerate(self.folds):
            if np.intersect1d(fold.train_idx, fold.val_idx).size:
                raise ValueError(f"Fold {i}: training and validation rows overlap")
            counts[fold.val_idx] += 1
        if not np.all(counts == 1):
            raise ValueError("Every row must appear in exactly one validation fold")


def make_strata(values: pd.Series, bins: int = 4) -> pd.Series:
    """
    Builds stratification labels from a column.

    Numeric columns are cut into ``bins`` quantile groups; anything else is
    used as-is.
    """
    if pd.api.types.is_numeric_dtype(values) and not pd.api.types.is_bool_dtype(values):
        if bins < 2:
            raise ValueError("At least two bins are needed to stratify a numeric column")
        # Missing values form their own stratum
        return pd.qcut(values, q=bins, labels=False, duplicates="drop").fillna(-1)
    return values.astype(str)


def _strata_for(df, strata, bins):
    if strata is None:
        return None
    if strata not in df.columns:
        raise ValueError(f"Strata column '{strata}' not found")
    return make_strata(df[strata], bins=bins)


def initial_split(
    df: pd.DataFrame,
    prop: float = 0.75,
    strata: str | None = None,
    bins: int = 4,
    random_state: int = 42,
) -> Split:
    """
    Splits ``df`` into training and test subsets.

    Args:
        df: The dataset
        prop: Fraction of rows assigned to training
        strata: Optional column to stratify on
        bins: Quantile bins used when ``strata`` is numeric
        random_state: Seed for the shuffle

    Returns:
        Split: the training and test rows, original index preserved.
    """
    if not 0 < prop < 1:
        raise ValueError(f"prop must be strictly between 0 and 1, got {prop}")
    if len(df) < 2:
        raise ValueError("Need at least two rows to split a dataset")

    labels = _strata_for(df, strata, bins)
    if labels is not None and labels.value_counts().min() < 2:
        print(f"Warning: Too few rows per stratum of '{strata}'. Falling back to an unstratified split.")
        labels = None

    train, test = train_test_split(
        df, train_size=prop, stratify=labels, random_state=random_state, shuffle=True
    )
    return Split(train=train, test=test)


def make_folds(
    df: pd.DataFrame,
    v: int = 10,
    strata: str | None = None,
    bins: int = 4,
    random_state: int = 42,
) -> FoldSet:
    """
    Partitions ``df`` into ``v`` cross-validation folds.

    Returns:
        FoldSet: folds holding positional indices into ``df``.
    """
    if v < 2:
        raise ValueError(f"Need at least two folds, got {v}")
    if v > len(df):
        raise ValueError(f"Cannot build {v} folds from {len(df)} rows")

    labels = _strata_for(df, strata, bins)
    if labels is not None and labels.value_counts().min() < v:
        print(f"Warning: Some strata of '{strata}' have fewer than {v} rows. Using unstratified folds.")
        labels = None

    if labels is not None:
        splitter = StratifiedKFold(n_splits=v, shuffle=True, random_state=random_state)
        splits = splitter.split(np.zeros(len(df)), labels)
    else:
        splitter = KFold(n_splits=v, shuffle=True, random_state=random_state)
        splits = splitter.split(np.zeros(len(df)))

    folds = [Fold(train_idx=tr, val_idx=va) for tr, va in splits]
    return FoldSet(folds=folds, n_rows=len(df), stratified=labels is not None)
