"""Data loading and resampling utilities for the model comparison project.

The :mod:`data_processing` package supplies the dataset and partitions it:
:class:`~model_comparison.data_processing.loader.DataLoader` reads and cleans
the raw table, and :mod:`~model_comparison.data_processing.splitting` builds
the train/test split and the cross-validation fold set.
"""

from .loader import DataLoader
from .splitting import Fold, FoldSet, Split, initial_split, make_folds, make_strata

__all__ = [
    "DataLoader",
    "Split",
    "Fold",
    "FoldSet",
    "initial_split",
    "make_folds",
    "make_strata",
]
