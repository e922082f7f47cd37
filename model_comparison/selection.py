"""Choosing configurations from tuning results.

``select_best`` picks the lowest-error configuration from a set of metric
records and ``compare_models`` ranks one record per model family. Both are
pure functions over :class:`~model_comparison.results.MetricRecord`.
"""

import math
import numbers
from typing import Iterable, Sequence

from model_comparison.results import MetricRecord


class InvalidInputError(ValueError):
    """Raised when selection or comparison receives unusable records."""


def _records_for_metric(records: Iterable[MetricRecord], metric: str) -> list[MetricRecord]:
    records = list(records)
    if not records:
        raise InvalidInputError("No metric records to select from")

    matching = [r for r in records if r.metric == metric]
    if not matching:
        available = sorted({r.metric for r in records})
        raise InvalidInputError(
            f"No record reports metric '{metric}'. Available metrics: {available}"
        )

    for r in matching:
        if not isinstance(r.mean, numbers.Real) or not math.isfinite(r.mean):
            raise InvalidInputError(
                f"Record {r.model}/{r.config_id} has a non-finite {metric}: {r.mean!r}"
            )
    return matching


def select_best(records: Iterable[MetricRecord], metric: str = "rmse") -> MetricRecord:
    """
    Returns the record with the lowest mean for ``metric``.

    Ties go to the record that comes first in ``records``.

    Raises:
        InvalidInputError: If ``records`` is empty, no record reports
            ``metric``, or a matching record has a non-finite mean.
    """
    matching = _records_for_metric(records, metric)
    best = matching[0]
    for r in matching[1:]:
        if r.mean < best.mean:
            best = r
    return best


def show_best(records: Iterable[MetricRecord], metric: str = "rmse", n: int = 5) -> list[MetricRecord]:
    """The ``n`` lowest records for ``metric``, ties kept in input order."""
    if n < 1:
        raise InvalidInputError(f"n must be at least 1, got {n}")
    matching = _records_for_metric(records, metric)
    return sorted(matching, key=lambda r: r.mean)[:n]


def compare_models(records: Sequence[MetricRecord]) -> list[tuple[str, float]]:
    """
    Ranks one record per model family by mean, ascending.

    Records must share the metric name and the number of folds they were
    aggregated over, otherwise they are not comparable.

    Returns:
        list of ``(model label, mean)`` pairs.

    Raises:
        InvalidInputError: On empty input, mixed metric names or mismatched
            fold counts.
    """
    records = list(records)
    if not records:
        raise InvalidInputError("No metric records to compare")

    metrics = {r.metric for r in records}
    if len(metrics) > 1:
        raise InvalidInputError(f"Records use different metrics: {sorted(metrics)}")

    fold_counts = {r.n for r in records}
    if len(fold_counts) > 1:
        raise InvalidInputError(f"Records were aggregated over different fold counts: {sorted(fold_counts)}")

    for r in records:
        if not isinstance(r.mean, numbers.Real) or not math.isfinite(r.mean):
            raise InvalidInputError(f"Record {r.model} has a non-finite mean: {r.mean!r}")

    ranked = sorted(records, key=lambda r: r.mean)
    return [(r.model, r.mean) for r in ranked]
