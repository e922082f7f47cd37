"""Functions for turning tuning results into tables and CSV reports."""

from pathlib import Path

import pandas as pd

from model_comparison.results import MetricRecord, TuningResults


def tuning_results_frame(all_results: list[TuningResults]) -> pd.DataFrame:
    """Every metric record of every family, one row each."""
    frames = []
    for results in all_results:
        df = results.to_frame()
        if df.empty:
            continue
        df.insert(0, "family", results.family)
        frames.append(df)
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def comparison_frame(
    ranking: list[tuple[str, float]],
    best_records: dict[str, MetricRecord],
) -> pd.DataFrame:
    """
    Builds the human-facing comparison table.

    Args:
        ranking: Output of ``compare_models``, ascending by mean.
        best_records: Best record per family name.

    Returns:
        DataFrame in ranking order with the model label, family, metric,
        aggregated value and the winning hyperparameters of each family.
    """
    by_label = {record.model: (family, record) for family, record in best_records.items()}
    rows = []
    for rank, (label, mean) in enumerate(ranking, start=1):
        family, record = by_label[label]
        rows.append({
            "rank": rank,
            "family": family,
            **record.as_row(),
        })
    return pd.DataFrame(rows)


def format_comparison(df: pd.DataFrame) -> str:
    """Renders the comparison table for the console."""
    if df.empty:
        return "(no models compared)"
    columns = ["rank", "model", "metric", "mean", "std_err", "n"]
    return df[columns].to_string(index=False, float_format=lambda v: f"{v:.4f}")


def save_table(df: pd.DataFrame, path: Path) -> None:
    """Writes ``df`` to ``path``, overwriting any previous run."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    print(f"Saved {len(df)} rows to {path}")
