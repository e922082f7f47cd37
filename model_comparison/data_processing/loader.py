"""Dataset provider: reads the raw table and prepares the target column."""

from pathlib import Path

import pandas as pd


class DataLoader:
    """
    Loads the raw dataset and validates the target column.

    Rows whose target is missing or not strictly positive are dropped, since
    the recipe log-transforms the outcome.
    """

    def __init__(self, config):
        """
        Initializes the loader with the project configuration.

        Args:
            config (Config): The project's configuration object.
        """
        self.config = config

    def load(self, path: Path | str | None = None) -> pd.DataFrame:
        """
        Reads the dataset from ``path`` (defaults to ``Config.RAW_DATA_PATH``).

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the target column is absent or no usable rows remain.
        """
        path = Path(path) if path is not None else Path(self.config.RAW_DATA_PATH)
        print(f"Loading dataset from {path}...")
        df = pd.read_csv(path, sep=self.config.CSV_SEPARATOR)
        return self.prepare(df)

    def prepare(self, df: pd.DataFrame) -> pd.DataFrame:
        """Validates and cleans an in-memory dataset."""
        target = self.config.TARGET_COLUMN
        if target not in df.columns:
            raise ValueError(
                f"Target column '{target}' not found. Available columns: {list(df.columns)}"
            )

        df = df.copy()
        df[target] = pd.to_numeric(df[target], errors="coerce")
        invalid = df[target].isna() | (df[target] <= 0)
        if invalid.any():
            print(
                f"Warning: Found and removed {int(invalid.sum())} rows with a missing or non-positive target.")
            df = df.loc[~invalid]
        if df.empty:
            raise ValueError("Dataset has no rows with a usable target")

        df = df.reset_index(drop=True)
        print(f"Loaded {len(df)} rows and {df.shape[1] - 1} predictor columns.")
        return df
