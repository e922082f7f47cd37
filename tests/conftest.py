import os

import numpy as np
import pandas as pd
import pytest

from model_comparison.config import Config

# Keep BLAS single-threaded inside worker processes
for var in ["OMP_NUM_THREADS", "OPENBLAS_NUM_THREADS", "MKL_NUM_THREADS"]:
    os.environ.setdefault(var, "1")


NEIGHBORHOODS = ["North_Ames", "College_Creek", "Old_Town", "Edwards"]
BLDG_TYPES = ["OneFam", "TwnhsE", "Duplex"]


def make_housing_frame(n_rows: int = 200, seed: int = 42) -> pd.DataFrame:
    """Small synthetic housing table with numeric and categorical predictors."""
    rng = np.random.default_rng(seed)

    area = rng.uniform(600, 3000, size=n_rows)
    year = rng.integers(1900, 2010, size=n_rows)
    lot = rng.uniform(2000, 20000, size=n_rows)
    hood = rng.choice(NEIGHBORHOODS, size=n_rows)
    bldg = rng.choice(BLDG_TYPES, size=n_rows)

    hood_effect = pd.Series(hood).map(
        {"North_Ames": 0.0, "College_Creek": 0.15, "Old_Town": -0.2, "Edwards": -0.1}
    ).to_numpy()
    log_price = (
        10.8
        + 0.0005 * area
        + 0.004 * (year - 1950)
        + 0.00001 * lot
        + hood_effect
        + rng.normal(0, 0.08, size=n_rows)
    )

    return pd.DataFrame(
        {
            "Gr_Liv_Area": area,
            "Year_Built": year,
            "Lot_Area": lot,
            "Neighborhood": hood,
            "Bldg_Type": bldg,
            "Sale_Price": np.round(np.exp(log_price), 0),
        }
    )


@pytest.fixture(scope="session")
def seed():
    return 42


@pytest.fixture
def housing_df(seed):
    return make_housing_frame(n_rows=200, seed=seed)


@pytest.fixture
def test_config(tmp_path):
    """Config pointing every output at a temporary directory, sized for speed."""
    output = tmp_path / "experiments"

    class TestConfig(Config):
        OUTPUT_DIR = output
        MODELS_DIR = tmp_path / "trained_models"
        RAW_DATA_PATH = tmp_path / "housing.csv"
        OPTUNA_DB_DIR = output / "optuna_db"
        TUNING_RESULTS_CSV_PATH = output / "tuning_results.csv"
        COMPARISON_CSV_PATH = output / "model_comparison.csv"
        FINAL_RESULTS_CSV_PATH = output / "final_evaluation.csv"

        CV_SPLITS = 3
        NUM_PARALLEL_WORKERS = 1
        N_TRIALS_PER_FAMILY = 3

    return TestConfig
