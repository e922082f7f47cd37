# main.py

"""Command-line interface for the model comparison pipeline."""

import argparse
import os
import sys
import warnings
from model_comparison.config import Config
from model_comparison.metrics import ERROR_METRICS
from model_comparison.training.trainer import Trainer

for var in ["OMP_NUM_THREADS", "OPENBLAS_NUM_THREADS", "MKL_NUM_THREADS", "NUMEXPR_NUM_THREADS", "VECLIB_MAXIMUM_THREADS"]:
    os.environ.setdefault(var, "1")

warnings.filterwarnings('ignore', category=FutureWarning)


def build_config(args, base_config=Config):
    """Returns a subclass of ``base_config`` carrying the command-line overrides."""
    overrides = {}
    if args.target:
        overrides["TARGET_COLUMN"] = args.target
    if args.metric:
        overrides["SELECTION_METRIC"] = args.metric
    if args.cv_folds:
        overrides["CV_SPLITS"] = args.cv_folds
    if args.workers:
        overrides["NUM_PARALLEL_WORKERS"] = args.workers
    if args.no_stratify:
        overrides["STRATIFY"] = False
    return type("RunConfig", (base_config,), overrides)


def main(args, base_config=Config):
    """
    Main function to orchestrate the pipeline.

    Handles command-line arguments to run the search, default resampling, or
    the final evaluation from a previous comparison file.

    Returns:
        int: process exit code.
    """
    config = build_config(args, base_config)

    trainer = Trainer(
        config,
        model_families=args.model_families,
        search_strategy=args.search_strategy,
        save_models=args.save_model,
        use_defaults=args.train_default,
        data_path=args.data,
    )

    if args.run_search or args.train_default:
        summary = trainer.run_optimization_and_evaluation()
    else:
        summary = trainer.run_evaluation_from_files()

    if summary is None:
        return 1

    print(f"\nBest model: {summary.final.family} "
          f"({config.SELECTION_METRIC} CV = {summary.final.record.mean:.4f})")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Compare linear, k-NN and decision-tree regression on one dataset. Handles tuning, model comparison and final evaluation.",
        formatter_class=argparse.RawTextHelpFormatter
    )

    # Group for mutually exclusive actions. One of these is required.
    action_group = parser.add_mutually_exclusive_group(required=True)
    action_group.add_argument(
        "--run-search",
        action="store_true",
        help="Tune every model family, compare them and evaluate the winner on the test set."
    )
    action_group.add_argument(
        "--train-default",
        dest="train_default",
        action="store_true",
        help="Resample every model family with default hyperparameters instead of tuning."
    )
    action_group.add_argument(
        "--evaluate-only",
        action="store_true",
        help="Evaluate the winner recorded in the existing comparison CSV, skipping the search."
    )

    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="Path to the dataset CSV. Defaults to Config.RAW_DATA_PATH."
    )
    parser.add_argument(
        "--target",
        type=str,
        default=None,
        help="Name of the target column. Defaults to Config.TARGET_COLUMN."
    )
    parser.add_argument(
        "--model-families",
        type=str,
        nargs="*",
        help="Specify which model families to run.\nBy default, all model families are run. Available options: " +
             ", ".join(Config.MODEL_FAMILIES.keys())
    )
    parser.add_argument(
        "--search-strategy",
        type=str,
        choices=["grid", "optuna"],
        default="grid",
        help="'grid' evaluates the regular hyperparameter grid,\n'optuna' runs a TPE search over the parameter ranges."
    )
    parser.add_argument(
        "--metric",
        type=str,
        choices=list(ERROR_METRICS),
        default=None,
        help="Metric used to pick the best configuration. Defaults to rmse."
    )
    parser.add_argument(
        "--cv-folds",
        type=int,
        default=None,
        help="Number of cross-validation folds. Defaults to Config.CV_SPLITS."
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of parallel worker processes. 1 runs everything in-process."
    )
    parser.add_argument(
        "--no-stratify",
        action="store_true",
        help="Split and fold the data without stratifying on the target."
    )
    parser.add_argument(
        "--save-model",
        action="store_true",
        help="If set, saves the final fitted workflow as a .pkl file in Config.MODELS_DIR."
    )

    args = parser.parse_args()

    sys.exit(main(args))
