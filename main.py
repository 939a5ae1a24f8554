#!/usr/bin/env python
"""
Search Comparison - Main Entry Point
Compares randomized and exhaustive grid search for tuning a classifier
and prints the top-ranked configurations found by each.
"""
import os
import sys
import logging
import argparse
import traceback
import random
from pathlib import Path

import numpy as np

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from modules.config_manager import ConfigurationManager
from modules.logging_config import LoggingConfigurator
from modules.data_manager import DataManager
from modules.hpo_search_engine import HPOSearchEngine
from modules.reporting_engine import report
from utils.exceptions import SearchComparisonException, ConfigurationError
from utils import constants


def parse_arguments(argv=None):
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Randomized vs. Grid Search - hyperparameter tuning comparison",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config/config.json",
        help="Path to the configuration JSON file"
    )

    parser.add_argument(
        "--schema",
        type=str,
        default="config/schema.json",
        help="Path to the configuration JSON schema"
    )

    parser.add_argument(
        "--run-id",
        type=str,
        default=None,
        help="Optional run identifier (defaults to timestamp if not provided)"
    )

    parser.add_argument(
        "--top-n",
        type=int,
        default=None,
        help="Number of ranked configurations to print per search (overrides reporting.top_n)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and setup without running the searches"
    )

    return parser.parse_args(argv)


def setup_global_determinism(config: dict, logger: logging.Logger):
    """
    Seed Python and NumPy global generators.

    scikit-learn components receive explicit seeds from ``_internal_seeds``.
    """
    seed = config.get('execution', {}).get('seed', constants.DEFAULT_SEED)
    logger.info(f"Setting Global Deterministic Seed: {seed}")

    random.seed(seed)
    np.random.seed(seed)
    os.environ['PYTHONHASHSEED'] = str(seed)


def setup_run_directory(config: dict, run_id: str, logger: logging.Logger) -> Path:
    """
    Create ``<base_results_dir>/<run_id>`` and point the config at it.

    Returns:
        Path: The run directory.
    """
    base_results_dir = config.get('outputs', {}).get('base_results_dir', 'results')
    run_dir = Path(base_results_dir, run_id).absolute()
    run_dir.mkdir(parents=True, exist_ok=True)
    config.setdefault('outputs', {})['base_results_dir'] = str(run_dir)
    logger.info(f"Created run directory: {run_dir}")
    return run_dir


def main(argv=None):
    """
    Orchestrates configuration, data loading, both searches and reporting.

    Returns:
        int: Exit code (0 for success, 1 for errors)
    """
    logger = None

    try:
        args = parse_arguments(argv)

        print("\n" + "=" * 80)
        print("    RANDOMIZED VS. GRID SEARCH COMPARISON")
        print("=" * 80 + "\n")

        # ---------------------------------------------------------------
        # PHASE 0: INITIALIZATION & VALIDATION
        # ---------------------------------------------------------------
        config_manager = ConfigurationManager(config_path=args.config, schema_path=args.schema)
        config = config_manager.load_and_validate()

        if args.verbose:
            config.setdefault('logging', {})['level'] = 'DEBUG'
        if args.top_n is not None:
            if args.top_n < 1:
                raise ConfigurationError(f"--top-n must be >= 1, got {args.top_n}.")
            config.setdefault('reporting', {})['top_n'] = args.top_n

        logging_configurator = LoggingConfigurator(config)
        logging_configurator.setup()
        logger = logging_configurator.get_logger('pipeline')

        logger.info(f"Configuration loaded from: {args.config}")

        config_manager.run_id = args.run_id
        run_id = config_manager.generate_run_id()
        run_dir = setup_run_directory(config, run_id, logger)
        config_manager.save_artifacts(str(run_dir))

        setup_global_determinism(config, logger)
        logger.info(f"Run ID: {run_id}")

        if args.dry_run:
            logger.info("Dry run mode: validation complete. Exiting without running searches.")
            print("\n[SUCCESS] Configuration validated successfully.")
            return 0

        # ---------------------------------------------------------------
        # PHASE 1: DATA
        # ---------------------------------------------------------------
        X, y = DataManager(config, logger).execute()

        # ---------------------------------------------------------------
        # PHASE 2: SEARCHES
        # ---------------------------------------------------------------
        outcomes = HPOSearchEngine(config, logger).execute(X, y, run_id)

        # ---------------------------------------------------------------
        # PHASE 3: REPORT
        # ---------------------------------------------------------------
        top_n = config.get('reporting', {}).get('top_n', constants.DEFAULT_TOP_N)
        for outcome in outcomes.values():
            print(outcome.timing_line())
            report(outcome.trials, top_n=top_n)

        logger.info(f"Results saved to: {run_dir}")
        return 0

    except SearchComparisonException as e:
        msg = f"Pipeline Error: {str(e)}"
        print(f"\n[ERROR] {msg}")
        if logger:
            logger.error(msg)
        return 1

    except KeyboardInterrupt:
        print("\n[INTERRUPTED] Search interrupted by user.")
        if logger:
            logger.warning("Search interrupted by user (Ctrl+C)")
        return 130

    except Exception as e:
        msg = f"Unexpected Error: {str(e)}"
        print(f"\n[CRITICAL] {msg}")
        if logger:
            logger.critical(msg, exc_info=True)
        else:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
