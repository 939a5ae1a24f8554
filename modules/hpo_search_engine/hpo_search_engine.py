import re
import json
import time
import logging
import datetime
import joblib
import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import Dict, Any, List, Mapping

from sklearn.model_selection import GridSearchCV, RandomizedSearchCV, StratifiedKFold

from modules.base.base_engine import BaseEngine
from modules.model_factory import ModelFactory
from modules.reporting_engine import TrialResult, fold_std
from modules.search_space import SearchSpace
from utils.exceptions import ConfigurationError
from utils.error_handling import handle_engine_errors
from utils.file_io import NumpyEncoder, save_dataframe, save_json
from utils import constants

# Per-fold score columns in scikit-learn's cv_results_, e.g. 'split3_test_score'
_FOLD_SCORE_KEY = re.compile(r'^split(\d+)_test_score$')


@dataclass
class SearchOutcome:
    """Everything one search strategy produced."""
    strategy: str
    trials: List[TrialResult]
    elapsed_seconds: float
    n_candidates: int
    best_params: Dict[str, Any]
    best_score: float
    best_estimator: Any = field(default=None, repr=False)

    @property
    def label(self) -> str:
        return constants.STRATEGY_LABELS.get(self.strategy, self.strategy)

    def timing_line(self) -> str:
        return (f"{self.label} took {self.elapsed_seconds:.2f} seconds for "
                f"{self.n_candidates} candidate parameter settings.")


def _to_native(value: Any) -> Any:
    """Unwrap NumPy scalars (e.g. values drawn by scipy samplers)."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def trials_from_cv_results(cv_results: Mapping[str, Any]) -> List[TrialResult]:
    """
    Convert scikit-learn's ``cv_results_`` into TrialResult records.

    Uses ``params``, ``mean_test_score`` and every ``split<i>_test_score``
    column, in fold order. Candidate order is preserved.
    """
    fold_keys = sorted(
        (key for key in cv_results if _FOLD_SCORE_KEY.match(key)),
        key=lambda key: int(_FOLD_SCORE_KEY.match(key).group(1))
    )
    if not fold_keys:
        raise ValueError("cv_results has no per-split test scores (expected 'split<i>_test_score').")

    trials = []
    for i, params in enumerate(cv_results['params']):
        trials.append(TrialResult(
            parameters={name: _to_native(value) for name, value in params.items()},
            mean_validation_score=cv_results['mean_test_score'][i],
            fold_scores=[cv_results[key][i] for key in fold_keys]
        ))
    return trials


def trials_to_frame(trials: List[TrialResult]) -> pd.DataFrame:
    """Tabulate trials with a score rank (1 = best) for persistence."""
    rows = []
    for trial in trials:
        row = {
            'mean_validation_score': trial.mean_validation_score,
            'std_validation_score': fold_std(trial.fold_scores),
            'params': json.dumps(dict(trial.parameters), sort_keys=True, cls=NumpyEncoder)
        }
        for i, score in enumerate(trial.fold_scores):
            row[f'fold_{i}_score'] = score
        rows.append(row)

    df = pd.DataFrame(rows)
    if not df.empty:
        df.insert(0, 'rank', df['mean_validation_score'].rank(ascending=False, method='min').astype(int))
    return df


class HPOSearchEngine(BaseEngine):
    """
    Runs randomized and exhaustive grid search through scikit-learn.

    Each strategy is fitted on the full (X, y) with stratified K-fold CV.
    Fitting errors are raised, not scored, so a broken space or estimator
    surfaces immediately.
    """

    def __init__(self, config: dict, logger: logging.Logger):
        super().__init__(config, logger)
        self.search_config = config.get('search', {})
        self.max_configs = config.get('resources', {}).get(
            'max_hpo_configs', constants.DEFAULT_MAX_HPO_CONFIGS
        )
        self.n_jobs = config.get('execution', {}).get('n_jobs', -1)

        master_seed = config.get('execution', {}).get('seed', constants.DEFAULT_SEED)
        seeds = config.get('_internal_seeds', {})
        self.search_seed = seeds.get('search', master_seed)
        self.cv_seed = seeds.get('cv', master_seed + 1000)
        self.model_seed = seeds.get('model', master_seed + 2000)

    def _get_engine_directory_name(self) -> str:
        return constants.HPO_SEARCH_DIR

    def execute(self, X, y, run_id: str) -> Dict[str, SearchOutcome]:
        """
        Run every enabled strategy (randomized first, then grid) and persist results.

        Returns:
            Dict mapping strategy name to its SearchOutcome, in execution order.
        """
        strategies = self.search_config.get('strategies', {})
        outcomes: Dict[str, SearchOutcome] = {}

        for strategy in constants.STRATEGIES:
            strategy_cfg = strategies.get(strategy)
            if not strategy_cfg or not strategy_cfg.get('enabled', True):
                self.logger.info(f"{constants.STRATEGY_LABELS[strategy]} disabled, skipping.")
                continue

            space = SearchSpace.from_config(strategy_cfg['space'])
            self.logger.info(f"Search space for {strategy}: {space.describe()}")

            if strategy == constants.STRATEGY_RANDOMIZED:
                outcome = self.run_randomized(X, y, space)
            else:
                outcome = self.run_grid(X, y, space)

            self.logger.info(outcome.timing_line())
            self.logger.info(f"Best {strategy} score: {outcome.best_score:.4f} with {outcome.best_params}")
            self._save_outcome(outcome, run_id)
            outcomes[strategy] = outcome

        if not outcomes:
            raise ConfigurationError("No search strategy is enabled.")

        return outcomes

    @handle_engine_errors("Randomized search")
    def run_randomized(self, X, y, space: SearchSpace) -> SearchOutcome:
        """Sample ``search.n_iter`` configurations from ``space``."""
        n_iter = self.search_config.get('n_iter', constants.DEFAULT_N_ITER)
        search = RandomizedSearchCV(
            self._build_estimator(),
            param_distributions=space.to_param_distributions(),
            n_iter=n_iter,
            random_state=self.search_seed,
            **self._search_kwargs()
        )
        return self._fit(constants.STRATEGY_RANDOMIZED, search, X, y)

    @handle_engine_errors("Grid search")
    def run_grid(self, X, y, space: SearchSpace) -> SearchOutcome:
        """Evaluate every combination in ``space``."""
        param_grid = space.to_param_grid()
        n_configs = space.size()
        if n_configs > self.max_configs:
            raise ConfigurationError(
                f"Grid has {n_configs} combinations, above the limit of {self.max_configs} "
                f"('resources.max_hpo_configs')."
            )
        search = GridSearchCV(self._build_estimator(), param_grid=param_grid, **self._search_kwargs())
        return self._fit(constants.STRATEGY_GRID, search, X, y)

    def _build_estimator(self):
        model_cfg = self.config.get('model', {})
        params = dict(model_cfg.get('params', {}))
        params.setdefault('random_state', self.model_seed)
        return ModelFactory.create(model_cfg.get('name', constants.DEFAULT_MODEL), params)

    def _search_kwargs(self) -> Dict[str, Any]:
        n_splits = self.search_config.get('cv_folds', constants.DEFAULT_CV_FOLDS)
        return {
            'cv': StratifiedKFold(n_splits=n_splits, shuffle=True, random_state=self.cv_seed),
            'scoring': self.search_config.get('scoring'),
            'n_jobs': self.n_jobs,
            'error_score': 'raise'
        }

    def _fit(self, strategy: str, search, X, y) -> SearchOutcome:
        label = constants.STRATEGY_LABELS[strategy]
        self.logger.info(f"Starting {label}...")

        start = time.time()
        search.fit(X, y)
        elapsed = time.time() - start

        trials = trials_from_cv_results(search.cv_results_)
        return SearchOutcome(
            strategy=strategy,
            trials=trials,
            elapsed_seconds=elapsed,
            n_candidates=len(trials),
            best_params={k: _to_native(v) for k, v in search.best_params_.items()},
            best_score=float(search.best_score_),
            best_estimator=getattr(search, 'best_estimator_', None)
        )

    def _save_outcome(self, outcome: SearchOutcome, run_id: str) -> None:
        """Write the trial table, the best configuration and optionally the fitted estimator."""
        trials_path = save_dataframe(
            trials_to_frame(outcome.trials),
            self.output_dir / f"{outcome.strategy}_trials.csv"
        )

        save_json({
            'run_id': run_id,
            'strategy': outcome.strategy,
            'best_params': outcome.best_params,
            'best_score': outcome.best_score,
            'n_candidates': outcome.n_candidates,
            'elapsed_seconds': outcome.elapsed_seconds,
            'timestamp': datetime.datetime.now().isoformat()
        }, self.output_dir / f"{outcome.strategy}_best.json")

        if self.config.get('outputs', {}).get('save_best_estimator', False) and outcome.best_estimator is not None:
            model_path = self.output_dir / f"{outcome.strategy}_best_estimator.pkl"
            joblib.dump(outcome.best_estimator, model_path)
            self.logger.info(f"Saved best estimator to {model_path}")

        self.logger.info(f"Saved {len(outcome.trials)} {outcome.strategy} trials to {trials_path}")
