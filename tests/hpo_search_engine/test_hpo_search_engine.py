import json
import logging
import numpy as np
import pandas as pd
import pytest
from unittest.mock import MagicMock
from sklearn.datasets import load_iris
from sklearn.ensemble import RandomForestClassifier

from modules.hpo_search_engine import HPOSearchEngine, SearchOutcome, trials_from_cv_results, trials_to_frame
from modules.reporting_engine import TrialResult
from modules.search_space import SearchSpace
from utils.exceptions import ConfigurationError

@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)

@pytest.fixture
def iris_data():
    data = load_iris()
    return data.data, data.target

@pytest.fixture
def hpo_config(tmp_path):
    return {
        'model': {'name': 'RandomForestClassifier', 'params': {'n_estimators': 5}},
        'search': {
            'cv_folds': 2,
            'n_iter': 3,
            'scoring': None,
            'strategies': {
                'randomized': {
                    'enabled': True,
                    'space': {
                        'max_depth': [2, None],
                        'min_samples_split': {'distribution': 'randint', 'low': 2, 'high': 6}
                    }
                },
                'grid': {
                    'enabled': True,
                    'space': {
                        'max_depth': [2, None],
                        'criterion': ['gini', 'entropy']
                    }
                }
            }
        },
        'execution': {'n_jobs': 1, 'seed': 42},  # Sequential for test stability
        'resources': {'max_hpo_configs': 100},
        'outputs': {'base_results_dir': str(tmp_path), 'save_best_estimator': True}
    }

def test_execute_runs_both_strategies(hpo_config, iris_data, mock_logger):
    X, y = iris_data
    engine = HPOSearchEngine(hpo_config, mock_logger)
    outcomes = engine.execute(X, y, "test_run")

    assert list(outcomes.keys()) == ['randomized', 'grid']

    randomized = outcomes['randomized']
    assert randomized.n_candidates == 3
    assert len(randomized.trials) == 3
    assert all(len(t.fold_scores) == 2 for t in randomized.trials)

    grid = outcomes['grid']
    assert grid.n_candidates == 4
    assert {(t.parameters['max_depth'], t.parameters['criterion']) for t in grid.trials} == {
        (2, 'gini'), (2, 'entropy'), (None, 'gini'), (None, 'entropy')
    }
    assert grid.best_score == pytest.approx(max(t.mean_validation_score for t in grid.trials))

def test_sampled_values_are_plain_python(hpo_config, iris_data, mock_logger):
    X, y = iris_data
    engine = HPOSearchEngine(hpo_config, mock_logger)
    space = SearchSpace.from_config(hpo_config['search']['strategies']['randomized']['space'])
    outcome = engine.run_randomized(X, y, space)

    for trial in outcome.trials:
        assert type(trial.parameters['min_samples_split']) is int
        assert 2 <= trial.parameters['min_samples_split'] < 6

def test_artifacts_written(hpo_config, iris_data, mock_logger, tmp_path):
    X, y = iris_data
    engine = HPOSearchEngine(hpo_config, mock_logger)
    engine.execute(X, y, "test_run")

    output_dir = tmp_path / "HPO_Search"
    for strategy in ('randomized', 'grid'):
        trials = pd.read_csv(output_dir / f"{strategy}_trials.csv")
        assert {'rank', 'mean_validation_score', 'std_validation_score', 'params',
                'fold_0_score', 'fold_1_score'} <= set(trials.columns)
        assert trials['rank'].min() == 1

        with open(output_dir / f"{strategy}_best.json") as f:
            best = json.load(f)
        assert best['run_id'] == "test_run"
        assert best['strategy'] == strategy

        assert (output_dir / f"{strategy}_best_estimator.pkl").exists()

def test_disabled_strategy_is_skipped(hpo_config, iris_data, mock_logger):
    hpo_config['search']['strategies']['grid']['enabled'] = False
    X, y = iris_data
    outcomes = HPOSearchEngine(hpo_config, mock_logger).execute(X, y, "test_run")
    assert list(outcomes.keys()) == ['randomized']

def test_no_enabled_strategy_raises(hpo_config, iris_data, mock_logger):
    for strategy in hpo_config['search']['strategies'].values():
        strategy['enabled'] = False
    X, y = iris_data
    with pytest.raises(ConfigurationError, match="No search strategy"):
        HPOSearchEngine(hpo_config, mock_logger).execute(X, y, "test_run")

def test_grid_size_guard(hpo_config, iris_data, mock_logger):
    hpo_config['resources']['max_hpo_configs'] = 3
    X, y = iris_data
    space = SearchSpace.from_config(hpo_config['search']['strategies']['grid']['space'])
    with pytest.raises(ConfigurationError, match="max_hpo_configs"):
        HPOSearchEngine(hpo_config, mock_logger).run_grid(X, y, space)

def test_fit_failure_propagates_unchanged(hpo_config, iris_data, mock_logger):
    hpo_config['search']['strategies']['grid']['space'] = {'max_depth': [-5]}
    X, y = iris_data
    space = SearchSpace.from_config(hpo_config['search']['strategies']['grid']['space'])
    with pytest.raises(ValueError):
        HPOSearchEngine(hpo_config, mock_logger).run_grid(X, y, space)
    mock_logger.error.assert_called()

def test_estimator_uses_model_seed(hpo_config, mock_logger):
    hpo_config['_internal_seeds'] = {'search': 1, 'cv': 2, 'model': 3}
    engine = HPOSearchEngine(hpo_config, mock_logger)
    estimator = engine._build_estimator()
    assert isinstance(estimator, RandomForestClassifier)
    assert estimator.random_state == 3
    assert estimator.n_estimators == 5

def test_trials_from_cv_results_orders_folds():
    cv_results = {
        'params': [{'max_depth': np.int64(3)}, {'max_depth': None}],
        'mean_test_score': np.array([0.8, 0.9]),
        'split10_test_score': np.array([0.7, 0.95]),
        'split2_test_score': np.array([0.9, 0.85]),
        'std_test_score': np.array([0.1, 0.05])
    }
    trials = trials_from_cv_results(cv_results)

    assert trials[0] == TrialResult({'max_depth': 3}, 0.8, [0.9, 0.7])
    assert type(trials[0].parameters['max_depth']) is int
    assert trials[1].fold_scores == (0.85, 0.95)

def test_trials_from_cv_results_requires_split_scores():
    with pytest.raises(ValueError, match="split"):
        trials_from_cv_results({'params': [{}], 'mean_test_score': [0.5]})

def test_trials_to_frame_ranks_best_first():
    trials = [
        TrialResult({'a': 1}, 0.5, [0.4, 0.6]),
        TrialResult({'a': 2}, 0.9, [0.9, 0.9]),
    ]
    df = trials_to_frame(trials)
    assert df['rank'].tolist() == [2, 1]
    assert df.loc[0, 'std_validation_score'] == pytest.approx(0.1)
    assert json.loads(df.loc[1, 'params']) == {'a': 2}

def test_timing_line():
    outcome = SearchOutcome('grid', [], 1.234, 72, {}, 0.9)
    assert outcome.timing_line() == "GridSearchCV took 1.23 seconds for 72 candidate parameter settings."
