import dataclasses
import numpy as np
import pytest
from modules.reporting_engine import TrialResult
from utils.exceptions import InvalidInputError

def test_values_are_normalised():
    trial = TrialResult({'n_estimators': 20}, np.float64(0.9), np.array([0.8, 1.0]))
    assert isinstance(trial.mean_validation_score, float)
    assert trial.fold_scores == (0.8, 1.0)

def test_is_immutable():
    trial = TrialResult({'max_depth': 3}, 0.9, [0.9])
    with pytest.raises(dataclasses.FrozenInstanceError):
        trial.mean_validation_score = 1.0

def test_parameters_are_copied():
    params = {'max_depth': 3}
    trial = TrialResult(params, 0.9, [0.9])
    params['max_depth'] = 99
    assert trial.parameters == {'max_depth': 3}

def test_mean_is_not_recomputed():
    trial = TrialResult({}, 0.5, [0.9, 0.9])
    assert trial.mean_validation_score == 0.5

def test_empty_fold_scores_rejected():
    with pytest.raises(InvalidInputError, match="at least one fold"):
        TrialResult({'a': 1}, 0.9, [])

def test_fold_scores_are_required():
    with pytest.raises(TypeError):
        TrialResult({'a': 1}, 0.9)

def test_parameters_are_read_only():
    trial = TrialResult({'a': 1}, 0.9, [0.9])
    with pytest.raises(TypeError):
        trial.parameters['a'] = 2
    assert trial.parameters == {'a': 1}

def test_equal_records_hash_equal():
    first = TrialResult({'max_depth': None}, 0.9, [0.85, 0.95])
    second = TrialResult({'max_depth': None}, 0.9, [0.85, 0.95])
    assert first == second
    assert len({first, second}) == 1
