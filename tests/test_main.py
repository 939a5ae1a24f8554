import json
import logging
import pytest
from pathlib import Path

import main

REPO_CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"

@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

@pytest.fixture
def small_config(tmp_path, monkeypatch):
    """A fast iris run writing into tmp_path."""
    monkeypatch.chdir(tmp_path)
    with open(REPO_CONFIG_DIR / "config.json") as f:
        config = json.load(f)
    config['dataset']['name'] = 'iris'
    config['model']['params'] = {'n_estimators': 3}
    config['search']['cv_folds'] = 2
    config['search']['n_iter'] = 4
    config['search']['strategies']['randomized']['space'] = {
        'max_depth': [2, None],
        'min_samples_split': {'distribution': 'randint', 'low': 2, 'high': 5}
    }
    config['search']['strategies']['grid']['space'] = {
        'max_depth': [2, None],
        'criterion': ['gini', 'entropy']
    }
    config['execution']['n_jobs'] = 1
    config['logging']['log_to_console'] = False
    config['outputs']['base_results_dir'] = str(tmp_path / "results")

    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(config))
    return ["--config", str(config_path), "--schema", str(REPO_CONFIG_DIR / "schema.json")]

def test_full_run_prints_reports(small_config, tmp_path, capsys):
    exit_code = main.main(small_config + ["--run-id", "test_run", "--top-n", "2"])
    out = capsys.readouterr().out

    assert exit_code == 0
    assert "RandomizedSearchCV took" in out
    assert "for 4 candidate parameter settings." in out
    assert "GridSearchCV took" in out
    assert out.count("Model with rank: 1") == 2
    assert out.count("Model with rank: 2") == 2
    assert "Model with rank: 3" not in out
    assert out.index("RandomizedSearchCV took") < out.index("GridSearchCV took")

    run_dir = tmp_path / "results" / "test_run"
    assert (run_dir / "01_RunConfiguration" / "config_used.json").exists()
    assert (run_dir / "HPO_Search" / "grid_trials.csv").exists()
    assert (run_dir / "HPO_Search" / "randomized_best.json").exists()

def test_dry_run_skips_searches(small_config, tmp_path, capsys):
    exit_code = main.main(small_config + ["--run-id", "dry", "--dry-run"])
    out = capsys.readouterr().out

    assert exit_code == 0
    assert "Configuration validated successfully" in out
    assert not (tmp_path / "results" / "dry" / "HPO_Search").exists()

def test_configuration_error_exits_with_one(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    exit_code = main.main(["--config", str(tmp_path / "missing.json"),
                           "--schema", str(REPO_CONFIG_DIR / "schema.json")])
    assert exit_code == 1
    assert "[ERROR] Pipeline Error: File not found" in capsys.readouterr().out

def test_invalid_top_n_override_fails_before_searching(small_config, tmp_path, capsys):
    exit_code = main.main(small_config + ["--run-id", "bad_top_n", "--top-n", "0"])
    out = capsys.readouterr().out

    assert exit_code == 1
    assert "--top-n must be >= 1, got 0" in out
    assert "took" not in out
    assert not (tmp_path / "results" / "bad_top_n").exists()
