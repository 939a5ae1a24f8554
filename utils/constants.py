# utils/constants.py

# --- Result Directories ---
CONFIG_DIR = "01_RunConfiguration"      # Run config, metadata, hash
HPO_SEARCH_DIR = "HPO_Search"           # Trial tables, best configs, estimators

# --- Search Strategies ---
STRATEGY_RANDOMIZED = "randomized"
STRATEGY_GRID = "grid"

# Execution order used by the search engine and the CLI.
STRATEGIES = [STRATEGY_RANDOMIZED, STRATEGY_GRID]

# Display names matching the scikit-learn search classes.
STRATEGY_LABELS = {
    STRATEGY_RANDOMIZED: "RandomizedSearchCV",
    STRATEGY_GRID: "GridSearchCV",
}

# --- Defaults ---
DEFAULT_DATASET = "digits"
DEFAULT_MODEL = "RandomForestClassifier"
DEFAULT_TOP_N = 3
DEFAULT_CV_FOLDS = 5
DEFAULT_N_ITER = 20
DEFAULT_SEED = 42

# --- Resource Limits ---
DEFAULT_MAX_HPO_CONFIGS = 1000  # Upper bound on exhaustive grid size
