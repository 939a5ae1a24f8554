import json
import os
import hashlib
import sys
import logging
import jsonschema
import psutil  # Required for memory awareness
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional
from sklearn.model_selection import ParameterGrid

from modules.search_space import SearchSpace
from utils.exceptions import ConfigurationError
from utils import constants

class ConfigurationManager:
    """
    Manages system configuration loading, validation, and access.
    Acts as the single source of truth and safety guard for the search run.

    Validation stages:
    - Structure (JSON schema).
    - Logical bounds (folds, iterations, top_n, n_jobs).
    - Resources (grid size, memory).
    """

    # Default Resource Limits (Safety Guardrails)
    DEFAULT_MAX_HPO_CONFIGS = constants.DEFAULT_MAX_HPO_CONFIGS

    def __init__(self, config_path: str = "config/config.json",
                 schema_path: str = "config/schema.json"):
        """
        Initialize the ConfigurationManager.

        Args:
            config_path (str): Path to the user configuration JSON.
            schema_path (str): Path to the JSON schema definition.
        """
        self.config_path = config_path
        self.schema_path = schema_path
        self.config: Dict[str, Any] = {}
        self.schema: Dict[str, Any] = {}
        self.run_id: Optional[str] = None
        self.logger = logging.getLogger("config_manager")

    def load_and_validate(self) -> Dict[str, Any]:
        """
        Main entry point. Loads config, validates schema/logic/resources
        and propagates seeds.

        Returns:
            Dict[str, Any]: The fully validated and hydrated configuration.

        Raises:
            ConfigurationError: If any validation step fails.
        """
        # 1. Load Files
        self.config = self._load_json(self.config_path)
        self.schema = self._load_json(self.schema_path)

        # 2. Structural Validation (Schema)
        self._validate_schema()

        # 3. Logical Validation (Business Rules & Bounds)
        self._validate_logic()

        # 4. Resource Validation (Grid size, memory)
        self._validate_resources()

        # 5. Internal Seed Propagation (Reproducibility)
        self._propagate_seeds()

        return self.config

    def generate_run_id(self) -> str:
        """
        Generate or retrieve a unique run identifier based on timestamp.
        Used for directory naming and metadata.
        """
        if not self.run_id:
            # Format: YYYYMMDD_HHMMSS
            self.run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.run_id

    def save_artifacts(self, output_dir: str) -> None:
        """
        Save configuration artifacts to the run directory.

        Saves:
        1. config_used.json: The exact config object in memory.
        2. config_hash.txt: SHA256 hash for versioning.
        3. run_metadata.json: Environment details (Python version, platform, ...).
        """
        config_dir = Path(output_dir) / constants.CONFIG_DIR
        config_dir.mkdir(parents=True, exist_ok=True)

        # 1. Save Config
        with open(config_dir / "config_used.json", 'w') as f:
            json.dump(self.config, f, indent=2)

        # 2. Calculate and Save Hash
        config_str = json.dumps(self.config, sort_keys=True)
        config_hash = hashlib.sha256(config_str.encode()).hexdigest()

        with open(config_dir / "config_hash.txt", 'w') as f:
            f.write(config_hash)

        # 3. Save Metadata (Environment Capture)
        metadata = {
            'run_id': self.run_id,
            'start_time': datetime.now().isoformat(),
            'python_version': sys.version,
            'platform': sys.platform,
            'config_hash': config_hash,
            'working_directory': os.getcwd()
        }

        with open(config_dir / "run_metadata.json", 'w') as f:
            json.dump(metadata, f, indent=2)

    def _load_json(self, path: str) -> Dict[str, Any]:
        """Safely load a JSON file."""
        if not os.path.exists(path):
            raise ConfigurationError(f"File not found: {path}")
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {str(e)}")

    def _validate_schema(self) -> None:
        """Validate config structure against JSON schema."""
        try:
            jsonschema.validate(instance=self.config, schema=self.schema)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Schema validation failed: {e.message}")

    def _validate_logic(self) -> None:
        """Logical validation of values the schema cannot express."""
        # --- Search Section ---
        search = self.config.get('search', {})
        cv_folds = search.get('cv_folds', constants.DEFAULT_CV_FOLDS)
        if cv_folds < 2:
            raise ConfigurationError(f"cv_folds must be >= 2, got {cv_folds}.")

        n_iter = search.get('n_iter', constants.DEFAULT_N_ITER)
        if n_iter < 1:
            raise ConfigurationError(f"n_iter must be >= 1, got {n_iter}.")

        strategies = search.get('strategies', {})
        enabled = [name for name in constants.STRATEGIES
                   if strategies.get(name, {}).get('enabled', True) and name in strategies]
        if not enabled:
            raise ConfigurationError("At least one search strategy must be enabled.")

        # Parse every declared space so malformed entries fail before any fitting
        for name in enabled:
            space = SearchSpace.from_config(strategies[name]['space'])
            if name == constants.STRATEGY_GRID:
                space.to_param_grid()

        # --- Reporting Section ---
        top_n = self.config.get('reporting', {}).get('top_n', constants.DEFAULT_TOP_N)
        if top_n < 1:
            raise ConfigurationError(f"reporting.top_n must be >= 1, got {top_n}.")

        # Execution validation
        execution = self.config.get('execution', {})
        if 'n_jobs' in execution:
            n_jobs = execution['n_jobs']
            if n_jobs == 0 or n_jobs < -1:
                raise ConfigurationError(f"execution.n_jobs must be -1 (all cores) or a positive integer, got {n_jobs}")

    def _validate_resources(self) -> None:
        """
        Validate against system resources.
        Calculates the exhaustive grid size and ensures it fits within safe limits.
        """
        resources = self.config.get('resources', {})

        # 1. HPO Grid Explosion Check
        grid_cfg = self.config.get('search', {}).get('strategies', {}).get(constants.STRATEGY_GRID)
        if grid_cfg and grid_cfg.get('enabled', True):
            param_grid = SearchSpace.from_config(grid_cfg['space']).to_param_grid()
            try:
                total_configs = len(ParameterGrid(param_grid))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid parameter grid: {str(e)}")

            max_configs = resources.get('max_hpo_configs', self.DEFAULT_MAX_HPO_CONFIGS)

            if total_configs > max_configs:
                raise ConfigurationError(
                    f"HPO Grid Explosion Detected! Total configurations ({total_configs}) exceeds "
                    f"safety limit ({max_configs}). Reduce grid search space or increase 'resources.max_hpo_configs'."
                )

            self.logger.info(f"HPO Grid Size validated: {total_configs} combinations (Limit: {max_configs})")

        # 2. Memory Limits Check
        system_ram_mb = int(psutil.virtual_memory().total / (1024 * 1024))
        # Default safety buffer: 80% of system RAM
        safe_ram_limit = int(system_ram_mb * 0.8)

        config_max_ram = resources.get('max_memory_mb', safe_ram_limit)

        if config_max_ram > system_ram_mb:
            self.logger.warning(
                f"Configured max_memory_mb ({config_max_ram}MB) exceeds physical system RAM ({system_ram_mb}MB). "
                "This may lead to instability."
            )

        # Inject the limit back into config for other modules to use
        if 'resources' not in self.config:
            self.config['resources'] = {}
        self.config['resources']['max_memory_mb'] = config_max_ram

    def _propagate_seeds(self) -> None:
        """
        Propagate master seed to internal components.
        Uses non-overlapping offsets to avoid correlation between components.
        """
        master_seed = self.config.get('execution', {}).get('seed', constants.DEFAULT_SEED)

        self.config['_internal_seeds'] = {
            'search': master_seed,
            'cv': master_seed + 1000,
            'model': master_seed + 2000
        }
        self.logger.debug(f"Seeds propagated from master ({master_seed}): {self.config['_internal_seeds']}")
