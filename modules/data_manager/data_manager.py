import logging
import numpy as np
from typing import Tuple, Callable, Dict, Optional

from sklearn.datasets import load_digits, load_iris, load_wine, load_breast_cancer

from utils.exceptions import DataValidationError
from utils.error_handling import handle_engine_errors
from utils import constants

class DataManager:
    """
    Loads the dataset named in the configuration and validates it.

    Only bundled scikit-learn datasets are supported; the feature matrix and
    label vector are returned as NumPy arrays.
    """

    LOADERS: Dict[str, Callable] = {
        'digits': load_digits,
        'iris': load_iris,
        'wine': load_wine,
        'breast_cancer': load_breast_cancer
    }

    def __init__(self, config: dict, logger: logging.Logger):
        self.config = config
        self.logger = logger
        self.dataset_name = config.get('dataset', {}).get('name', constants.DEFAULT_DATASET)
        self.X: Optional[np.ndarray] = None
        self.y: Optional[np.ndarray] = None

    @handle_engine_errors("Data Management")
    def execute(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Load and validate the configured dataset.

        Returns:
            Tuple of (X, y).
        """
        self.logger.info(f"Loading dataset '{self.dataset_name}'...")
        self.load_data()
        self.validate()

        n_classes = len(np.unique(self.y))
        self.logger.info(
            f"Dataset '{self.dataset_name}' loaded: {self.X.shape[0]} samples, "
            f"{self.X.shape[1]} features, {n_classes} classes"
        )
        return self.X, self.y

    def load_data(self) -> Tuple[np.ndarray, np.ndarray]:
        """Fetch the bundled dataset by name."""
        loader = self.LOADERS.get(self.dataset_name)
        if loader is None:
            raise DataValidationError(
                f"Unknown dataset '{self.dataset_name}'. Available: {list(self.LOADERS.keys())}"
            )
        dataset = loader()
        self.X, self.y = dataset.data, dataset.target
        return self.X, self.y

    def validate(self) -> None:
        """
        Check the arrays are usable for stratified cross-validation.

        Raises:
            DataValidationError: On empty data, mismatched lengths, non-finite
                features, or a class with fewer members than CV folds.
        """
        if self.X is None or self.y is None:
            raise DataValidationError("No data loaded. Call load_data() first.")

        if self.X.ndim != 2 or self.X.shape[0] == 0:
            raise DataValidationError(f"Feature matrix must be 2-D and non-empty, got shape {self.X.shape}.")

        if self.X.shape[0] != self.y.shape[0]:
            raise DataValidationError(
                f"Feature/label length mismatch: {self.X.shape[0]} rows vs {self.y.shape[0]} labels."
            )

        if not np.all(np.isfinite(self.X)):
            raise DataValidationError("Feature matrix contains NaN or infinite values.")

        cv_folds = self.config.get('search', {}).get('cv_folds', constants.DEFAULT_CV_FOLDS)
        _, counts = np.unique(self.y, return_counts=True)
        if counts.min() < cv_folds:
            raise DataValidationError(
                f"Smallest class has {counts.min()} samples, fewer than cv_folds ({cv_folds})."
            )
