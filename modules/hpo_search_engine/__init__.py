"""
HPO Search Engine
=================

Responsibility:
- Randomized and exhaustive grid search through scikit-learn.
- Stratified K-fold cross-validation for every candidate.
- Conversion of cv_results_ into TrialResult records.
- Persistence of trial tables, best configurations and estimators.
"""

from .hpo_search_engine import HPOSearchEngine, SearchOutcome, trials_from_cv_results, trials_to_frame

__all__ = ['HPOSearchEngine', 'SearchOutcome', 'trials_from_cv_results', 'trials_to_frame']
