"""
Search Space Module
===================

Responsibility:
- Typed hyperparameter spaces: fixed candidate lists or sampling distributions.
- Conversion to scikit-learn ``param_grid`` / ``param_distributions``.
- Parsing of search spaces declared in the JSON configuration.
"""

from .search_space import Fixed, Distribution, SearchSpace

__all__ = ['Fixed', 'Distribution', 'SearchSpace']
