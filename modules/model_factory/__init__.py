"""
Model Factory Module
====================

Responsibility:
- Name-based construction of scikit-learn classifiers.
- Filtering of constructor arguments the chosen estimator does not accept.
"""

from .model_factory import ModelFactory

__all__ = ['ModelFactory']
