"""
Data Manager Module
===================

Responsibility:
- Loading of named scikit-learn bundled datasets.
- Validation of shape, finiteness and class counts before searching.
"""

from .data_manager import DataManager

__all__ = ['DataManager']
