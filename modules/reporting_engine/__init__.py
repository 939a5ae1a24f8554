"""
Reporting Module.

Responsible for turning completed search trials into a ranked,
human-readable summary of the best configurations.
"""

from .trial_result import TrialResult
from .score_reporter import report, format_report, top_results, fold_std, by_mean_validation_score

__all__ = [
    'TrialResult',
    'report',
    'format_report',
    'top_results',
    'fold_std',
    'by_mean_validation_score'
]
