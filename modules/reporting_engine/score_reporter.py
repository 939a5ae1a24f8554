import sys
import logging
from typing import Iterable, List, Optional, Sequence, TextIO

import numpy as np

from utils.exceptions import InvalidInputError
from utils.constants import DEFAULT_TOP_N
from .trial_result import TrialResult

logger = logging.getLogger(__name__)


def by_mean_validation_score(result: TrialResult) -> float:
    """Sort key for ranking trials. Ties keep their input order (stable sort)."""
    return result.mean_validation_score


def fold_std(fold_scores: Sequence[float]) -> float:
    """
    Population standard deviation (ddof=0) of the per-fold scores.

    Matches scikit-learn's ``std_test_score``. A single fold gives 0.0.
    """
    if len(fold_scores) < 2:
        return 0.0
    return float(np.std(np.asarray(fold_scores, dtype=np.float64)))


def _validate(results: Sequence[TrialResult], top_n: int) -> None:
    if isinstance(top_n, bool) or not isinstance(top_n, (int, np.integer)):
        raise InvalidInputError(f"top_n must be a positive integer, got {top_n!r}")
    if top_n <= 0:
        raise InvalidInputError(f"top_n must be a positive integer, got {top_n}")
    if len(results) == 0:
        raise InvalidInputError("Cannot report on an empty result set.")


def top_results(results: Sequence[TrialResult], top_n: int = DEFAULT_TOP_N) -> List[TrialResult]:
    """Return the ``top_n`` best trials, best first. Input is not modified."""
    results = list(results)
    _validate(results, top_n)
    return sorted(results, key=by_mean_validation_score, reverse=True)[:top_n]


def _format_lines(ranked: Iterable[TrialResult]) -> List[str]:
    lines = []
    for rank, result in enumerate(ranked, start=1):
        lines.append(f"Model with rank: {rank}")
        lines.append(
            f"Mean validation score: {result.mean_validation_score:.3f} "
            f"(std: {fold_std(result.fold_scores):.3f})"
        )
        lines.append(f"Parameters: {dict(result.parameters)}")
        lines.append("")
    return lines


def format_report(results: Sequence[TrialResult], top_n: int = DEFAULT_TOP_N) -> str:
    """Same text ``report`` writes, returned as a string."""
    return "\n".join(_format_lines(top_results(results, top_n))) + "\n"


def report(results: Sequence[TrialResult], top_n: int = DEFAULT_TOP_N,
           stream: Optional[TextIO] = None) -> None:
    """
    Print a ranked summary of the best ``top_n`` trials.

    Each entry is a rank line, the mean score with the fold standard
    deviation (3 decimals), the parameter mapping and a blank line.
    If ``top_n`` exceeds the number of results, all of them are printed.

    Args:
        results: Completed trials, in any order.
        top_n: Number of entries to print.
        stream: Output sink, defaults to ``sys.stdout``.

    Raises:
        InvalidInputError: If ``results`` is empty or ``top_n`` is not a positive integer.
    """
    results = list(results)
    ranked = top_results(results, top_n)
    out = stream if stream is not None else sys.stdout
    out.write("\n".join(_format_lines(ranked)) + "\n")
    logger.debug(f"Reported {len(ranked)} of {len(results)} trials.")
