from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from utils.exceptions import InvalidInputError


@dataclass(frozen=True)
class TrialResult:
    """
    One evaluated hyperparameter configuration.

    ``mean_validation_score`` is trusted as given; it is not recomputed
    from ``fold_scores``. ``parameters`` is exposed as a read-only mapping.
    """
    parameters: Mapping[str, Any]
    mean_validation_score: float
    fold_scores: Tuple[float, ...]

    def __post_init__(self):
        # Accept lists/arrays from callers while keeping the record immutable.
        fold_scores = tuple(float(s) for s in self.fold_scores)
        if not fold_scores:
            raise InvalidInputError("fold_scores must contain at least one fold score.")
        object.__setattr__(self, 'fold_scores', fold_scores)
        object.__setattr__(self, 'mean_validation_score', float(self.mean_validation_score))
        object.__setattr__(self, 'parameters', MappingProxyType(dict(self.parameters)))

    def __hash__(self):
        return hash((tuple(self.parameters.items()), self.mean_validation_score, self.fold_scores))
