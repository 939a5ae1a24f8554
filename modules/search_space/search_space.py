from dataclasses import dataclass
from typing import Dict, Any, List, Union

from scipy import stats

from utils.exceptions import ConfigurationError

# Distributions that may be declared in the configuration file.
# randint: integers in [low, high); uniform: floats in [loc, loc + scale].
SUPPORTED_DISTRIBUTIONS = ('randint', 'uniform')


@dataclass(frozen=True)
class Fixed:
    """A finite list of candidate values. ``None`` means unbounded/default."""
    values: tuple

    def __post_init__(self):
        if len(self.values) == 0:
            raise ConfigurationError("Fixed hyperparameter values cannot be empty.")


@dataclass(frozen=True)
class Distribution:
    """A sampler exposing ``rvs`` (e.g. a frozen scipy.stats distribution)."""
    sampler: Any
    label: str = ""

    def __post_init__(self):
        if not hasattr(self.sampler, 'rvs'):
            raise ConfigurationError(
                f"Distribution sampler must provide an 'rvs' method, got {type(self.sampler).__name__}."
            )


Dimension = Union[Fixed, Distribution]


class SearchSpace:
    """
    Hyperparameter space keyed by parameter name.

    Grid search requires every dimension to be ``Fixed``; randomized search
    accepts both kinds and samples ``Fixed`` values uniformly.
    """

    def __init__(self, dimensions: Dict[str, Dimension]):
        if not dimensions:
            raise ConfigurationError("Search space must declare at least one hyperparameter.")
        for name, dim in dimensions.items():
            if not isinstance(dim, (Fixed, Distribution)):
                raise ConfigurationError(
                    f"Hyperparameter '{name}' must be Fixed or Distribution, got {type(dim).__name__}."
                )
        self.dimensions = dict(dimensions)

    @classmethod
    def from_config(cls, raw: Dict[str, Any]) -> 'SearchSpace':
        """
        Build a space from its JSON form.

        Lists become ``Fixed``; objects with a ``distribution`` key become
        ``Distribution``. JSON ``null`` inside a list is the unbounded sentinel.
        """
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Search space must be an object, got {type(raw).__name__}.")

        dimensions = {}
        for name, spec in raw.items():
            if isinstance(spec, list):
                dimensions[name] = Fixed(tuple(spec))
            elif isinstance(spec, dict) and 'distribution' in spec:
                dimensions[name] = cls._parse_distribution(name, spec)
            else:
                raise ConfigurationError(
                    f"Hyperparameter '{name}' must be a list of values or a distribution object."
                )
        return cls(dimensions)

    @staticmethod
    def _parse_distribution(name: str, spec: Dict[str, Any]) -> Distribution:
        kind = spec['distribution']
        try:
            if kind == 'randint':
                low, high = int(spec['low']), int(spec['high'])
                if high <= low:
                    raise ConfigurationError(
                        f"randint for '{name}' needs high > low, got low={low}, high={high}."
                    )
                return Distribution(stats.randint(low, high), label=f"randint({low}, {high})")
            if kind == 'uniform':
                loc, scale = float(spec.get('loc', 0.0)), float(spec['scale'])
                if scale <= 0:
                    raise ConfigurationError(f"uniform for '{name}' needs scale > 0, got {scale}.")
                return Distribution(stats.uniform(loc, scale), label=f"uniform({loc}, {scale})")
        except KeyError as e:
            raise ConfigurationError(f"Distribution for '{name}' is missing field {e}.")

        raise ConfigurationError(
            f"Unknown distribution '{kind}' for '{name}'. Supported: {list(SUPPORTED_DISTRIBUTIONS)}"
        )

    @property
    def is_discrete(self) -> bool:
        return all(isinstance(dim, Fixed) for dim in self.dimensions.values())

    def size(self) -> int:
        """Number of combinations in the Cartesian product (discrete spaces only)."""
        if not self.is_discrete:
            raise ConfigurationError("Size is undefined for a space containing distributions.")
        total = 1
        for dim in self.dimensions.values():
            total *= len(dim.values)
        return total

    def to_param_grid(self) -> Dict[str, List[Any]]:
        """scikit-learn ``param_grid`` for exhaustive search."""
        continuous = [name for name, dim in self.dimensions.items() if isinstance(dim, Distribution)]
        if continuous:
            raise ConfigurationError(
                f"Grid search needs discrete values; got distributions for {continuous}."
            )
        return {name: list(dim.values) for name, dim in self.dimensions.items()}

    def to_param_distributions(self) -> Dict[str, Any]:
        """scikit-learn ``param_distributions`` for randomized search."""
        distributions = {}
        for name, dim in self.dimensions.items():
            if isinstance(dim, Fixed):
                distributions[name] = list(dim.values)
            else:
                distributions[name] = dim.sampler
        return distributions

    def describe(self) -> Dict[str, str]:
        """Readable summary used for logging and run artifacts."""
        summary = {}
        for name, dim in self.dimensions.items():
            if isinstance(dim, Fixed):
                summary[name] = repr(list(dim.values))
            else:
                summary[name] = dim.label or repr(dim.sampler)
        return summary

    def __repr__(self) -> str:
        return f"SearchSpace({self.describe()})"
