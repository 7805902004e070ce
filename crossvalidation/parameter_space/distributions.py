"""
Value generators used to populate a ParameterSpace.

Every generator declares whether it is ``finite``. Finite generators support
``len()`` and positional access and can take part in grid enumeration;
infinite ones can only be sampled.
"""
import abc
from typing import Any, Sequence

import numpy as np
from scipy import stats
from sklearn.utils import check_random_state

from crossvalidation.utils.exceptions import ConfigurationError


class Distribution(abc.ABC):
    """Base class for parameter generators."""

    finite: bool = False

    @abc.abstractmethod
    def rvs(self, random_state=None) -> Any:
        """Draw one value."""
        raise NotImplementedError("Subclasses must implement rvs.")


class Discrete(Distribution):
    """A finite set of values drawn uniformly."""

    finite = True

    def __init__(self, values: Sequence[Any]):
        if isinstance(values, np.ndarray):
            values = values.tolist()
        self.values = list(values)
        if not self.values:
            raise ConfigurationError("Discrete distribution needs at least one value.")

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, i: int) -> Any:
        return self.values[i]

    def rvs(self, random_state=None) -> Any:
        rng = check_random_state(random_state)
        return self.values[rng.randint(len(self.values))]

    def __repr__(self) -> str:
        return f"Discrete({self.values!r})"


class Uniform(Distribution):

    def __init__(self, low: float, high: float):
        if not low < high:
            raise ConfigurationError(f"Uniform needs low < high, got [{low}, {high}]")
        self.low = low
        self.high = high
        self._dist = stats.uniform(loc=low, scale=high - low)

    def rvs(self, random_state=None) -> float:
        return float(self._dist.rvs(random_state=check_random_state(random_state)))

    def __repr__(self) -> str:
        return f"Uniform({self.low}, {self.high})"


class LogUniform(Distribution):
    """Uniform on the log scale between ``low`` and ``high``."""

    def __init__(self, low: float, high: float):
        if not 0 < low < high:
            raise ConfigurationError(f"LogUniform needs 0 < low < high, got [{low}, {high}]")
        self.low = low
        self.high = high
        self._dist = stats.loguniform(low, high)

    def rvs(self, random_state=None) -> float:
        return float(self._dist.rvs(random_state=check_random_state(random_state)))

    def __repr__(self) -> str:
        return f"LogUniform({self.low}, {self.high})"


class Normal(Distribution):

    def __init__(self, mean: float, std: float):
        if not std > 0:
            raise ConfigurationError(f"Normal needs std > 0, got {std}")
        self.mean = mean
        self.std = std
        self._dist = stats.norm(loc=mean, scale=std)

    def rvs(self, random_state=None) -> float:
        return float(self._dist.rvs(random_state=check_random_state(random_state)))

    def __repr__(self) -> str:
        return f"Normal({self.mean}, {self.std})"


def as_distribution(obj: Any) -> Distribution:
    """Wrap plain sequences (lists, tuples, ranges, arrays) as Discrete."""
    if isinstance(obj, Distribution):
        return obj
    if isinstance(obj, (list, tuple, range, np.ndarray)):
        return Discrete(obj)
    raise ConfigurationError(f"Cannot use {type(obj).__name__} as a parameter generator.")
