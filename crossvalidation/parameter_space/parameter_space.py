"""
Parameter spaces and configuration sampling.

A finite space is the Cartesian product of its generators and is addressed
with mixed-radix indices where the first parameter varies fastest. An infinite
space (any generator without a length) can only be sampled.
"""
import math
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from sklearn.utils import check_random_state

from crossvalidation.parameter_space.distributions import Distribution, as_distribution
from crossvalidation.utils.exceptions import ConfigurationError


class Configuration(Mapping):
    """
    Immutable named-value record drawn from a parameter space.

    Behaves as a read-only mapping, so ``T(**config)`` passes the values as
    keyword arguments.
    """

    def __init__(self, items: Union[Mapping, Iterable[Tuple[str, Any]]] = (), **values: Any):
        self._data: Dict[str, Any] = dict(items)
        self._data.update(values)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __hash__(self) -> int:
        return hash(tuple(self._data.items()))

    def __repr__(self) -> str:
        values = ", ".join(f"{k}={v!r}" for k, v in self._data.items())
        return f"Configuration({values})"


class ParameterSpace:
    """
    Ordered collection of named generators.

    Example:
        >>> space = ParameterSpace(alpha=[0.1, 1.0, 10.0], fit_intercept=[True, False])
        >>> len(space)
        6
        >>> space[1]
        Configuration(alpha=1.0, fit_intercept=True)
    """

    def __init__(self, mapping: Optional[Mapping] = None, **generators: Any):
        items = dict(mapping or {})
        items.update(generators)
        if not items:
            raise ConfigurationError("ParameterSpace needs at least one parameter.")
        self.names: Tuple[str, ...] = tuple(items)
        self.generators: Tuple[Distribution, ...] = tuple(as_distribution(g) for g in items.values())

    @property
    def is_finite(self) -> bool:
        return all(g.finite for g in self.generators)

    def _require_finite(self) -> None:
        if not self.is_finite:
            raise ConfigurationError("Operation requires a finite parameter space.")

    @property
    def shape(self) -> Tuple[int, ...]:
        self._require_finite()
        return tuple(len(g) for g in self.generators)

    def __len__(self) -> int:
        return math.prod(self.shape)

    def unravel(self, index: int) -> Tuple[int, ...]:
        """Per-parameter indices of flat ``index`` (first parameter fastest)."""
        size = len(self)
        if not 0 <= index < size:
            raise IndexError(f"Index {index} out of range for space of size {size}")
        return tuple(int(i) for i in np.unravel_index(index, self.shape, order='F'))

    def ravel(self, multi_index: Sequence[int]) -> int:
        return int(np.ravel_multi_index(tuple(multi_index), self.shape, order='F'))

    def configuration(self, values: Iterable[Any]) -> Configuration:
        return Configuration(zip(self.names, values))

    def __getitem__(self, index: int) -> Configuration:
        multi = self.unravel(index)
        return self.configuration(g[i] for g, i in zip(self.generators, multi))

    def __iter__(self) -> Iterator[Configuration]:
        for i in range(len(self)):
            yield self[i]

    def collect(self) -> List[Configuration]:
        """Every configuration of a finite space, in index order."""
        return list(self)

    def rvs(self, random_state=None) -> Configuration:
        """One configuration with every parameter drawn independently."""
        rng = check_random_state(random_state)
        return self.configuration(g.rvs(rng) for g in self.generators)

    def neighbors(self, index: int, k: int = 1, visited: Iterable[int] = ()) -> List[int]:
        """
        Flat indices of the grid neighbours of ``index``.

        Moves up to ``k`` steps along one parameter at a time, skipping
        indices in ``visited`` and positions outside the grid.
        """
        visited = set(visited)
        multi = self.unravel(index)
        shape = self.shape
        found: List[int] = []
        for dim, extent in enumerate(shape):
            for offset in range(-k, k + 1):
                pos = multi[dim] + offset
                if offset == 0 or not 0 <= pos < extent:
                    continue
                candidate = self.ravel(multi[:dim] + (pos,) + multi[dim + 1:])
                if candidate not in visited and candidate not in found:
                    found.append(candidate)
        return found

    def __repr__(self) -> str:
        params = ", ".join(f"{n}={g!r}" for n, g in zip(self.names, self.generators))
        return f"ParameterSpace({params})"


def sample_indices(space: ParameterSpace, n: int, random_state=None) -> List[int]:
    """``n`` distinct flat indices of a finite space (rejection sampling)."""
    size = len(space)
    if not 0 <= n <= size:
        raise ConfigurationError(f"Cannot draw {n} distinct configurations from a space of size {size}.")
    rng = check_random_state(random_state)
    drawn: List[int] = []
    seen = set()
    while len(drawn) < n:
        i = int(rng.randint(size))
        if i not in seen:
            seen.add(i)
            drawn.append(i)
    return drawn


def sample(space: ParameterSpace, n: Optional[int] = None, random_state=None):
    """
    Draw configurations from ``space``.

    Returns a single Configuration when ``n`` is None, otherwise a list of
    ``n``: distinct ones for a finite space, independent ones otherwise.
    """
    rng = check_random_state(random_state)
    if n is None:
        if space.is_finite:
            return space[int(rng.randint(len(space)))]
        return space.rvs(rng)
    if n < 0:
        raise ConfigurationError(f"Number of samples must be non-negative, got {n}")
    if space.is_finite:
        return [space[i] for i in sample_indices(space, n, rng)]
    return [space.rvs(rng) for _ in range(n)]
