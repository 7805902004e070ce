"""
Observation-level access to datasets.

A dataset is either a single container or a composite of containers that
share the same number of observations:

- numpy arrays keep observations along their last axis;
- pandas objects keep observations along their rows;
- tuples and dicts are composites (e.g. ``(X, y)`` or ``{'x': X, 'y': y}``);
- any other sized sequence is indexed positionally.
"""
from typing import Any, Union

import numpy as np
import pandas as pd

from crossvalidation.utils.exceptions import ConfigurationError

Index = Union[slice, np.ndarray]


def is_composite(data: Any) -> bool:
    return isinstance(data, (tuple, dict))


def _parts(data: Any):
    return list(data.values()) if isinstance(data, dict) else list(data)


def nobs(data: Any) -> int:
    """Number of observations in ``data``."""
    if is_composite(data):
        parts = _parts(data)
        if not parts:
            raise ConfigurationError("Composite dataset must contain at least one container.")
        counts = [nobs(part) for part in parts]
        if any(c != counts[0] for c in counts[1:]):
            raise ConfigurationError(f"All data should have the same number of observations, got {counts}.")
        return counts[0]

    if isinstance(data, np.ndarray):
        if data.ndim == 0:
            raise ConfigurationError("Cannot count observations of a 0-dimensional array.")
        return data.shape[-1]

    if isinstance(data, (pd.DataFrame, pd.Series)):
        return len(data)

    try:
        return len(data)
    except TypeError as e:
        raise ConfigurationError(f"Unsupported dataset type: {type(data).__name__}") from e


def slice_obs(data: Any, idx: Index) -> Any:
    """
    Select observations ``idx`` (a slice or an integer index array).

    Slices of numpy arrays are views on the original storage.
    """
    if isinstance(data, tuple):
        return tuple(slice_obs(part, idx) for part in data)
    if isinstance(data, dict):
        return {key: slice_obs(part, idx) for key, part in data.items()}

    if isinstance(data, np.ndarray):
        return data[..., idx]
    if isinstance(data, (pd.DataFrame, pd.Series)):
        return data.iloc[idx]
    if isinstance(idx, slice):
        return data[idx]
    return [data[i] for i in idx]


def unpack(data: Any) -> tuple:
    """Positional arguments passed to ``fit``/``score`` for ``data``."""
    if isinstance(data, tuple):
        return data
    return (data,)
