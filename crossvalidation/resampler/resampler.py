"""
Resamplers for the crossvalidation package.

A resampler partitions a dataset into a fixed, known number of (train, test)
pairs. Every resampler is a single-pass iterator: index permutations are drawn
once at construction, pairs are produced lazily, and once the last pair has been
yielded the resampler stays exhausted.
"""
import abc
import math
from typing import Any, Callable, Optional, Tuple

import numpy as np
from sklearn.model_selection import KFold as _SklearnKFold, train_test_split
from sklearn.utils import check_random_state

from crossvalidation.utils.data import Index, nobs, slice_obs
from crossvalidation.utils.exceptions import ConfigurationError


def _split_point(n: int, ratio: Optional[float], m: Optional[int]) -> int:
    if m is None:
        if not (0.0 < ratio < 1.0):
            raise ConfigurationError(f"ratio must be between 0 and 1 (exclusive), got {ratio}")
        m = math.floor(ratio * n)
    if not (1 <= m < n):
        raise ConfigurationError(f"Data with {n} observations cannot be split at {m}.")
    return int(m)


class Resampler(abc.ABC):
    """
    Abstract base class for all resampling policies.

    Subclasses implement ``__len__`` and ``_pair(i)``, which returns the
    (train, test) data of pair ``i`` (0-based).
    """

    def __init__(self, data: Any):
        self.data = data
        self.nobs = nobs(data)
        self._state = 0

    @abc.abstractmethod
    def __len__(self) -> int:
        raise NotImplementedError("Subclasses must implement __len__.")

    @abc.abstractmethod
    def _pair(self, i: int) -> Tuple[Any, Any]:
        raise NotImplementedError("Subclasses must implement _pair.")

    @property
    def exhausted(self) -> bool:
        return self._state >= len(self)

    def __iter__(self):
        return self

    def __next__(self) -> Tuple[Any, Any]:
        if self.exhausted:
            raise StopIteration
        pair = self._pair(self._state)
        self._state += 1
        return pair

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(nobs={self.nobs}, length={len(self)})"


class IndexResampler(Resampler):
    """Resampler whose pairs are index selections of ``data`` (see ``_split``)."""

    @abc.abstractmethod
    def _split(self, i: int) -> Tuple[Index, Index]:
        raise NotImplementedError("Subclasses must implement _split.")

    def _pair(self, i: int) -> Tuple[Any, Any]:
        train_idx, test_idx = self._split(i)
        return slice_obs(self.data, train_idx), slice_obs(self.data, test_idx)


class FixedSplit(IndexResampler):
    """Train on the first ``m`` observations, test on the rest."""

    def __init__(self, data: Any, ratio: float = 0.8, m: Optional[int] = None):
        super().__init__(data)
        self.m = _split_point(self.nobs, ratio, m)

    def __len__(self) -> int:
        return 1

    def _split(self, i: int) -> Tuple[Index, Index]:
        return slice(0, self.m), slice(self.m, self.nobs)


class RandomSplit(IndexResampler):
    """Like FixedSplit, over a shuffled split drawn once at construction."""

    def __init__(self, data: Any, ratio: float = 0.8, m: Optional[int] = None, random_state=None):
        super().__init__(data)
        self.m = _split_point(self.nobs, ratio, m)
        self.train_indices, self.test_indices = train_test_split(
            np.arange(self.nobs), train_size=self.m, shuffle=True,
            random_state=check_random_state(random_state),
        )

    def __len__(self) -> int:
        return 1

    def _split(self, i: int) -> Tuple[Index, Index]:
        return self.train_indices, self.test_indices


class LeavePOut(IndexResampler):
    """
    Hold out ``p`` observations per pair.

    The observation order is shuffled once at construction (unless
    ``shuffle=False``). Pair ``i`` tests on positions ``[i*p, (i+1)*p)`` of
    that order; observations left over when ``p`` does not divide ``n`` are
    always in the training set.
    """

    def __init__(self, data: Any, p: int = 1, shuffle: bool = True, random_state=None):
        super().__init__(data)
        if not (1 <= p < self.nobs):
            raise ConfigurationError(f"p must be in [1, {self.nobs}), got {p}")
        self.p = int(p)
        self.shuffle = shuffle
        if shuffle:
            self.indices = check_random_state(random_state).permutation(self.nobs)
        else:
            self.indices = np.arange(self.nobs)

    def __len__(self) -> int:
        return self.nobs // self.p

    def _split(self, i: int) -> Tuple[Index, Index]:
        start, stop = i * self.p, (i + 1) * self.p
        train = np.concatenate((self.indices[:start], self.indices[stop:]))
        return train, self.indices[start:stop]


class LeaveOneOut(LeavePOut):

    def __init__(self, data: Any, shuffle: bool = True, random_state=None):
        super().__init__(data, p=1, shuffle=shuffle, random_state=random_state)


class KFold(IndexResampler):
    """
    ``k`` folds from ``sklearn.model_selection.KFold``, drawn at construction.

    Fold sizes differ by at most one: the first ``n mod k`` folds hold one
    extra observation.
    """

    def __init__(self, data: Any, k: int = 10, shuffle: bool = True, random_state=None):
        super().__init__(data)
        if not (1 < k <= self.nobs):
            raise ConfigurationError(f"k must be in (1, {self.nobs}], got {k}")
        self.k = int(k)
        self.shuffle = shuffle
        splitter = _SklearnKFold(
            n_splits=self.k,
            shuffle=shuffle,
            random_state=check_random_state(random_state) if shuffle else None,
        )
        self.folds = list(splitter.split(np.arange(self.nobs)))

    def __len__(self) -> int:
        return self.k

    def _split(self, i: int) -> Tuple[Index, Index]:
        return self.folds[i]


class ForwardChaining(IndexResampler):
    """
    Growing-prefix splits for ordered data.

    Pair ``i`` trains on the first ``init + i*out`` observations and tests on
    the next ``out``. With ``partial`` the last test window may be shorter.
    """

    def __init__(self, data: Any, init: int, out: int, partial: bool = True):
        super().__init__(data)
        if not (1 <= init < self.nobs):
            raise ConfigurationError(f"init must be in [1, {self.nobs}), got {init}")
        if not (1 <= out <= self.nobs - init):
            raise ConfigurationError(f"out must be in [1, {self.nobs - init}], got {out}")
        self.init = int(init)
        self.out = int(out)
        self.partial = partial

    def __len__(self) -> int:
        windows = (self.nobs - self.init) / self.out
        return math.ceil(windows) if self.partial else math.floor(windows)

    def _split(self, i: int) -> Tuple[Index, Index]:
        stop = self.init + i * self.out
        return slice(0, stop), slice(stop, min(stop + self.out, self.nobs))


class SlidingWindow(ForwardChaining):
    """Forward chaining with a fixed-size training window of length ``window``."""

    def __init__(self, data: Any, window: int, out: int, partial: bool = True):
        super().__init__(data, window, out, partial)
        self.window = self.init

    def _split(self, i: int) -> Tuple[Index, Index]:
        start = i * self.out
        stop = start + self.window
        return slice(start, stop), slice(stop, min(stop + self.out, self.nobs))


class PreProcess(Resampler):
    """
    Apply ``fn(train, test) -> (train, test)`` to every pair of a resampler.

    Typical use is fitting a transformation on the train part only and
    applying it to both parts.
    """

    def __init__(self, resampler: Resampler, fn: Callable[[Any, Any], Tuple[Any, Any]]):
        super().__init__(resampler.data)
        self.resampler = resampler
        self.fn = fn

    def __len__(self) -> int:
        return len(self.resampler)

    @property
    def exhausted(self) -> bool:
        return self.resampler.exhausted

    def _pair(self, i: int) -> Tuple[Any, Any]:
        train, test = next(self.resampler)
        return self.fn(train, test)
