"""
Budgets and successive-halving schedules.

A schedule is a list of ``(arms_to_retain, resource)`` rounds. Each round fits
the surviving arms with ``resource`` and keeps the best ``arms_to_retain``.
Three policies are available, selected by ``ScheduleMode``:

- geometric: resource per arm grows as the number of arms shrinks, so every
  round spends roughly ``budget / nrounds``;
- constant: every arm gets the same resource in every round, normalised so the
  whole schedule spends at most ``budget``;
- hyperband: round ``i`` grants ``budget / rate**(nrounds - i)``, ending with
  the full budget.
"""
import abc
import math
import numbers
from collections.abc import Sequence
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from crossvalidation.parameter_space.parameter_space import Configuration
from crossvalidation.utils.exceptions import ConfigurationError


class Budget(Configuration):
    """Immutable record of positive numeric resources, e.g. ``Budget(epochs=100)``."""

    def __init__(self, items=(), **resources):
        super().__init__(items, **resources)
        if not self._data:
            raise ConfigurationError("Budget needs at least one resource.")
        for name, value in self._data.items():
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"Budget resource '{name}' must be numeric, got {value!r}")
            if not value > 0:
                raise ConfigurationError(f"Budget resource '{name}' must be > 0, got {value}")

    def __repr__(self) -> str:
        values = ", ".join(f"{k}={v!r}" for k, v in self._data.items())
        return f"Budget({values})"


class ScheduleMode(str, Enum):
    GEOMETRIC = 'geometric'
    CONSTANT = 'constant'
    HYPERBAND = 'hyperband'


def round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def floor_log(x: float, base: float) -> int:
    """Largest ``k`` with ``base**k <= x`` (exact for integer powers)."""
    if not base > 1:
        raise ConfigurationError(f"rate must be > 1, got {base}")
    k = 0
    while base ** (k + 1) <= x:
        k += 1
    return k


class Schedule(Sequence):
    """Finite sequence of ``(arms_to_retain, resource)`` rounds."""

    def __init__(self, rounds: List[Tuple[int, Configuration]], narms: int):
        self.rounds = list(rounds)
        self.narms = narms

    def __getitem__(self, i):
        return self.rounds[i]

    def __len__(self) -> int:
        return len(self.rounds)

    @property
    def arms(self) -> List[int]:
        return [arms for arms, _ in self.rounds]

    @property
    def resources(self) -> List[Configuration]:
        return [resource for _, resource in self.rounds]

    def fitted_arms(self) -> List[int]:
        """Number of arms fitted in each round (all arms first, then survivors)."""
        return [self.narms] + self.arms[:-1]

    def total(self) -> Dict[str, float]:
        """Resource spent by the whole schedule, per budget key."""
        totals: Dict[str, float] = {}
        for fitted, resource in zip(self.fitted_arms(), self.resources):
            for key, value in resource.items():
                totals[key] = totals.get(key, 0) + fitted * value
        return totals

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for i, (fitted, (arms, resource)) in enumerate(zip(self.fitted_arms(), self.rounds), start=1):
            rows.append({'round': i, 'arms_fitted': fitted, 'arms_retained': arms, **resource})
        return pd.DataFrame(rows)

    def __repr__(self) -> str:
        return f"Schedule({self.rounds!r})"


class SchedulePolicy(abc.ABC):
    """Computes a Schedule from a budget, an arm count and a reduction rate."""

    def compute(self, budget: Budget, narms: int, rate: float, nrounds: Optional[int] = None) -> Schedule:
        if not isinstance(budget, Budget):
            budget = Budget(budget)
        if narms < 1:
            raise ConfigurationError(f"narms must be >= 1, got {narms}")
        if not rate > 1:
            raise ConfigurationError(f"rate must be > 1, got {rate}")
        if nrounds is None:
            nrounds = self.default_rounds(budget, narms, rate)
        if nrounds < 1:
            raise ConfigurationError(f"nrounds must be >= 1, got {nrounds}")

        rounds = [
            (self._arms(narms, rate, i), self._resource(budget, narms, rate, nrounds, i))
            for i in range(1, nrounds + 1)
        ]
        return Schedule(rounds, narms)

    def default_rounds(self, budget: Budget, narms: int, rate: float) -> int:
        return floor_log(narms, rate) + 1

    def _arms(self, narms: int, rate: float, i: int) -> int:
        return max(1, round_half_up(narms / rate ** i))

    @abc.abstractmethod
    def _resource(self, budget: Budget, narms: int, rate: float, nrounds: int, i: int) -> Configuration:
        raise NotImplementedError("Subclasses must implement _resource.")

    @staticmethod
    def _cast_down(budget: Budget, numerator: float, denominator: float) -> Configuration:
        return Configuration(
            (k, math.floor(v * numerator / denominator) if isinstance(v, numbers.Integral)
             else float(v * numerator / denominator))
            for k, v in budget.items()
        )


class GeometricSchedule(SchedulePolicy):

    def _resource(self, budget, narms, rate, nrounds, i):
        arms = max(1, round_half_up(narms / rate ** (i - 1)))
        return self._cast_down(budget, 1, arms * nrounds)


class ConstantSchedule(SchedulePolicy):
    """
    Same per-arm resource in every round, scaled by
    ``c = (rate - 1) * rate**(nrounds - 1) / (narms * (rate**nrounds - 1))``.

    Survivor counts are rounded, so more arms can be fitted than the geometric
    series behind ``c`` assumes; a round's grant is then clamped to what is
    left of the budget, which keeps the schedule's total within the budget.
    """

    def compute(self, budget, narms, rate, nrounds=None):
        if not isinstance(budget, Budget):
            budget = Budget(budget)
        schedule = super().compute(budget, narms, rate, nrounds)

        remaining = dict(budget)
        rounds = []
        for fitted, (arms, resource) in zip(schedule.fitted_arms(), schedule.rounds):
            grant = Configuration(
                (k, min(v, self._share(budget[k], remaining[k], fitted))) for k, v in resource.items()
            )
            for k, v in grant.items():
                remaining[k] -= fitted * v
            rounds.append((arms, grant))
        return Schedule(rounds, narms)

    @staticmethod
    def _share(total, remaining, fitted):
        if isinstance(total, numbers.Integral):
            return max(0, remaining // fitted)
        return max(0.0, remaining / fitted)

    def _resource(self, budget, narms, rate, nrounds, i):
        return self._cast_down(budget, (rate - 1) * rate ** (nrounds - 1), narms * (rate ** nrounds - 1))


class HyperbandSchedule(SchedulePolicy):

    def default_rounds(self, budget, narms, rate):
        return floor_log(next(iter(budget.values())), rate) + 1

    def _arms(self, narms, rate, i):
        return max(1, math.floor(narms / rate ** i))

    def _resource(self, budget, narms, rate, nrounds, i):
        divisor = rate ** (nrounds - i)
        return Configuration(
            (k, round_half_up(v / divisor) if isinstance(v, numbers.Integral) else float(v / divisor))
            for k, v in budget.items()
        )


SCHEDULE_POLICIES: Dict[ScheduleMode, SchedulePolicy] = {
    ScheduleMode.GEOMETRIC: GeometricSchedule(),
    ScheduleMode.CONSTANT: ConstantSchedule(),
    ScheduleMode.HYPERBAND: HyperbandSchedule(),
}


def get_schedule_policy(mode: Union[str, ScheduleMode]) -> SchedulePolicy:
    try:
        return SCHEDULE_POLICIES[ScheduleMode(mode)]
    except ValueError:
        valid = [m.value for m in ScheduleMode]
        raise ConfigurationError(f"Unknown schedule mode: {mode}. Available: {valid}") from None


def compute_schedule(budget: Budget, narms: int, mode: Union[str, ScheduleMode] = ScheduleMode.GEOMETRIC,
                     rate: float = 2, nrounds: Optional[int] = None) -> Schedule:
    return get_schedule_policy(mode).compute(budget, narms, rate, nrounds)
