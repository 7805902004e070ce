"""
Functional entry points.

Each function builds the matching engine from ``config`` (a dict, see
``crossvalidation.config_manager.DEFAULT_CONFIG``) and ``logger`` and runs it
once. Without a logger, the ``logging`` section of the configuration is applied
to the package logger. Use the engine classes directly to keep the search
history.
"""
import logging
from typing import Any, Callable, Dict, Optional, Union

import numpy as np

from crossvalidation.budget import Budget, ScheduleMode
from crossvalidation.config_manager import resolve_config
from crossvalidation.logging_config import LoggingConfigurator
from crossvalidation.parameter_space import Configuration, ParameterSpace
from crossvalidation.resampler import Resampler
from crossvalidation.search_engine import (
    BruteSearch,
    HillClimbingSearch,
    HyperbandSearch,
    SashaSearch,
    SuccessiveHalvingSearch,
)
from crossvalidation.search_engine.base_search import Candidates
from crossvalidation.validation_engine import ValidationEngine

ModelType = Callable[..., Any]
BudgetLike = Union[Budget, Dict[str, float]]


def _prepare(config: Optional[dict], logger: Optional[logging.Logger]):
    config = resolve_config(config)
    if logger is None:
        LoggingConfigurator(config).setup()
    return config, logger


def validate(model_or_fit_fn: Any, resampler: Resampler, config: Optional[dict] = None,
             logger: Optional[logging.Logger] = None, **fit_args) -> np.ndarray:
    """One loss per resample fold for a model instance or a fitting function."""
    config, logger = _prepare(config, logger)
    return ValidationEngine(config, logger).execute(model_or_fit_fn, resampler, **fit_args)


def brute(model_type: ModelType, candidates: Candidates, resampler: Resampler, maximize: bool = True,
          config: Optional[dict] = None, logger: Optional[logging.Logger] = None, **fit_args) -> Configuration:
    """Best candidate by mean loss over all folds."""
    config, logger = _prepare(config, logger)
    return BruteSearch(config, logger).execute(model_type, candidates, resampler, maximize=maximize, **fit_args)


def hc(model_type: ModelType, space: ParameterSpace, resampler: Resampler, nstart: int = 1, k: int = 1,
       maximize: bool = True, random_state=None, config: Optional[dict] = None,
       logger: Optional[logging.Logger] = None, **fit_args) -> Optional[Configuration]:
    """Hill-climbing over a finite parameter space."""
    config, logger = _prepare(config, logger)
    return HillClimbingSearch(config, logger).execute(
        model_type, space, resampler, nstart=nstart, k=k, maximize=maximize, random_state=random_state, **fit_args
    )


def sha(model_type: ModelType, candidates: Candidates, resampler: Resampler, budget: BudgetLike,
        mode: Union[str, ScheduleMode] = ScheduleMode.GEOMETRIC, rate: Optional[float] = None,
        maximize: bool = True, nrounds: Optional[int] = None, config: Optional[dict] = None,
        logger: Optional[logging.Logger] = None, **fit_args) -> Configuration:
    """Successive halving; ``rate`` defaults to ``search.rate`` (2)."""
    config, logger = _prepare(config, logger)
    return SuccessiveHalvingSearch(config, logger).execute(
        model_type, candidates, resampler, budget, mode=mode, rate=rate, maximize=maximize, nrounds=nrounds,
        **fit_args
    )


def hyperband(model_type: ModelType, space: ParameterSpace, resampler: Resampler, budget: BudgetLike,
              rate: Optional[float] = None, maximize: bool = True, random_state=None,
              config: Optional[dict] = None, logger: Optional[logging.Logger] = None,
              **fit_args) -> Optional[Configuration]:
    """Hyperband; ``rate`` defaults to ``search.hyperband_rate`` (3)."""
    config, logger = _prepare(config, logger)
    return HyperbandSearch(config, logger).execute(
        model_type, space, resampler, budget, rate=rate, maximize=maximize, random_state=random_state, **fit_args
    )


def sasha(model_type: ModelType, candidates: Candidates, resampler: Resampler, temperature: Optional[float] = None,
          maximize: bool = True, random_state=None, max_rounds: Optional[int] = None,
          config: Optional[dict] = None, logger: Optional[logging.Logger] = None, **fit_args) -> Configuration:
    """Simulated-annealing successive halving; ``temperature`` defaults to ``search.temperature``."""
    config, logger = _prepare(config, logger)
    return SashaSearch(config, logger).execute(
        model_type, candidates, resampler, temperature=temperature, maximize=maximize,
        random_state=random_state, max_rounds=max_rounds, **fit_args
    )
