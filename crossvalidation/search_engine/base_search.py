import abc
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.utils import check_random_state

from crossvalidation.config_manager import resolve_config
from crossvalidation.evaluation_engine import EvaluationEngine
from crossvalidation.parameter_space import Configuration, ParameterSpace
from crossvalidation.resampler import Resampler
from crossvalidation.utils.exceptions import ConfigurationError

Candidates = Union[ParameterSpace, Iterable[Mapping[str, Any]]]


class BaseSearch(abc.ABC):
    """
    Abstract base class for all search engines.

    Provides common functionality for:
    - Configuration, logger and evaluation engine attachment.
    - Candidate and resampler checks shared by the algorithms.
    - A search history with one record per evaluated arm.
    """

    def __init__(self, config: Optional[dict] = None, logger: Optional[logging.Logger] = None):
        self.config = resolve_config(config)
        self.logger = logger or logging.getLogger(self.__class__.__module__)
        self.search_config = self.config['search']
        self.engine = EvaluationEngine(self.config, self.logger)
        self.history: List[Dict[str, Any]] = []
        self.best_loss_: Optional[float] = None
        self.best_model_: Any = None

    @abc.abstractmethod
    def execute(self, *args, **kwargs) -> Optional[Configuration]:
        """
        Run the search and return the selected configuration.
        This must be implemented by all subclasses.
        """
        pass

    def history_frame(self) -> pd.DataFrame:
        """Search history as a DataFrame (``param_<name>`` columns per parameter)."""
        return pd.DataFrame(self.history)

    def _record(self, configurations: Sequence[Mapping[str, Any]], losses: np.ndarray, **labels) -> None:
        for configuration, loss in zip(configurations, losses):
            self.history.append({
                **labels,
                **{f"param_{k}": v for k, v in configuration.items()},
                'loss': float(loss),
            })

    def _random_state(self, random_state, key: str = 'sampling') -> np.random.RandomState:
        if random_state is None:
            random_state = self.config['_internal_seeds'][key]
        return check_random_state(random_state)

    @staticmethod
    def _candidates(candidates: Candidates) -> List[Configuration]:
        if isinstance(candidates, ParameterSpace):
            candidates = candidates.collect()
        candidates = [c if isinstance(c, Configuration) else Configuration(c) for c in candidates]
        if not candidates:
            raise ConfigurationError("Candidate list cannot be empty.")
        return candidates

    @staticmethod
    def _single_fold(resampler: Resampler) -> Tuple[Any, Any]:
        if len(resampler) != 1:
            raise ConfigurationError(f"Search requires exactly one resample fold, got {len(resampler)}.")
        if resampler.exhausted:
            raise ConfigurationError("Resampler is already exhausted.")
        return next(resampler)

    @staticmethod
    def _best_index(losses: np.ndarray, maximize: bool) -> int:
        return int(np.argmax(losses) if maximize else np.argmin(losses))

    @staticmethod
    def _ranking(losses: np.ndarray, maximize: bool) -> np.ndarray:
        """Arm indices from best to worst; ties keep input order."""
        return np.argsort(-losses if maximize else losses, kind='stable')

    @staticmethod
    def _improves(loss: float, best: float, maximize: bool) -> bool:
        return loss > best if maximize else loss < best

    def _mean_loss(self, model_type, configurations, folds, fit_args) -> np.ndarray:
        total = np.zeros(len(configurations))
        for train, test in folds:
            total += self.engine.evaluate(model_type, configurations, train, test, **fit_args)
        return total / len(folds)
