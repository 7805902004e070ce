"""
EvaluationEngine for the crossvalidation package.

Fits and scores models against one fixed (train, test) pair. Every
fit+score is independent, so the work for a list of candidates is fanned out
with joblib and gathered back in input order.
"""
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed

from crossvalidation.config_manager import resolve_config
from crossvalidation.utils.data import unpack
from crossvalidation.utils.exceptions import CapabilityError, CrossValidationError, ModelEvaluationError


def build_model(model_type: Callable[..., Any], configuration: Mapping[str, Any]) -> Any:
    """Instantiate ``model_type`` with the configuration's values as keyword arguments."""
    try:
        return model_type(**configuration)
    except CrossValidationError:
        raise
    except Exception as e:
        name = getattr(model_type, '__name__', repr(model_type))
        raise ModelEvaluationError(f"Constructing {name} with {dict(configuration)} failed: {e}") from e


def fit_model(model: Any, data: Any, **fit_args) -> Any:
    """
    Fit ``model`` on ``data`` and return the fitted model.

    Tuple datasets are passed positionally (``model.fit(X, y, **fit_args)``).
    The value returned by ``fit`` is the fitted model; ``None`` means the
    model was fitted in place.
    """
    fit = getattr(model, 'fit', None)
    if not callable(fit):
        raise CapabilityError(f"{type(model).__name__} does not implement fit")
    try:
        fitted = fit(*unpack(data), **fit_args)
    except CrossValidationError:
        raise
    except Exception as e:
        raise ModelEvaluationError(f"Fitting {type(model).__name__} failed: {e}") from e
    return model if fitted is None else fitted


def score_model(model: Any, data: Any) -> float:
    """Score a fitted ``model`` on ``data`` (``model.score(X, y)`` for tuples)."""
    score = getattr(model, 'score', None)
    if not callable(score):
        raise CapabilityError(f"{type(model).__name__} does not implement score")
    try:
        return float(score(*unpack(data)))
    except CrossValidationError:
        raise
    except Exception as e:
        raise ModelEvaluationError(f"Scoring {type(model).__name__} failed: {e}") from e


def _fit_and_score(model: Any, train: Any, test: Any, fit_args: Dict[str, Any]) -> Tuple[Any, float]:
    """Helper for parallel arm execution."""
    model = fit_model(model, train, **fit_args)
    return model, score_model(model, test)


def _build_fit_and_score(model_type, configuration, train, test, fit_args) -> float:
    model = build_model(model_type, configuration)
    return _fit_and_score(model, train, test, fit_args)[1]


class EvaluationEngine:
    """
    Runs fit+score trials for many candidates against one train/test pair.

    Parallelism comes from ``config['execution']`` (``n_jobs``, ``backend``,
    ``verbose``). Results always follow the order of the inputs.
    """

    def __init__(self, config: Optional[dict] = None, logger: Optional[logging.Logger] = None):
        self.config = resolve_config(config)
        self.logger = logger or logging.getLogger(__name__)
        execution = self.config['execution']
        self.n_jobs = execution['n_jobs']
        self.backend = execution['backend']
        self.verbose = execution['verbose']

    def _parallel(self) -> Parallel:
        return Parallel(n_jobs=self.n_jobs, backend=self.backend, verbose=self.verbose)

    def evaluate(self, model_type: Callable[..., Any], configurations: Sequence[Mapping[str, Any]],
                 train: Any, test: Any, **fit_args) -> np.ndarray:
        """
        Build, fit and score one model per configuration.

        Returns:
            np.ndarray: losses, aligned with ``configurations``.
        """
        self.logger.debug(f"Evaluating {len(configurations)} configurations (n_jobs={self.n_jobs})")
        losses = self._parallel()(
            delayed(_build_fit_and_score)(model_type, configuration, train, test, fit_args)
            for configuration in configurations
        )
        return np.asarray(losses, dtype=float)

    def fit_and_score(self, models: Sequence[Any], train: Any, test: Any,
                      **fit_args) -> Tuple[List[Any], np.ndarray]:
        """
        Continue fitting already-built arm models and score them.

        Returns:
            (models, losses): the fitted models and their losses, in input order.
        """
        self.logger.debug(f"Fitting {len(models)} arms with {fit_args}")
        results = self._parallel()(
            delayed(_fit_and_score)(model, train, test, fit_args)
            for model in models
        )
        fitted = [model for model, _ in results]
        losses = np.asarray([loss for _, loss in results], dtype=float)
        return fitted, losses
