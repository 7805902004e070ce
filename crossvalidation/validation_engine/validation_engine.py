"""
ValidationEngine for the crossvalidation package.

Estimates generalisation loss of a single model (or of a fitting procedure)
by fitting it on every train part of a resampler and scoring it on the
matching test part. No parameter search is involved.
"""
import copy
import logging
from typing import Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from scipy import stats

from crossvalidation.config_manager import resolve_config
from crossvalidation.evaluation_engine import fit_model, score_model
from crossvalidation.resampler import Resampler
from crossvalidation.utils.data import nobs, unpack
from crossvalidation.utils.error_handling import handle_search_errors
from crossvalidation.utils.exceptions import CapabilityError, ConfigurationError


def _validate_fold(model_or_fit_fn: Any, train: Any, test: Any, fit_args: Dict[str, Any]) -> Tuple[float, int, int]:
    """Helper for parallel fold execution. Returns (loss, n_train, n_test)."""
    if not isinstance(model_or_fit_fn, type) and hasattr(model_or_fit_fn, 'fit'):
        # Each fold trains its own copy so folds never share model state
        model = fit_model(copy.deepcopy(model_or_fit_fn), train, **fit_args)
    elif callable(model_or_fit_fn):
        model = model_or_fit_fn(*unpack(train), **fit_args)
    else:
        raise CapabilityError(f"{type(model_or_fit_fn).__name__} is neither a model nor a fitting function")
    return score_model(model, test), nobs(train), nobs(test)


class ValidationEngine:
    """
    Per-fold validation of a model or fitting function.

    Accepts either a model instance (deep-copied and fitted per fold with
    ``fit_args``) or a callable ``fit_fn(*train_parts, **fit_args)`` returning
    a fitted model, e.g. one that runs a nested parameter search.

    After ``execute``, ``folds`` holds one row per fold (sizes and loss) and
    ``summary`` one row of loss statistics across folds.
    """

    def __init__(self, config: Optional[dict] = None, logger: Optional[logging.Logger] = None):
        self.config = resolve_config(config)
        self.logger = logger or logging.getLogger(__name__)
        execution = self.config['execution']
        self.n_jobs = execution['n_jobs']
        self.backend = execution['backend']
        self.verbose = execution['verbose']
        self.folds: pd.DataFrame = pd.DataFrame()
        self.summary: pd.DataFrame = pd.DataFrame()

    @handle_search_errors("Validation")
    def execute(self, model_or_fit_fn: Any, resampler: Resampler, **fit_args) -> np.ndarray:
        """
        Fit and score on every fold.

        Returns:
            np.ndarray: one loss per fold, in resampler order.
        """
        if resampler.exhausted:
            raise ConfigurationError("Resampler is already exhausted.")
        n = len(resampler)
        self.logger.info(f"Starting validation over {n} folds...")

        results = Parallel(n_jobs=self.n_jobs, backend=self.backend, verbose=self.verbose)(
            delayed(_validate_fold)(model_or_fit_fn, train, test, fit_args)
            for train, test in resampler
        )
        self.folds = pd.DataFrame(
            [{'fold': i, 'n_train': n_train, 'n_test': n_test, 'loss': float(loss)}
             for i, (loss, n_train, n_test) in enumerate(results, start=1)],
            columns=['fold', 'n_train', 'n_test', 'loss'],
        )
        losses = self.folds['loss'].to_numpy(dtype=float)

        name = getattr(model_or_fit_fn, '__name__', type(model_or_fit_fn).__name__)
        self.summary = self._summarize(name, losses)
        for row in self.folds.itertuples(index=False):
            self.logger.debug(
                f"Fold {row.fold} of {n}: train={row.n_train}, test={row.n_test}, loss={row.loss:.4f}"
            )
        self.logger.info(f"Validation complete. Loss: {np.mean(losses):.4f} ± {np.std(losses):.4f}")
        return losses

    @staticmethod
    def _summarize(name: str, losses: np.ndarray) -> pd.DataFrame:
        return pd.DataFrame([{
            'model': name,
            'folds': len(losses),
            'mean': float(np.mean(losses)),
            'std': float(np.std(losses)),
            # standard error needs at least two folds
            'sem': float(stats.sem(losses)) if len(losses) > 1 else float('nan'),
            'min': float(np.min(losses)),
            'max': float(np.max(losses)),
        }])
