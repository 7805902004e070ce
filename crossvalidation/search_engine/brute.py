from typing import Any, Callable

import numpy as np

from crossvalidation.evaluation_engine import build_model, fit_model
from crossvalidation.parameter_space import Configuration
from crossvalidation.resampler import Resampler
from crossvalidation.search_engine.base_search import BaseSearch, Candidates
from crossvalidation.utils.error_handling import handle_search_errors
from crossvalidation.utils.exceptions import ConfigurationError


class BruteSearch(BaseSearch):
    """
    Exhaustive search.

    Every candidate is fitted and scored on every fold; the candidate with the
    best mean loss across folds is selected and refitted on the whole dataset
    (``best_model_``).
    """

    @handle_search_errors("Brute-force search")
    def execute(self, model_type: Callable[..., Any], candidates: Candidates, resampler: Resampler,
                maximize: bool = True, **fit_args) -> Configuration:
        """
        Args:
            model_type: Constructor taking a configuration's values as keyword arguments.
            candidates: List of configurations or a finite ParameterSpace.
            resampler: Source of (train, test) folds.
            maximize: Select the highest (True) or lowest (False) mean loss.
            **fit_args: Fixed keyword arguments for every ``fit`` call.

        Returns:
            Configuration: the selected candidate.
        """
        candidates = self._candidates(candidates)
        if resampler.exhausted:
            raise ConfigurationError("Resampler is already exhausted.")
        n = len(resampler)
        self.logger.info(f"Starting brute-force search: {len(candidates)} candidates x {n} folds...")

        total = np.zeros(len(candidates))
        seen = 0
        for i, (train, test) in enumerate(resampler, start=1):
            losses = self.engine.evaluate(model_type, candidates, train, test, **fit_args)
            self._record(candidates, losses, fold=i)
            total += losses
            seen = i
            best = np.max(losses) if maximize else np.min(losses)
            self.logger.info(f"Completed fold {i} of {n} (best loss: {best:.4f})")

        mean = total / seen
        idx = self._best_index(mean, maximize)
        best = candidates[idx]
        self.best_loss_ = float(mean[idx])
        self.logger.info(f"Best configuration: {best} (mean loss: {self.best_loss_:.4f} over {seen} folds)")

        self.logger.info(f"Refitting {best} on all {resampler.nobs} observations...")
        self.best_model_ = fit_model(build_model(model_type, best), resampler.data, **fit_args)
        return best
