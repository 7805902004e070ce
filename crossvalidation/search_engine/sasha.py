from typing import Any, Callable, Optional

import numpy as np

from crossvalidation.evaluation_engine import build_model
from crossvalidation.parameter_space import Configuration
from crossvalidation.resampler import Resampler
from crossvalidation.search_engine.base_search import BaseSearch, Candidates
from crossvalidation.utils.error_handling import handle_search_errors
from crossvalidation.utils.exceptions import ConfigurationError, ModelEvaluationError


class SashaSearch(BaseSearch):
    """
    Simulated-annealing successive halving.

    In round ``t`` (starting at 1) every surviving arm is fitted with the same
    fixed arguments and scored. An arm survives with probability
    ``exp(t * (loss - best) / temperature)`` when maximizing (sign inverted
    when minimizing), where ``best`` is the round's best loss. The probability
    is not clipped, so the round's best arm always survives. Rounds continue
    until one arm is left.

    Tied arms keep a survival probability of 1 forever, so ``max_rounds`` caps
    the number of rounds; when reached, the best survivor of the last round is
    returned.
    """

    @handle_search_errors("SASHA")
    def execute(self, model_type: Callable[..., Any], candidates: Candidates, resampler: Resampler,
                temperature: Optional[float] = None, maximize: bool = True, random_state=None,
                max_rounds: Optional[int] = None, **fit_args) -> Configuration:
        temperature = self.search_config['temperature'] if temperature is None else temperature
        if not temperature > 0:
            raise ConfigurationError(f"temperature must be > 0, got {temperature}")
        max_rounds = self.search_config['max_sasha_rounds'] if max_rounds is None else max_rounds
        if max_rounds < 1:
            raise ConfigurationError(f"max_rounds must be >= 1, got {max_rounds}")

        arms = self._candidates(candidates)
        rng = self._random_state(random_state, 'annealing')
        train, test = self._single_fold(resampler)

        self.logger.info(f"Starting SASHA: {len(arms)} arms, temperature={temperature}...")
        models = [build_model(model_type, configuration) for configuration in arms]
        losses = None

        t = 1
        while len(arms) > 1:
            if t > max_rounds:
                i = self._best_index(losses, maximize)
                self.logger.warning(
                    f"SASHA reached max_rounds ({max_rounds}) with {len(arms)} arms left; "
                    f"returning the best survivor."
                )
                self.best_loss_ = float(losses[i])
                return arms[i]

            models, losses = self.engine.fit_and_score(models, train, test, **fit_args)
            self._record(arms, losses, round=t)

            best = np.max(losses) if maximize else np.min(losses)
            if maximize:
                prob = np.exp(t * (losses - best) / temperature)
            else:
                prob = np.exp(-t * (losses - best) / temperature)
            keep = rng.random_sample(len(arms)) <= prob
            if not keep.any():
                raise ModelEvaluationError("SASHA eliminated every arm; losses contain NaN.")

            arms = [a for a, k in zip(arms, keep) if k]
            models = [m for m, k in zip(models, keep) if k]
            losses = losses[keep]
            self.logger.info(f"Round {t}: kept {len(arms)} arms (best loss: {best:.4f})")
            t += 1

        if losses is not None:
            self.best_loss_ = float(losses[0])
        self.logger.info(f"Selected configuration: {arms[0]}")
        return arms[0]
