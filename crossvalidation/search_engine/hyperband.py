import math
from typing import Any, Callable, Dict, Optional, Union

from crossvalidation.budget import Budget, ScheduleMode, get_schedule_policy
from crossvalidation.parameter_space import Configuration, ParameterSpace, sample
from crossvalidation.resampler import Resampler
from crossvalidation.search_engine.successive_halving import SuccessiveHalvingSearch
from crossvalidation.utils.error_handling import handle_search_errors
from crossvalidation.utils.exceptions import ConfigurationError


class HyperbandSearch(SuccessiveHalvingSearch):
    """
    Hyperband: successive halving repeated over brackets of decreasing
    aggressiveness.

    With ``n = floor(log_rate(R)) + 1`` (``R`` the first budget resource),
    bracket ``i = n .. 1`` samples ``ceil(n * rate**(i-1) / i)`` fresh
    configurations and runs one halving pass of ``i`` rounds under the
    hyperband schedule. The best final loss across brackets wins; later
    brackets replace it only on strict improvement.
    """

    @handle_search_errors("Hyperband")
    def execute(self, model_type: Callable[..., Any], space: ParameterSpace, resampler: Resampler,
                budget: Union[Budget, Dict[str, float]], rate: Optional[float] = None, maximize: bool = True,
                random_state=None, **fit_args) -> Optional[Configuration]:
        if not isinstance(space, ParameterSpace):
            raise ConfigurationError("Hyperband requires a ParameterSpace to sample from.")
        if not isinstance(budget, Budget):
            budget = Budget(budget)
        rate = self.search_config['hyperband_rate'] if rate is None else rate

        policy = get_schedule_policy(ScheduleMode.HYPERBAND)
        n = policy.default_rounds(budget, 1, rate)
        rng = self._random_state(random_state)
        train, test = self._single_fold(resampler)

        self.logger.info(f"Starting hyperband: {n} brackets, budget={dict(budget)}, rate={rate}...")
        best_configuration = None
        best_loss = float('-inf') if maximize else float('inf')

        for i in range(n, 0, -1):
            narms = math.ceil(n * rate ** (i - 1) / i)
            candidates = sample(space, narms, rng)
            schedule = policy.compute(budget, narms, rate, nrounds=i)
            self.logger.info(f"Bracket {i}: {narms} arms, {i} rounds")

            configuration, loss = self._halving(model_type, candidates, train, test, schedule, maximize,
                                                fit_args, bracket=i)
            if self._improves(loss, best_loss, maximize):
                best_configuration, best_loss = configuration, loss
                self.logger.info(f"Bracket {i}: new best {configuration} (loss: {loss:.4f})")

        if best_configuration is None:
            self.logger.warning("Hyperband found no configuration with a comparable loss.")
            return None

        self.best_loss_ = best_loss
        return best_configuration
