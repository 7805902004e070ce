from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from crossvalidation.budget import Budget, Schedule, ScheduleMode, compute_schedule
from crossvalidation.evaluation_engine import build_model
from crossvalidation.parameter_space import Configuration
from crossvalidation.resampler import Resampler
from crossvalidation.search_engine.base_search import BaseSearch, Candidates
from crossvalidation.utils.error_handling import handle_search_errors


class SuccessiveHalvingSearch(BaseSearch):
    """
    Successive halving (SHA) over a single train/test pair.

    Every candidate becomes an arm with its own model. Each schedule round
    fits the surviving arms with the round's resource, scores them and keeps
    the best ``arms_to_retain``. Models carry over between rounds, so a model
    that supports incremental training continues where it stopped.
    """

    @handle_search_errors("Successive halving")
    def execute(self, model_type: Callable[..., Any], candidates: Candidates, resampler: Resampler,
                budget: Union[Budget, Dict[str, float]], mode: Union[str, ScheduleMode] = ScheduleMode.GEOMETRIC,
                rate: Optional[float] = None, maximize: bool = True, nrounds: Optional[int] = None,
                **fit_args) -> Configuration:
        """
        Args:
            model_type: Constructor taking a configuration's values as keyword arguments.
            candidates: List of configurations or a finite ParameterSpace.
            resampler: Resampler with exactly one fold.
            budget: Total resources, e.g. ``Budget(epochs=100)``.
            mode: 'geometric' or 'constant' allocation of the budget.
            rate: Reduction rate (> 1); defaults to ``search.rate``.
            maximize: Keep arms with the highest (True) or lowest (False) loss.
            nrounds: Explicit number of rounds.
            **fit_args: Fixed keyword arguments merged under each round's resource.

        Returns:
            Configuration: the surviving arm.
        """
        candidates = self._candidates(candidates)
        rate = self.search_config['rate'] if rate is None else rate
        schedule = compute_schedule(budget, len(candidates), mode, rate, nrounds)
        train, test = self._single_fold(resampler)

        self.logger.info(
            f"Starting successive halving: {len(candidates)} arms, {len(schedule)} rounds "
            f"({ScheduleMode(mode).value} schedule, rate={rate})..."
        )
        configuration, loss = self._halving(model_type, candidates, train, test, schedule, maximize, fit_args)
        self.best_loss_ = loss
        self.logger.info(f"Selected configuration: {configuration} (loss: {loss:.4f})")
        return configuration

    def _halving(self, model_type: Callable[..., Any], candidates: Sequence[Configuration], train: Any, test: Any,
                 schedule: Schedule, maximize: bool, fit_args: Dict[str, Any],
                 **labels) -> Tuple[Configuration, float]:
        """Run one elimination pass; returns the best surviving arm and its last loss."""
        arms: List[Configuration] = list(candidates)
        models = [build_model(model_type, configuration) for configuration in arms]
        losses = None

        for round_no, (keep, resource) in enumerate(schedule, start=1):
            models, losses = self.engine.fit_and_score(models, train, test, **{**fit_args, **resource})
            self._record(arms, losses, **labels, round=round_no,
                         **{f"resource_{k}": v for k, v in resource.items()})

            order = self._ranking(losses, maximize)[:keep]
            arms = [arms[i] for i in order]
            models = [models[i] for i in order]
            losses = losses[order]
            self.logger.info(
                f"Round {round_no}/{len(schedule)}: kept {len(arms)} arms (best loss: {losses[0]:.4f})"
            )

        return arms[0], float(losses[0])
