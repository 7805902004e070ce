from typing import Any, Callable, Optional

from crossvalidation.parameter_space import Configuration, ParameterSpace, sample_indices
from crossvalidation.resampler import Resampler
from crossvalidation.search_engine.base_search import BaseSearch
from crossvalidation.utils.error_handling import handle_search_errors
from crossvalidation.utils.exceptions import ConfigurationError


class HillClimbingSearch(BaseSearch):
    """
    Local search over the grid of a finite ParameterSpace.

    Starts from ``nstart`` random grid points. Each round evaluates the
    current candidates on all folds; the best of them becomes the new incumbent
    if it strictly improves on the previous one, and its unvisited neighbours
    (up to ``k`` steps along each parameter) become the next candidates. The
    search stops when there is no improvement or no unvisited neighbour left.
    """

    @handle_search_errors("Hill-climbing search")
    def execute(self, model_type: Callable[..., Any], space: ParameterSpace, resampler: Resampler,
                nstart: int = 1, k: int = 1, maximize: bool = True, random_state=None,
                **fit_args) -> Optional[Configuration]:
        if not isinstance(space, ParameterSpace) or not space.is_finite:
            raise ConfigurationError("Hill-climbing requires a finite ParameterSpace.")
        if k < 1:
            raise ConfigurationError(f"k must be >= 1, got {k}")
        if nstart < 1:
            raise ConfigurationError(f"nstart must be >= 1, got {nstart}")

        rng = self._random_state(random_state)
        folds = list(resampler)
        if not folds:
            raise ConfigurationError("Resampler produced no folds.")

        self.logger.info(f"Starting hill-climbing: {nstart} start points, k={k}, {len(folds)} folds...")
        candidates = sample_indices(space, nstart, rng)
        visited = set()
        best_index = None
        best_loss = float('-inf') if maximize else float('inf')

        round_no = 0
        while candidates:
            round_no += 1
            visited.update(candidates)
            configurations = [space[i] for i in candidates]
            losses = self._mean_loss(model_type, configurations, folds, fit_args)
            self._record(configurations, losses, round=round_no)

            i = self._best_index(losses, maximize)
            if not self._improves(losses[i], best_loss, maximize):
                self.logger.info(f"Round {round_no}: no improvement over {best_loss:.4f}, stopping.")
                break

            best_index, best_loss = candidates[i], float(losses[i])
            self.logger.info(f"Round {round_no}: new best {space[best_index]} (loss: {best_loss:.4f})")
            candidates = space.neighbors(best_index, k, visited)

        if best_index is None:
            self.logger.warning("Hill-climbing found no configuration with a comparable loss.")
            return None

        self.best_loss_ = best_loss
        return space[best_index]
