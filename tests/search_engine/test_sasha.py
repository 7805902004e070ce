import logging
from unittest.mock import MagicMock

import numpy as np
import pytest

from crossvalidation.parameter_space import Configuration, ParameterSpace
from crossvalidation.resampler import FixedSplit, KFold
from crossvalidation.search_engine import SashaSearch
from crossvalidation.utils.exceptions import ConfigurationError, ModelEvaluationError


class Constant:
    def __init__(self, value=0.0):
        self.value = value

    def fit(self, x, **kwargs):
        return self

    def score(self, x):
        return float(self.value)


class FixedDraws(np.random.RandomState):
    """RandomState whose uniform draws come from a fixed list."""

    def __init__(self, draws):
        super().__init__(0)
        self.draws = list(draws)

    def random_sample(self, size=None):
        return np.array([self.draws.pop(0) for _ in range(size)])


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def search(mock_logger):
    return SashaSearch({'execution': {'n_jobs': 1}}, mock_logger)


def test_converges_to_best_arm(search):
    candidates = [{'value': v} for v in (1.0, 5.0, 2.0, 4.0)]
    best = search.execute(Constant, candidates, FixedSplit(np.arange(10)), temperature=0.01, random_state=0)
    assert best == Configuration(value=5.0)
    assert search.best_loss_ == 5.0


def test_minimizing(search):
    candidates = [{'value': v} for v in (1.0, 5.0, 2.0, 4.0)]
    best = search.execute(Constant, candidates, FixedSplit(np.arange(10)), temperature=0.01, maximize=False,
                          random_state=0)
    assert best == Configuration(value=1.0)


@pytest.mark.parametrize("maximize, sign", [(True, -1.0), (False, 1.0)])
def test_survival_probability_sharpens_each_round(search, maximize, sign):
    # losses are 0, 1, 2 away from the best; round t keeps an arm when u <= exp(-t * gap)
    candidates = [{'value': sign * gap} for gap in (0.0, 1.0, 2.0)]
    draws = FixedDraws([0.5, 0.3, 0.2,   # round 1: p = 1, 0.368, 0.135
                        0.5, 0.2])       # round 2: p = 1, 0.135
    best = search.execute(Constant, candidates, FixedSplit(np.arange(10)), temperature=1.0, maximize=maximize,
                          random_state=draws)

    assert best == Configuration(value=0.0)
    assert draws.draws == []
    history = search.history_frame()
    assert list(history['round']) == [1, 1, 1, 2, 2]
    assert list(history['param_value']) == [0.0, sign, 2 * sign, 0.0, sign]


def test_best_arm_always_survives(search):
    space = ParameterSpace(value=np.linspace(0, 1, 12))
    best = search.execute(Constant, space, FixedSplit(np.arange(10)), temperature=5.0, random_state=3)
    assert best == Configuration(value=1.0)
    history = search.history_frame()
    for _, rows in history.groupby('round'):
        assert rows['loss'].max() == 1.0


def test_tied_arms_are_bounded_by_round_cap(search, mock_logger):
    candidates = [{'value': 2.0}, {'value': 2.0}]
    best = search.execute(Constant, candidates, FixedSplit(np.arange(10)), temperature=1.0, random_state=0,
                          max_rounds=5)
    assert best == Configuration(value=2.0)
    assert search.history_frame()['round'].max() == 5
    mock_logger.warning.assert_called_once()


def test_round_cap_from_configuration(mock_logger):
    config = {'execution': {'n_jobs': 1}, 'search': {'max_sasha_rounds': 3}}
    search = SashaSearch(config, mock_logger)
    search.execute(Constant, [{'value': 1.0}] * 3, FixedSplit(np.arange(10)), random_state=0)
    assert search.history_frame()['round'].max() == 3


def test_single_candidate_needs_no_rounds(search):
    best = search.execute(Constant, [{'value': 3.0}], FixedSplit(np.arange(10)))
    assert best == Configuration(value=3.0)
    assert search.history == []


def test_all_nan_losses(search):
    candidates = [{'value': float('nan')}, {'value': float('nan')}]
    with pytest.raises(ModelEvaluationError):
        search.execute(Constant, candidates, FixedSplit(np.arange(10)), random_state=0)


@pytest.mark.parametrize("temperature", [0, -1.0])
def test_invalid_temperature(search, temperature):
    with pytest.raises(ConfigurationError):
        search.execute(Constant, [{'value': 1.0}], FixedSplit(np.arange(10)), temperature=temperature)


def test_requires_single_fold(search):
    with pytest.raises(ConfigurationError):
        search.execute(Constant, [{'value': 1.0}, {'value': 2.0}], KFold(np.arange(10), k=5))
