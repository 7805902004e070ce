import logging
from unittest.mock import MagicMock

import numpy as np
import pytest

from crossvalidation.evaluation_engine import EvaluationEngine, build_model, fit_model, score_model
from crossvalidation.parameter_space import Configuration
from crossvalidation.utils.exceptions import CapabilityError, ModelEvaluationError


class Offset:
    """Score is the mean of the test data shifted by ``shift``; fit counts calls."""

    def __init__(self, shift=0.0):
        self.shift = shift
        self.calls = 0
        self.seen = {}

    def fit(self, x, **kwargs):
        self.calls += 1
        self.seen = kwargs
        return self

    def score(self, x):
        return float(np.mean(x)) + self.shift


class InPlace(Offset):
    def fit(self, x, **kwargs):
        self.calls += 1


class Pair:
    def fit(self, X, y):
        self.n = len(y)
        return self

    def score(self, X, y):
        return float(X.shape[-1] + len(y))


class Broken(Offset):
    def fit(self, x, **kwargs):
        raise RuntimeError("diverged")


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def config():
    return {'execution': {'n_jobs': 2, 'backend': 'threading'}}


def test_build_model_passes_configuration():
    model = build_model(Offset, Configuration(shift=2.5))
    assert model.shift == 2.5


def test_build_model_wraps_constructor_errors():
    with pytest.raises(ModelEvaluationError, match="Constructing Offset"):
        build_model(Offset, {'unknown': 1})


def test_fit_model_returns_fitted_or_self():
    model = Offset()
    assert fit_model(model, np.ones(3), epochs=2) is model
    assert model.seen == {'epochs': 2}
    in_place = InPlace()
    assert fit_model(in_place, np.ones(3)) is in_place
    assert in_place.calls == 1


def test_tuple_data_is_splatted():
    X, y = np.zeros((2, 5)), np.zeros(5)
    model = fit_model(Pair(), (X, y))
    assert model.n == 5
    assert score_model(model, (X, y)) == 10.0


def test_missing_capability():
    with pytest.raises(CapabilityError):
        fit_model(object(), np.ones(3))
    with pytest.raises(CapabilityError):
        score_model(object(), np.ones(3))


def test_fit_errors_are_chained():
    with pytest.raises(ModelEvaluationError) as excinfo:
        fit_model(Broken(), np.ones(3))
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_evaluate_keeps_input_order(config, mock_logger):
    engine = EvaluationEngine(config, mock_logger)
    configurations = [{'shift': s} for s in (3.0, -1.0, 0.5, 2.0)]
    losses = engine.evaluate(Offset, configurations, np.ones(4), np.full(4, 10.0))
    np.testing.assert_allclose(losses, [13.0, 9.0, 10.5, 12.0])


def test_fit_and_score_carries_models(config, mock_logger):
    engine = EvaluationEngine(config, mock_logger)
    models = [Offset(0.0), Offset(1.0)]
    for _ in range(3):
        models, losses = engine.fit_and_score(models, np.ones(2), np.zeros(2), epochs=5)
    assert [m.calls for m in models] == [3, 3]
    assert models[0].seen == {'epochs': 5}
    np.testing.assert_allclose(losses, [0.0, 1.0])


def test_engine_reads_execution_config(mock_logger):
    engine = EvaluationEngine({'execution': {'n_jobs': 3, 'backend': 'sequential', 'verbose': 1}}, mock_logger)
    assert (engine.n_jobs, engine.backend, engine.verbose) == (3, 'sequential', 1)


def test_engine_defaults():
    engine = EvaluationEngine()
    assert engine.n_jobs == 1
    assert engine.backend == 'loky'
