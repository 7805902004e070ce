import logging
from unittest.mock import MagicMock

import numpy as np
import pytest

from crossvalidation.resampler import FixedSplit, KFold, LeavePOut
from crossvalidation.utils.exceptions import (
    CapabilityError,
    ConfigurationError,
    CrossValidationError,
    ModelEvaluationError,
)
from crossvalidation.validation_engine import ValidationEngine


class MeanModel:
    """Predicts the training mean; score is the squared error on the test mean."""

    def __init__(self):
        self.mean = None

    def fit(self, x, shift=0.0):
        self.mean = float(np.mean(x)) + shift
        return self

    def score(self, x):
        return (float(np.mean(x)) - self.mean) ** 2


class LeakyModel:
    def fit(self, x):
        raise KeyError("column")

    def score(self, x):
        return 0.0


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def engine(mock_logger):
    return ValidationEngine({'execution': {'n_jobs': 1}}, mock_logger)


def test_one_loss_per_fold(engine):
    losses = engine.execute(MeanModel(), KFold(np.arange(20.0), k=4, random_state=0))
    assert losses.shape == (4,)
    assert np.all(losses >= 0)


def test_model_instance_is_not_mutated(engine):
    model = MeanModel()
    engine.execute(model, LeavePOut(np.arange(10.0), p=5))
    assert model.mean is None


def test_fit_args_are_forwarded(engine):
    losses = engine.execute(MeanModel(), FixedSplit(np.zeros(10), m=5), shift=2.0)
    np.testing.assert_allclose(losses, [4.0])


def test_fit_function(engine):
    def fit_fn(x):
        return MeanModel().fit(x)

    losses = engine.execute(fit_fn, LeavePOut(np.array([0.0, 0.0, 4.0, 4.0]), p=2, shuffle=False))
    # fold 1 trains on [4, 4] tests on [0, 0]; fold 2 the reverse
    np.testing.assert_allclose(losses, [16.0, 16.0])


def test_summary_frame(engine, mock_logger):
    losses = engine.execute(MeanModel(), KFold(np.arange(30.0), k=3, random_state=1))
    row = engine.summary.iloc[0]
    assert row['model'] == 'MeanModel'
    assert row['folds'] == 3
    assert row['mean'] == pytest.approx(losses.mean())
    assert row['sem'] == pytest.approx(losses.std(ddof=1) / np.sqrt(3))
    assert row['max'] == pytest.approx(losses.max())
    mock_logger.info.assert_any_call("Starting validation over 3 folds...")


def test_fold_table(engine):
    engine.execute(MeanModel(), KFold(np.arange(10.0), k=3, shuffle=False))
    assert list(engine.folds['fold']) == [1, 2, 3]
    assert list(engine.folds['n_test']) == [4, 3, 3]
    assert list(engine.folds['n_train']) == [6, 7, 7]


def test_single_fold_has_no_standard_error(engine):
    engine.execute(MeanModel(), FixedSplit(np.zeros(10), m=5), shift=2.0)
    assert list(engine.folds['loss']) == [4.0]
    assert np.isnan(engine.summary.iloc[0]['sem'])


def test_not_a_model(engine):
    with pytest.raises(CapabilityError):
        engine.execute(42, FixedSplit(np.arange(10)))


def test_fit_failure_is_wrapped(engine):
    with pytest.raises(ModelEvaluationError) as excinfo:
        engine.execute(LeakyModel(), FixedSplit(np.arange(10)))
    assert isinstance(excinfo.value, CrossValidationError)
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_threading_backend(mock_logger):
    engine = ValidationEngine({'execution': {'n_jobs': 2, 'backend': 'threading'}}, mock_logger)
    losses = engine.execute(MeanModel(), KFold(np.arange(40.0), k=4, random_state=0))
    assert len(losses) == 4


def test_exhausted_resampler(engine):
    r = FixedSplit(np.arange(10))
    next(r)
    with pytest.raises(ConfigurationError):
        engine.execute(MeanModel(), r)
