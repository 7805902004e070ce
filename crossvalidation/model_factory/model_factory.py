import inspect
from typing import Any, Dict, List, Optional

import numpy as np
from sklearn.ensemble import (
    ExtraTreesClassifier,
    ExtraTreesRegressor,
    GradientBoostingClassifier,
    GradientBoostingRegressor,
    HistGradientBoostingClassifier,
    HistGradientBoostingRegressor,
    RandomForestClassifier,
    RandomForestRegressor,
)
from sklearn.linear_model import (
    ElasticNet,
    Lasso,
    LogisticRegression,
    Ridge,
    SGDClassifier,
    SGDRegressor,
)
from sklearn.metrics import get_scorer
from sklearn.neighbors import KNeighborsClassifier, KNeighborsRegressor
from sklearn.neural_network import MLPClassifier, MLPRegressor
from sklearn.svm import SVC, SVR
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from crossvalidation.utils.exceptions import ConfigurationError


def _as_rows(X):
    """scikit-learn expects observations on rows; package arrays keep them on the last axis."""
    if isinstance(X, np.ndarray) and X.ndim == 2:
        return X.T
    return X


class EstimatorArm:
    """
    Adapts a scikit-learn estimator to the fit/score model contract.

    Keyword arguments given to ``fit`` that name estimator parameters are
    applied with ``set_params`` before fitting, so budget resources such as
    ``n_estimators`` or ``max_iter`` control the training effort. Combined
    with ``warm_start=True`` the estimator keeps its state between rounds.

    2-D numpy feature matrices are expected as ``(n_features, n_obs)`` and
    transposed before reaching the estimator; pandas inputs pass unchanged.
    """

    def __init__(self, estimator: Any, scoring: Optional[str] = None):
        self.estimator = estimator
        self.scoring = scoring

    def fit(self, X, y=None, **fit_args) -> 'EstimatorArm':
        valid = self.estimator.get_params(deep=False)
        params = {k: v for k, v in fit_args.items() if k in valid}
        extra = {k: v for k, v in fit_args.items() if k not in valid}
        if params:
            self.estimator.set_params(**params)
        self.estimator.fit(_as_rows(X), y, **extra)
        return self

    def score(self, X, y=None) -> float:
        if self.scoring is None:
            return float(self.estimator.score(_as_rows(X), y))
        return float(get_scorer(self.scoring)(self.estimator, _as_rows(X), y))

    def __repr__(self):
        return f"EstimatorArm({self.estimator!r}, scoring={self.scoring!r})"


class _ArmConstructor:
    """Model type producing EstimatorArm instances for one registered estimator."""

    def __init__(self, name: str, scoring: Optional[str], fixed: Dict[str, Any]):
        self.__name__ = name
        self.scoring = scoring
        self.fixed = fixed

    def __call__(self, **configuration) -> EstimatorArm:
        estimator = ModelFactory.create(self.__name__, {**self.fixed, **configuration})
        return EstimatorArm(estimator, self.scoring)

    def __repr__(self):
        return f"ModelFactory.constructor({self.__name__!r}, scoring={self.scoring!r})"


class ModelFactory:
    """
    Factory for scikit-learn estimators that can be searched by name.
    """

    REGRESSORS = {
        'ExtraTreesRegressor': ExtraTreesRegressor,
        'RandomForestRegressor': RandomForestRegressor,
        'GradientBoostingRegressor': GradientBoostingRegressor,
        'HistGradientBoostingRegressor': HistGradientBoostingRegressor,
        'DecisionTreeRegressor': DecisionTreeRegressor,
        'KNeighborsRegressor': KNeighborsRegressor,
        'MLPRegressor': MLPRegressor,
        'Ridge': Ridge,
        'Lasso': Lasso,
        'ElasticNet': ElasticNet,
        'SGDRegressor': SGDRegressor,
        'SVR': SVR,
    }

    CLASSIFIERS = {
        'ExtraTreesClassifier': ExtraTreesClassifier,
        'RandomForestClassifier': RandomForestClassifier,
        'GradientBoostingClassifier': GradientBoostingClassifier,
        'HistGradientBoostingClassifier': HistGradientBoostingClassifier,
        'DecisionTreeClassifier': DecisionTreeClassifier,
        'KNeighborsClassifier': KNeighborsClassifier,
        'MLPClassifier': MLPClassifier,
        'LogisticRegression': LogisticRegression,
        'SGDClassifier': SGDClassifier,
        'SVC': SVC,
    }

    @classmethod
    def create(cls, model_name: str, params: Dict[str, Any] = None) -> Any:
        """
        Create and return an instantiated estimator.
        """
        if params is None:
            params = {}

        model_class = cls.REGRESSORS.get(model_name) or cls.CLASSIFIERS.get(model_name)
        if model_class is None:
            raise ConfigurationError(
                f"Unknown model name: {model_name}. Available: {cls.get_available_models()}"
            )
        return model_class(**cls._filter_params(model_class, params))

    @classmethod
    def constructor(cls, model_name: str, scoring: Optional[str] = None, **fixed) -> _ArmConstructor:
        """
        Model type for the search functions: ``T(**configuration)`` returns an
        EstimatorArm around ``model_name`` built with ``fixed`` and the
        configuration's values (the configuration wins on conflicts).
        """
        if model_name not in cls.get_available_models():
            raise ConfigurationError(
                f"Unknown model name: {model_name}. Available: {cls.get_available_models()}"
            )
        if scoring is not None:
            # Fail on a misspelt scorer before any search starts.
            try:
                get_scorer(scoring)
            except ValueError as e:
                raise ConfigurationError(f"Unknown scoring: {scoring}") from e
        return _ArmConstructor(model_name, scoring, fixed)

    @classmethod
    def get_available_models(cls) -> List[str]:
        """Return list of all supported model names."""
        return sorted(list(cls.REGRESSORS.keys()) + list(cls.CLASSIFIERS.keys()))

    @staticmethod
    def _filter_params(model_class, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Remove parameters from `params` that are not accepted by `model_class` constructor.
        """
        sig = inspect.signature(model_class.__init__)

        valid_keys = [
            p.name for p in sig.parameters.values()
            if p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
        ]

        if any(p.kind == p.VAR_KEYWORD for p in sig.parameters.values()):
            return params

        return {k: v for k, v in params.items() if k in valid_keys}
