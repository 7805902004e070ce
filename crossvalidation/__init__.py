"""
crossvalidation
===============

Resampling-based model validation and budgeted hyperparameter search
over any model type exposing ``fit`` and ``score``.
"""

from .api import brute, hc, hyperband, sasha, sha, validate
from .budget import Budget, ScheduleMode, compute_schedule
from .parameter_space import (
    Configuration,
    Discrete,
    LogUniform,
    Normal,
    ParameterSpace,
    Uniform,
    sample,
)
from .resampler import (
    FixedSplit,
    ForwardChaining,
    KFold,
    LeaveOneOut,
    LeavePOut,
    PreProcess,
    RandomSplit,
    SlidingWindow,
)
from .utils.exceptions import CapabilityError, ConfigurationError, CrossValidationError, ModelEvaluationError

__version__ = "0.1.0"

__all__ = [
    'validate', 'brute', 'hc', 'sha', 'hyperband', 'sasha',
    'Budget', 'ScheduleMode', 'compute_schedule',
    'Configuration', 'ParameterSpace', 'Discrete', 'Uniform', 'LogUniform', 'Normal', 'sample',
    'FixedSplit', 'RandomSplit', 'LeavePOut', 'LeaveOneOut', 'KFold', 'ForwardChaining', 'SlidingWindow',
    'PreProcess',
    'CrossValidationError', 'ConfigurationError', 'CapabilityError', 'ModelEvaluationError',
]
