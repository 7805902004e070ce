"""
Shared helpers: exception hierarchy, error-handling decorator and
observation-level access to datasets.
"""

from .exceptions import CrossValidationError, ConfigurationError, CapabilityError, ModelEvaluationError
from .data import nobs, slice_obs

__all__ = [
    'CrossValidationError',
    'ConfigurationError',
    'CapabilityError',
    'ModelEvaluationError',
    'nobs',
    'slice_obs',
]
