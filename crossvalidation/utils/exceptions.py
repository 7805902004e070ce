"""
Custom exception hierarchy for the crossvalidation package.
"""

class CrossValidationError(Exception):
    """Base exception for all package errors."""
    pass

class ConfigurationError(CrossValidationError):
    """Invalid resampling sizes, search arguments or configuration."""
    pass

class CapabilityError(CrossValidationError):
    """Model type does not implement a required operation (fit/score)."""
    pass

class ModelEvaluationError(CrossValidationError):
    """Fitting or scoring a model failed."""
    pass
