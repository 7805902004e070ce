"""
Model Factory
=============

Responsibility:
- Named registry of scikit-learn regressors and classifiers.
- Constructor parameter filtering.
- EstimatorArm: fit/score adapter mapping budget resources to estimator parameters.
"""

from .model_factory import EstimatorArm, ModelFactory

__all__ = ['EstimatorArm', 'ModelFactory']
