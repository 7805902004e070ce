"""
Evaluation Engine
=================

Responsibility:
- Fit+score trials of many candidates against one train/test pair.
- Parallel fan-out over candidates (joblib), results in input order.
- Model contract checks (fit/score capability) and error wrapping.
"""

from .evaluation_engine import EvaluationEngine, build_model, fit_model, score_model

__all__ = ['EvaluationEngine', 'build_model', 'fit_model', 'score_model']
