"""
Validation Engine
=================

Responsibility:
- Per-fold fit/score of one model or fitting function over a resampler.
- Summary of fold losses (mean, spread) for logging and inspection.
"""

from .validation_engine import ValidationEngine

__all__ = ['ValidationEngine']
