"""
Parameter Space
===============

Responsibility:
- Named collections of finite (enumerable) or infinite (sampled) generators.
- Mixed-radix indexing and enumeration of finite grids.
- Distinct/independent random draws of configuration records.
"""

from .distributions import Distribution, Discrete, Uniform, LogUniform, Normal
from .parameter_space import Configuration, ParameterSpace, sample, sample_indices

__all__ = [
    'Distribution',
    'Discrete',
    'Uniform',
    'LogUniform',
    'Normal',
    'Configuration',
    'ParameterSpace',
    'sample',
    'sample_indices',
]
