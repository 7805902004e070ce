"""
Resampler
=========

Responsibility:
- Partition a dataset into a known number of (train, test) pairs.
- Fixed/random hold-out, leave-p-out, k-fold and time-ordered windows.
- Validate split sizes against the observation count at construction.
"""

from .resampler import (
    Resampler,
    IndexResampler,
    FixedSplit,
    RandomSplit,
    LeavePOut,
    LeaveOneOut,
    KFold,
    ForwardChaining,
    SlidingWindow,
    PreProcess,
)

__all__ = [
    'Resampler',
    'IndexResampler',
    'FixedSplit',
    'RandomSplit',
    'LeavePOut',
    'LeaveOneOut',
    'KFold',
    'ForwardChaining',
    'SlidingWindow',
    'PreProcess',
]
