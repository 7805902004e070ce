"""
Search Engine
=============

Responsibility:
- Exhaustive (brute-force) and local (hill-climbing) search.
- Budgeted elimination: successive halving, hyperband and
  simulated-annealing successive halving (SASHA).
- Search history of every evaluated arm.
"""

from .base_search import BaseSearch
from .brute import BruteSearch
from .hill_climbing import HillClimbingSearch
from .successive_halving import SuccessiveHalvingSearch
from .hyperband import HyperbandSearch
from .sasha import SashaSearch

__all__ = [
    'BaseSearch',
    'BruteSearch',
    'HillClimbingSearch',
    'SuccessiveHalvingSearch',
    'HyperbandSearch',
    'SashaSearch',
]
