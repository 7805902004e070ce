"""
Budget & Schedule
=================

Responsibility:
- Immutable resource budgets (e.g. training epochs).
- Geometric, constant and hyperband allocation of a budget across
  successive-halving rounds.
"""

from .budget import (
    Budget,
    Schedule,
    ScheduleMode,
    SchedulePolicy,
    GeometricSchedule,
    ConstantSchedule,
    HyperbandSchedule,
    compute_schedule,
    get_schedule_policy,
)

__all__ = [
    'Budget',
    'Schedule',
    'ScheduleMode',
    'SchedulePolicy',
    'GeometricSchedule',
    'ConstantSchedule',
    'HyperbandSchedule',
    'compute_schedule',
    'get_schedule_policy',
]
