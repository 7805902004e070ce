import pytest

from crossvalidation.budget import (
    Budget,
    ScheduleMode,
    compute_schedule,
    get_schedule_policy,
)
from crossvalidation.budget.budget import floor_log, round_half_up
from crossvalidation.utils.exceptions import ConfigurationError


def test_budget_validation():
    assert dict(Budget(epochs=100)) == {'epochs': 100}
    assert dict(Budget({'epochs': 10, 'lr': 0.5})) == {'epochs': 10, 'lr': 0.5}
    for bad in ({}, {'epochs': 0}, {'epochs': -1}, {'epochs': 'many'}, {'flag': True}):
        with pytest.raises(ConfigurationError):
            Budget(bad)


def test_rounding_helpers():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert floor_log(8, 2) == 3
    assert floor_log(81, 3) == 4
    assert floor_log(80, 3) == 3
    assert floor_log(1, 2) == 0
    with pytest.raises(ConfigurationError):
        floor_log(8, 1)


def test_geometric_schedule():
    schedule = compute_schedule(Budget(epochs=100), 8, ScheduleMode.GEOMETRIC, rate=2)
    assert len(schedule) == 4
    assert schedule.arms == [4, 2, 1, 1]
    assert [r['epochs'] for r in schedule.resources] == [3, 6, 12, 25]
    assert schedule.fitted_arms() == [8, 4, 2, 1]


def test_constant_schedule_stays_within_budget():
    schedule = compute_schedule(Budget(epochs=100), 8, 'constant', rate=2)
    assert schedule.arms == [4, 2, 1, 1]
    assert all(r['epochs'] == 6 for r in schedule.resources)
    assert schedule.total()['epochs'] == 90
    assert schedule.total()['epochs'] <= 100


def test_constant_schedule_clamps_rounded_survivors():
    schedule = compute_schedule(Budget(epochs=9), 3, 'constant', rate=2)
    assert schedule.fitted_arms() == [3, 2]
    assert [r['epochs'] for r in schedule.resources] == [2, 1]
    assert schedule.total()['epochs'] == 8

    schedule = compute_schedule(Budget(time=9.0), 3, 'constant', rate=2)
    assert [r['time'] for r in schedule.resources] == pytest.approx([2.0, 1.5])
    assert schedule.total()['time'] == pytest.approx(9.0)


@pytest.mark.parametrize("narms, rate", [(3, 2), (5, 2), (7, 3), (11, 2.5), (100, 2)])
def test_constant_schedule_never_exceeds_budget(narms, rate):
    for budget in (Budget(epochs=97), Budget(time=97.0)):
        key = next(iter(budget))
        assert compute_schedule(budget, narms, 'constant', rate).total()[key] <= budget[key] + 1e-9


def test_float_resources_are_not_floored():
    schedule = compute_schedule(Budget(time=1.0), 4, 'geometric', rate=2)
    assert schedule.resources[0]['time'] == pytest.approx(1.0 / (4 * 3))


@pytest.mark.parametrize("narms, rate", [(1, 2), (5, 2), (27, 3), (100, 2.5)])
def test_survivors_non_increasing_and_end_at_one(narms, rate):
    for mode in ('geometric', 'constant'):
        arms = compute_schedule(Budget(epochs=1000), narms, mode, rate).arms
        assert all(a >= b for a, b in zip(arms, arms[1:]))
        assert arms[-1] == 1


def test_hyperband_schedule():
    policy = get_schedule_policy('hyperband')
    budget = Budget(epochs=81)
    assert policy.default_rounds(budget, 1, 3) == 5

    schedule = policy.compute(budget, 81, 3, nrounds=5)
    assert schedule.arms == [27, 9, 3, 1, 1]
    assert [r['epochs'] for r in schedule.resources] == [1, 3, 9, 27, 81]


def test_explicit_rounds():
    schedule = compute_schedule(Budget(epochs=100), 8, 'geometric', rate=2, nrounds=2)
    assert len(schedule) == 2
    assert schedule.resources[0]['epochs'] == 6


@pytest.mark.parametrize("kwargs", [
    {'narms': 0},
    {'rate': 1},
    {'nrounds': 0},
    {'mode': 'linear'},
])
def test_invalid_schedule_arguments(kwargs):
    args = {'budget': Budget(epochs=10), 'narms': 4, 'mode': 'geometric', 'rate': 2, 'nrounds': None}
    args.update(kwargs)
    with pytest.raises(ConfigurationError):
        compute_schedule(**args)


def test_schedule_frame():
    frame = compute_schedule({'epochs': 100}, 8).to_frame()
    assert list(frame['arms_retained']) == [4, 2, 1, 1]
    assert list(frame['arms_fitted']) == [8, 4, 2, 1]
    assert list(frame['epochs']) == [3, 6, 12, 25]
