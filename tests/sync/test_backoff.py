from __future__ import annotations

import pytest

from punch_bridge.sync.backoff import Backoff
from punch_bridge.sync.locks import EmployeeLocks


def test_delays_double_until_capped():
    b = Backoff(initial=1, factor=2, maximum=10)
    assert [b.next_delay() for _ in range(6)] == [1, 2, 4, 8, 10, 10]
    assert b.failures == 6


def test_reset_starts_over():
    b = Backoff(initial=0.5, maximum=60)
    b.next_delay()
    b.next_delay()
    b.reset()
    assert b.next_delay() == 0.5


def test_long_outage_does_not_overflow():
    b = Backoff(initial=1, maximum=60)
    for _ in range(2000):
        delay = b.next_delay()
    assert delay == 60


@pytest.mark.parametrize("kwargs", [{"initial": 0}, {"factor": 0.5}, {"initial": 10, "maximum": 5}])
def test_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        Backoff(**kwargs)


def test_one_lock_per_employee():
    locks = EmployeeLocks()
    assert locks.for_employee(7) is locks.for_employee(7)
    assert locks.for_employee(7) is not locks.for_employee(9)
    assert len(locks) == 2
