from datetime import datetime, timedelta

import pytest

from auction_ingest.models import RunLease
from auction_ingest.run_guard import DatabaseRunGuard

MIN_HOLD = timedelta(minutes=5)
MAX_HOLD = timedelta(minutes=30)


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 1, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def guards(session_factory, clock):
    return (
        DatabaseRunGuard(session_factory, owner="instance-a", clock=clock),
        DatabaseRunGuard(session_factory, owner="instance-b", clock=clock),
    )


def test_only_one_of_two_attempts_acquires(guards):
    a, b = guards
    assert a.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD) is True
    assert b.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD) is False


def test_release_keeps_minimum_hold(guards, clock):
    a, b = guards
    assert a.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD)
    clock.advance(minutes=1)
    a.release("onbidBatchRun")

    assert b.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD) is False
    clock.advance(minutes=4)
    assert b.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD) is True


def test_release_after_minimum_hold_frees_immediately(guards, clock):
    a, b = guards
    assert a.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD)
    clock.advance(minutes=10)
    a.release("onbidBatchRun")

    assert b.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD) is True


def test_stuck_run_expires_after_maximum_hold(guards, clock, db):
    a, b = guards
    assert a.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD)
    clock.advance(minutes=29)
    assert b.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD) is False
    clock.advance(minutes=1)
    assert b.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD) is True

    # the stale holder must not shorten the new holder's lease
    a.release("onbidBatchRun")
    lease = db.get(RunLease, "onbidBatchRun")
    assert lease.locked_by == "instance-b"
    assert lease.lock_until == clock.now + MAX_HOLD


def test_leases_are_independent_by_name(guards):
    a, b = guards
    assert a.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD)
    assert b.try_acquire("otherJob", MIN_HOLD, MAX_HOLD)


def test_same_instance_cannot_reenter(guards):
    a, _ = guards
    assert a.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD)
    assert a.try_acquire("onbidBatchRun", MIN_HOLD, MAX_HOLD) is False
