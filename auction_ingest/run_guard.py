# auction_ingest/run_guard.py
"""Cross-process mutual exclusion for ingestion runs.

A lease is one row in `run_leases`. Acquiring inserts the row, or takes it
over once `lock_until` has passed; releasing does not delete it but pulls
`lock_until` back to `locked_at + min_hold`, so a run that finished quickly
still blocks an immediate re-trigger and a crashed run frees itself after
`max_hold`.
"""
import os
import socket
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError

from .models import RunLease
from .utils import logger


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RunGuard:
    """Lease contract the orchestrator depends on."""

    def try_acquire(self, lease_id: str, min_hold: timedelta, max_hold: timedelta) -> bool:
        raise NotImplementedError

    def release(self, lease_id: str) -> None:
        raise NotImplementedError


class DatabaseRunGuard(RunGuard):
    def __init__(self, session_factory, owner=None, clock=utcnow):
        self.session_factory = session_factory
        self.owner = owner or f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"
        self.clock = clock
        self._held = {}

    def try_acquire(self, lease_id, min_hold, max_hold):
        now = self.clock()
        values = {"locked_at": now, "lock_until": now + max_hold, "locked_by": self.owner}
        with self.session_factory() as db:
            try:
                db.execute(insert(RunLease).values(name=lease_id, **values))
                db.commit()
                acquired = True
            except IntegrityError:
                db.rollback()
                result = db.execute(
                    update(RunLease)
                    .where(RunLease.name == lease_id, RunLease.lock_until <= now)
                    .values(**values)
                )
                db.commit()
                acquired = result.rowcount == 1

        if acquired:
            self._held[lease_id] = (now, min_hold)
            logger.info("Lease %s acquired by %s until %s", lease_id, self.owner, values["lock_until"])
        else:
            logger.info("Lease %s is held elsewhere", lease_id)
        return acquired

    def release(self, lease_id):
        held = self._held.pop(lease_id, None)
        if held is None:
            logger.warning("Release of lease %s which %s does not hold", lease_id, self.owner)
            return
        locked_at, min_hold = held
        until = max(self.clock(), locked_at + min_hold)
        with self.session_factory() as db:
            result = db.execute(
                update(RunLease)
                .where(RunLease.name == lease_id, RunLease.locked_by == self.owner)
                .values(lock_until=until)
            )
            db.commit()
        if result.rowcount != 1:
            logger.warning("Lease %s was taken over before %s released it", lease_id, self.owner)
        else:
            logger.info("Lease %s released, held until %s", lease_id, until)
