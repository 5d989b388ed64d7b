# auction_ingest/crud.py
"""Persistence helpers for listings and their state snapshots.

Both upserts are idempotent `INSERT ... ON CONFLICT DO UPDATE` statements keyed
by the natural identifier and commit on their own, so a failing record never
takes other records' rows with it.
"""
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy import select, func
from .models import Listing, ListingSnapshot
from .schemas import ListingRecord, ListingStateSnapshot
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional

def _insert(db: Session, table):
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert(table)
    return pg_insert(table)

def _upsert(db: Session, model, data: Dict[str, Any], key: str, refresh=()):
    table = model.__table__
    stmt = _insert(db, table).values(**data)
    # overwrite every supplied column except the key
    excluded = {name: stmt.excluded[name] for name in data if name != key}
    for name in refresh:
        excluded[name] = func.now()
    stmt = stmt.on_conflict_do_update(index_elements=[key], set_=excluded)
    db.execute(stmt)
    db.commit()

def upsert_listing(db: Session, record: ListingRecord):
    _upsert(db, Listing, record.model_dump(), "listing_id", refresh=("updated_at",))

def upsert_state_snapshot(db: Session, snapshot: ListingStateSnapshot):
    _upsert(db, ListingSnapshot, snapshot.model_dump(), "history_id")

def get_listing(db: Session, listing_id: str) -> Optional[Listing]:
    return db.get(Listing, listing_id)

def get_snapshot(db: Session, history_id: str) -> Optional[ListingSnapshot]:
    return db.get(ListingSnapshot, history_id)

def list_snapshots(db: Session, listing_id: str) -> List[ListingSnapshot]:
    stmt = (
        select(ListingSnapshot)
        .where(ListingSnapshot.listing_id == listing_id)
        .order_by(ListingSnapshot.bid_open_at, ListingSnapshot.history_id)
    )
    return list(db.scalars(stmt))

def count_listings(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(Listing))
