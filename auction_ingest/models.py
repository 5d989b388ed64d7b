# auction_ingest/models.py
"""SQLAlchemy ORM models for persisted entities.

`listings` holds the slowly-changing facts about an auctioned item,
`listing_snapshots` one row per observed auction-state history id, and
`run_leases` the cross-process lock rows used by the run guard.
"""
from sqlalchemy import Column, Integer, BigInteger, Text, Numeric, TIMESTAMP, DateTime, ForeignKey, func, Index
from .db import Base

class Listing(Base):
    __tablename__ = "listings"
    listing_id = Column(Text, primary_key=True)
    title = Column(Text)
    category = Column(Text)
    lot_address = Column(Text)
    road_address = Column(Text)
    normalized_lot_address = Column(Text)
    normalized_road_address = Column(Text)
    latitude = Column(Numeric(10, 8, asdecimal=False))
    longitude = Column(Numeric(11, 8, asdecimal=False))
    detail_url = Column(Text)
    goods_description = Column(Text)
    announcement_id = Column(Text)
    auction_id = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())


class ListingSnapshot(Base):
    __tablename__ = "listing_snapshots"
    history_id = Column(Text, primary_key=True)
    listing_id = Column(Text, ForeignKey("listings.listing_id"), nullable=False)
    min_bid_price = Column(BigInteger)
    appraisal_amount = Column(BigInteger)
    fee_rate = Column(Text)
    bid_open_at = Column(DateTime)
    bid_close_at = Column(DateTime)
    status = Column(Text)
    view_count = Column(Integer)
    observed_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class RunLease(Base):
    __tablename__ = "run_leases"
    name = Column(Text, primary_key=True)
    locked_at = Column(DateTime, nullable=False)
    lock_until = Column(DateTime, nullable=False)
    locked_by = Column(Text)

Index("idx_listing_snapshots_listing_id", ListingSnapshot.listing_id)
Index("idx_listing_snapshots_bid_close_at", ListingSnapshot.bid_close_at)
