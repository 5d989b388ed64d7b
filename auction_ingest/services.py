# auction_ingest/services.py
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud
from .config import DETAIL_URL_TEMPLATE
from .geocode import GeocodingClient
from .schemas import RawListingRecord, ListingRecord
from .transform import to_listing_record, to_state_snapshot
from .utils import logger


@dataclass(frozen=True)
class RecordOutcome:
    listing_id: Optional[str]
    ok: bool
    reason: Optional[str] = None


def apply_coordinates(listing: ListingRecord, geocoder: GeocodingClient) -> ListingRecord:
    address = listing.geocode_address()
    if not address:
        logger.warning("No usable address, skipping geocoding for %s", listing.listing_id)
        return listing
    coord = geocoder.resolve(address)
    if coord is None:
        logger.warning("No coordinates for %s (address: %s)", listing.listing_id, address)
        return listing
    return listing.model_copy(update={"latitude": coord.latitude, "longitude": coord.longitude})


def process_record(db: Session, raw: RawListingRecord, geocoder: GeocodingClient,
                   detail_url_template: str = DETAIL_URL_TEMPLATE) -> RecordOutcome:
    """Transform, geocode and upsert one record; never raises."""
    listing_id = raw.listing_id
    try:
        listing = to_listing_record(raw, detail_url_template)
        snapshot = to_state_snapshot(raw)
    except ValueError as e:
        logger.error("Record %s rejected: %s", listing_id, e)
        return RecordOutcome(listing_id, False, f"transform: {e}")

    listing = apply_coordinates(listing, geocoder)

    try:
        crud.upsert_listing(db, listing)
        crud.upsert_state_snapshot(db, snapshot)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Record %s could not be persisted: %s", listing_id, e)
        return RecordOutcome(listing_id, False, f"persist: {e}")

    logger.debug("Ingested listing %s (history %s)", listing.listing_id, snapshot.history_id)
    return RecordOutcome(listing.listing_id, True)
