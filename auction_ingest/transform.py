# auction_ingest/transform.py
"""Map one raw source record onto the two persisted shapes."""
from datetime import datetime
from typing import Optional

from .config import DETAIL_URL_TEMPLATE
from .normalize import normalize_address
from .schemas import RawListingRecord, ListingRecord, ListingStateSnapshot
from .utils import logger

SOURCE_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def parse_source_timestamp(value) -> Optional[datetime]:
    """Parse a 14-digit `yyyyMMddHHmmss` string; anything else becomes None with a warning."""
    if value is None or not str(value).strip():
        return None
    text = str(value).strip()
    # strptime also accepts unpadded fields, the wire format never omits digits
    if len(text) != 14 or not text.isdigit():
        logger.warning("Unparsable source timestamp %r: expected 14 digits", value)
        return None
    try:
        return datetime.strptime(text, SOURCE_TIMESTAMP_FORMAT)
    except ValueError as e:
        logger.warning("Unparsable source timestamp %r: %s", value, e)
        return None


def _parse_amount(value, field_name):
    if value is None or not value.strip():
        return None
    text = value.strip().replace(",", "")
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"{field_name} is not a whole number: {value!r}")


def _parse_count(value):
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip().replace(",", ""))
    except ValueError:
        logger.warning("Ignoring non-numeric view count %r", value)
        return None


def _required(value, field_name):
    if value is None or not value.strip():
        raise ValueError(f"{field_name} missing")
    return value.strip()


def to_listing_record(raw: RawListingRecord, detail_url_template: str = DETAIL_URL_TEMPLATE) -> ListingRecord:
    listing_id = _required(raw.listing_id, "listing_id")
    return ListingRecord(
        listing_id=listing_id,
        title=raw.title,
        category=raw.category,
        lot_address=raw.lot_address,
        road_address=raw.road_address,
        normalized_lot_address=normalize_address(raw.lot_address),
        normalized_road_address=normalize_address(raw.road_address),
        latitude=None,
        longitude=None,
        detail_url=detail_url_template.format(listing_id=listing_id),
        goods_description=raw.goods_description,
        announcement_id=raw.announcement_id,
        auction_id=raw.auction_id,
    )


def to_state_snapshot(raw: RawListingRecord) -> ListingStateSnapshot:
    return ListingStateSnapshot(
        history_id=_required(raw.history_id, "history_id"),
        listing_id=_required(raw.listing_id, "listing_id"),
        min_bid_price=_parse_amount(raw.min_bid_price, "min_bid_price"),
        appraisal_amount=_parse_amount(raw.appraisal_amount, "appraisal_amount"),
        fee_rate=raw.fee_rate,
        bid_open_at=parse_source_timestamp(raw.bid_open),
        bid_close_at=parse_source_timestamp(raw.bid_close),
        status=raw.status,
        view_count=_parse_count(raw.view_count),
    )
