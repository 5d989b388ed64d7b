# auction_ingest/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

class RawListingRecord(BaseModel):
    """One `<item>` of a listing page, exactly as the source sent it (all text)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    listing_id: Optional[str] = Field(None, alias="CLTR_NO")
    title: Optional[str] = Field(None, alias="CLTR_NM")
    category: Optional[str] = Field(None, alias="CTGR_FULL_NM")
    lot_address: Optional[str] = Field(None, alias="LDNM_ADRS")
    road_address: Optional[str] = Field(None, alias="NMRD_ADRS")
    history_id: Optional[str] = Field(None, alias="CLTR_HSTR_NO")
    min_bid_price: Optional[str] = Field(None, alias="MIN_BID_PRC")
    appraisal_amount: Optional[str] = Field(None, alias="APSL_ASES_AVG_AMT")
    fee_rate: Optional[str] = Field(None, alias="FEE_RATE")
    bid_open: Optional[str] = Field(None, alias="PBCT_BEGN_DTM")
    bid_close: Optional[str] = Field(None, alias="PBCT_CLS_DTM")
    status: Optional[str] = Field(None, alias="PBCT_CLTR_STAT_NM")
    view_count: Optional[str] = Field(None, alias="IQRY_CNT")
    goods_description: Optional[str] = Field(None, alias="GOODS_NM")
    announcement_id: Optional[str] = Field(None, alias="PLNM_NO")
    auction_id: Optional[str] = Field(None, alias="PBCT_NO")

class SourcePage(BaseModel):
    items: List[RawListingRecord]
    total_count: int
    page_no: Optional[int] = None
    num_of_rows: Optional[int] = None

class ListingRecord(BaseModel):
    listing_id: str = Field(..., max_length=255)
    title: Optional[str] = None
    category: Optional[str] = None
    lot_address: Optional[str] = None
    road_address: Optional[str] = None
    normalized_lot_address: str = ""
    normalized_road_address: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    detail_url: Optional[str] = None
    goods_description: Optional[str] = None
    announcement_id: Optional[str] = None
    auction_id: Optional[str] = None

    def geocode_address(self) -> str:
        """Lot address first, the road address when the lot one normalized to nothing."""
        return self.normalized_lot_address or self.normalized_road_address

class ListingStateSnapshot(BaseModel):
    history_id: str = Field(..., max_length=255)
    listing_id: str
    min_bid_price: Optional[int] = None
    appraisal_amount: Optional[int] = None
    fee_rate: Optional[str] = None
    bid_open_at: Optional[datetime] = None
    bid_close_at: Optional[datetime] = None
    status: Optional[str] = None
    view_count: Optional[int] = None

class GeoCoordinate(BaseModel):
    latitude: float
    longitude: float
    address_name: Optional[str] = None

class DetailInfo(BaseModel):
    announcement_name: Optional[str] = None
    department: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None

class AttachmentInfo(BaseModel):
    file_name: Optional[str] = None
    file_path: Optional[str] = None
