# auction_ingest/source_api.py
"""Client for the Onbid (KAMCO public auction) listing service.

The service speaks XML:

    <response>
      <header><resultCode>00</resultCode><resultMsg>NORMAL SERVICE.</resultMsg></header>
      <body>
        <items><item><CLTR_NO>...</CLTR_NO>...</item>...</items>
        <numOfRows>100</numOfRows><pageNo>1</pageNo><totalCount>250</totalCount>
      </body>
    </response>

`fetch_page` is strict and raises; the detail and attachment lookups are
supplementary and answer None / [] instead.
"""
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from .config import SourceApiConfig
from .errors import SourceUnavailable, MalformedResponse
from .schemas import RawListingRecord, SourcePage, DetailInfo, AttachmentInfo
from .utils import logger

LIST_PATH = "/getKamcoPbctCltrList"
BASIC_INFO_PATH = "/getKamcoPlnmPbctBasicInfoDetail"
FILE_INFO_PATH = "/getKamcoPlnmPbctFileInfoDetail"
SUCCESS_CODE = "00"


def _text(tag, name):
    child = tag.find(name, recursive=False) if tag is not None else None
    if child is None:
        return None
    return child.get_text(strip=True)


def _fields(tag):
    return {child.name: child.get_text(strip=True) for child in tag.find_all(recursive=False)}


def _optional_int(value):
    try:
        return int(value) if value else None
    except ValueError:
        return None


class SourceApiClient:
    def __init__(self, config: SourceApiConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.timeout = (config.connect_timeout, config.read_timeout)
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/xml, text/xml"})

    def _get(self, path, params):
        query = {"serviceKey": self.config.service_key}
        query.update(params)
        resp = self.session.get(f"{self.base_url}{path}", params=query, timeout=self.timeout)
        resp.raise_for_status()
        return BeautifulSoup(resp.content, "xml")

    def fetch_page(self, page_no: int, num_of_rows: int) -> SourcePage:
        logger.info("Requesting listing page %d (%d rows)", page_no, num_of_rows)
        try:
            soup = self._get(LIST_PATH, {
                "pageNo": page_no,
                "numOfRows": num_of_rows,
                "DPSL_MTD_CD": self.config.disposal_method,
            })
        except requests.RequestException as e:
            raise SourceUnavailable(f"listing page {page_no} request failed: {e}") from e

        response = soup.find("response")
        if response is None:
            raise MalformedResponse(f"listing page {page_no}: no <response> envelope")

        header = response.find("header", recursive=False)
        result_code = _text(header, "resultCode")
        if result_code is not None and result_code != SUCCESS_CODE:
            raise MalformedResponse(
                f"listing page {page_no}: resultCode {result_code} ({_text(header, 'resultMsg')})"
            )

        body = response.find("body", recursive=False)
        if body is None:
            raise MalformedResponse(f"listing page {page_no}: response has no body")
        items_tag = body.find("items", recursive=False)
        if items_tag is None:
            raise MalformedResponse(f"listing page {page_no}: body has no items")

        raw_total = _text(body, "totalCount")
        try:
            total_count = int(raw_total)
        except (TypeError, ValueError):
            raise MalformedResponse(f"listing page {page_no}: bad totalCount {raw_total!r}")

        items = [
            RawListingRecord.model_validate(_fields(item))
            for item in items_tag.find_all("item", recursive=False)
        ]
        logger.info("Listing page %d decoded: %d items, totalCount=%d", page_no, len(items), total_count)
        return SourcePage(
            items=items,
            total_count=total_count,
            page_no=_optional_int(_text(body, "pageNo")),
            num_of_rows=_optional_int(_text(body, "numOfRows")),
        )

    def fetch_detail(self, announcement_id: str, auction_id: str) -> Optional[DetailInfo]:
        logger.info("Requesting announcement detail PLNM_NO=%s PBCT_NO=%s", announcement_id, auction_id)
        try:
            soup = self._get(BASIC_INFO_PATH, {"PLNM_NO": announcement_id, "PBCT_NO": auction_id})
        except requests.RequestException as e:
            logger.error("Announcement detail request failed: %s", e)
            return None

        body = soup.find("body")
        item = body.find("item", recursive=False) if body is not None else None
        if item is None:
            logger.warning("No announcement detail for PLNM_NO=%s PBCT_NO=%s", announcement_id, auction_id)
            return None
        fields = _fields(item)
        return DetailInfo(
            announcement_name=fields.get("PLNM_NM"),
            department=fields.get("RSBY_DEPT"),
            contact_name=fields.get("PSCG_NM"),
            contact_phone=fields.get("PSCG_TPNO"),
            contact_email=fields.get("PSCG_EMAL_ADRS"),
        )

    def fetch_attachments(self, announcement_id: str, auction_id: str) -> List[AttachmentInfo]:
        logger.info("Requesting attachments PLNM_NO=%s PBCT_NO=%s", announcement_id, auction_id)
        try:
            soup = self._get(FILE_INFO_PATH, {
                "PLNM_NO": announcement_id,
                "PBCT_NO": auction_id,
                "numOfRows": 10,
                "pageNo": 1,
            })
        except requests.RequestException as e:
            logger.error("Attachment request failed: %s", e)
            return []

        body = soup.find("body")
        items = body.find("items", recursive=False) if body is not None else None
        if items is None:
            return []
        attachments = []
        for file_item in items.find_all("fileItem", recursive=False):
            fields = _fields(file_item)
            attachments.append(AttachmentInfo(
                file_name=fields.get("ATCH_FILE_NM"),
                file_path=fields.get("FILE_PTH_CNTN"),
            ))
        return attachments
