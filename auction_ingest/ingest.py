# auction_ingest/ingest.py
"""Paged ingestion of auction listings.

One run walks the listing API page by page: fetch, then for every record
transform -> normalize -> geocode -> upsert, then wait before the next page.
Failures of the source API end the run (earlier pages stay committed);
failures of a single record are logged, counted and skipped.
"""
import threading
from dataclasses import dataclass, field, asdict
from datetime import timedelta
from enum import Enum
from typing import List, Optional, Tuple

from .config import IngestConfig, Settings, settings as default_settings
from .errors import SourceUnavailable, MalformedResponse
from .geocode import GeocodingClient
from .run_guard import RunGuard, DatabaseRunGuard
from .schemas import RawListingRecord
from .services import RecordOutcome, process_record
from .source_api import SourceApiClient
from .utils import logger


class RunStatus(str, Enum):
    SKIPPED = "skipped"
    ABORTED = "aborted"
    EMPTY = "empty"
    EXHAUSTED = "exhausted"
    COMPLETE = "complete"


@dataclass
class RunSummary:
    status: Optional[RunStatus] = None
    pages_attempted: int = 0
    pages_processed: int = 0
    succeeded: int = 0
    failed: int = 0
    total_count: Optional[int] = None
    failures: List[Tuple[Optional[str], str]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def aborted(self) -> bool:
        return self.status is RunStatus.ABORTED

    def record(self, outcome: RecordOutcome):
        if outcome.ok:
            self.succeeded += 1
        else:
            self.failed += 1
            self.failures.append((outcome.listing_id, outcome.reason))

    def to_dict(self):
        data = asdict(self)
        data["status"] = self.status.value if self.status else None
        return data


class IngestionOrchestrator:
    def __init__(self, source: SourceApiClient, geocoder: GeocodingClient, session_factory,
                 run_guard: RunGuard, config: IngestConfig):
        self.source = source
        self.geocoder = geocoder
        self.session_factory = session_factory
        self.run_guard = run_guard
        self.config = config
        self._stop = threading.Event()

    def request_stop(self):
        """Interrupt the rate-limit wait; the run ends as aborted.

        Safe to call from another thread or a signal handler.
        """
        self._stop.set()

    def run(self) -> RunSummary:
        summary = RunSummary()
        lease = self.config.lease_name
        acquired = self.run_guard.try_acquire(
            lease,
            timedelta(seconds=self.config.lease_min_hold),
            timedelta(seconds=self.config.lease_max_hold),
        )
        if not acquired:
            summary.status = RunStatus.SKIPPED
            logger.info("Another ingestion run holds lease %s; skipping", lease)
            self._log_summary(summary)
            return summary

        self._stop.clear()
        logger.info("Ingestion run started (page size %d)", self.config.page_size)
        try:
            summary.status = self._run_pages(summary)
        finally:
            self.run_guard.release(lease)
            self._log_summary(summary)
        return summary

    def _log_summary(self, summary: RunSummary):
        logger.info(
            "Ingestion run finished: status=%s pages_attempted=%d succeeded=%d failed=%d",
            summary.status.value if summary.status else "error",
            summary.pages_attempted, summary.succeeded, summary.failed,
        )

    def _run_pages(self, summary: RunSummary) -> RunStatus:
        page_size = self.config.page_size
        page_no = 1
        while True:
            summary.pages_attempted += 1
            try:
                page = self.source.fetch_page(page_no, page_size)
            except (SourceUnavailable, MalformedResponse) as e:
                logger.error("Listing page %d failed, aborting run: %s", page_no, e)
                summary.error = str(e)
                return RunStatus.ABORTED

            # later pages are known to misreport totalCount
            if summary.total_count is None:
                summary.total_count = page.total_count
                if page.total_count == 0:
                    logger.info("Source reports no listings")
                    return RunStatus.EMPTY
                logger.info("Source reports %d listings", page.total_count)

            if not page.items:
                logger.warning("Listing page %d is empty; stopping", page_no)
                return RunStatus.EXHAUSTED

            self._process_page(page_no, page.items, summary)
            summary.pages_processed += 1

            if summary.pages_processed * page_size >= summary.total_count:
                return RunStatus.COMPLETE

            if not self._wait_before_next_page():
                logger.warning("Rate-limit wait interrupted; aborting run")
                summary.error = "interrupted"
                return RunStatus.ABORTED
            page_no += 1

    def _process_page(self, page_no: int, items: List[RawListingRecord], summary: RunSummary):
        before_ok, before_failed = summary.succeeded, summary.failed
        for raw in items:
            summary.record(self._process_one(raw))
        logger.info(
            "Listing page %d processed: %d ok, %d failed",
            page_no, summary.succeeded - before_ok, summary.failed - before_failed,
        )

    def _process_one(self, raw: RawListingRecord) -> RecordOutcome:
        try:
            with self.session_factory() as db:
                return process_record(db, raw, self.geocoder, self.config.detail_url_template)
        except Exception as e:
            logger.exception("Unexpected failure on record %s: %s", raw.listing_id, e)
            return RecordOutcome(raw.listing_id, False, f"unexpected: {e}")

    def _wait_before_next_page(self) -> bool:
        logger.debug("Waiting %.1fs before the next page", self.config.rate_limit_seconds)
        try:
            return not self._stop.wait(self.config.rate_limit_seconds)
        except KeyboardInterrupt:
            return False


def build_orchestrator(settings: Optional[Settings] = None) -> IngestionOrchestrator:
    from .db import SessionLocal

    settings = settings or default_settings
    return IngestionOrchestrator(
        source=SourceApiClient(settings.source),
        geocoder=GeocodingClient(settings.geocoder),
        session_factory=SessionLocal,
        run_guard=DatabaseRunGuard(SessionLocal),
        config=settings.ingest,
    )
