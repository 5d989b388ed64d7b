# auction_ingest/config.py
"""Runtime configuration.

Everything is read from the environment (a local `.env` is honored) once, in
`Settings.load()`, and handed to the clients explicitly.
"""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_ONBID_BASE_URL = "http://openapi.onbid.co.kr/openapi/services/KamcoPblsalThingInquireSvc"
DEFAULT_KAKAO_BASE_URL = "https://dapi.kakao.com"
DETAIL_URL_TEMPLATE = "https://www.onbid.co.kr/op/cta/cltr/cltrView.do?cltrCltrNo={listing_id}"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def normalize_database_url(url: str) -> str:
    # SQLAlchemy 2.x doesn't accept 'postgres://'
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    return url


@dataclass
class SourceApiConfig:
    base_url: str = DEFAULT_ONBID_BASE_URL
    service_key: str = ""
    disposal_method: str = "0001"
    connect_timeout: float = 30.0
    read_timeout: float = 60.0


@dataclass
class GeocoderConfig:
    base_url: str = DEFAULT_KAKAO_BASE_URL
    api_key: str = ""
    connect_timeout: float = 5.0
    read_timeout: float = 10.0
    max_attempts: int = 3
    retry_delay: float = 1.0


@dataclass
class IngestConfig:
    page_size: int = 100
    rate_limit_seconds: float = 1.0
    lease_name: str = "onbidBatchRun"
    lease_min_hold: float = 300.0
    lease_max_hold: float = 1800.0
    detail_url_template: str = DETAIL_URL_TEMPLATE


@dataclass
class Settings:
    database_url: str = ""
    db_pool_size: int = 5
    db_max_overflow: int = 10
    source: SourceApiConfig = field(default_factory=SourceApiConfig)
    geocoder: GeocoderConfig = field(default_factory=GeocoderConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
    cron: str = "0 1 * * *"
    scheduler_enabled: bool = True
    admin_token: Optional[str] = None

    @classmethod
    def load(cls) -> "Settings":
        return cls(
            database_url=normalize_database_url(os.getenv("POSTGRES_URL", "")),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
            source=SourceApiConfig(
                base_url=os.getenv("ONBID_BASE_URL") or DEFAULT_ONBID_BASE_URL,
                service_key=os.getenv("ONBID_SERVICE_KEY", ""),
                disposal_method=os.getenv("ONBID_DISPOSAL_METHOD", "0001"),
                connect_timeout=float(os.getenv("ONBID_CONNECT_TIMEOUT", "30")),
                read_timeout=float(os.getenv("ONBID_READ_TIMEOUT", "60")),
            ),
            geocoder=GeocoderConfig(
                base_url=os.getenv("KAKAO_BASE_URL") or DEFAULT_KAKAO_BASE_URL,
                api_key=os.getenv("KAKAO_REST_API_KEY", ""),
                connect_timeout=float(os.getenv("KAKAO_CONNECT_TIMEOUT", "5")),
                read_timeout=float(os.getenv("KAKAO_READ_TIMEOUT", "10")),
                max_attempts=int(os.getenv("GEOCODE_MAX_ATTEMPTS", "3")),
                retry_delay=float(os.getenv("GEOCODE_RETRY_DELAY", "1.0")),
            ),
            ingest=IngestConfig(
                page_size=int(os.getenv("INGEST_PAGE_SIZE", "100")),
                rate_limit_seconds=float(os.getenv("INGEST_RATE_LIMIT_SECONDS", "1.0")),
                lease_name=os.getenv("INGEST_LEASE_NAME", "onbidBatchRun"),
                lease_min_hold=float(os.getenv("INGEST_LEASE_MIN_HOLD", "300")),
                lease_max_hold=float(os.getenv("INGEST_LEASE_MAX_HOLD", "1800")),
            ),
            cron=os.getenv("INGEST_CRON", "0 1 * * *"),
            scheduler_enabled=_env_bool("SCHEDULER_ENABLED", True),
            admin_token=os.getenv("ADMIN_TOKEN") or None,
        )


settings = Settings.load()
