import os

os.environ.setdefault("POSTGRES_URL", "sqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("ONBID_BASE_URL", "http://onbid.test/svc")
os.environ.setdefault("ONBID_SERVICE_KEY", "test-service-key")
os.environ.setdefault("KAKAO_BASE_URL", "http://kakao.test")
os.environ.setdefault("KAKAO_REST_API_KEY", "test-kakao-key")
os.environ.setdefault("GEOCODE_RETRY_DELAY", "0")
os.environ.setdefault("INGEST_RATE_LIMIT_SECONDS", "0")

import pytest

from auction_ingest.db import Base, engine, SessionLocal
import auction_ingest.models  # noqa: F401


@pytest.fixture
def session_factory():
    Base.metadata.create_all(bind=engine)
    yield SessionLocal
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()
