# auction_ingest/db.py
"""Database engine and session utilities.

Centralized SQLAlchemy engine creation shared by the ingestion run and the
run lease.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .config import settings

DATABASE_URL = settings.database_url
if not DATABASE_URL:
    raise RuntimeError("POSTGRES_URL not set")


def make_engine(url, pool_size=5, max_overflow=10):
    if url.startswith("sqlite"):
        # local runs and tests; one shared connection so ":memory:" survives across sessions
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    # tuned pool settings for cloud DB
    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True
    )


engine = make_engine(DATABASE_URL, settings.db_pool_size, settings.db_max_overflow)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
