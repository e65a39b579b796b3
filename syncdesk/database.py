import logging
import os
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "20"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))
DB_LOG_SLOW_QUERIES = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
DB_SLOW_QUERY_SECONDS = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))

IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def normalize_database_url(url: str) -> str:
    """Route bare Postgres URLs (including Heroku-style postgres://) to the psycopg 3 driver."""
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # Every session must see the same in-memory database
        if url in IN_MEMORY_SQLITE_URLS:
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_pre_ping": True,
        "pool_recycle": DB_POOL_RECYCLE,
        "pool_size": DB_POOL_SIZE,
        "max_overflow": DB_MAX_OVERFLOW,
        "pool_timeout": DB_POOL_TIMEOUT,
    }


def log_slow_queries(target: Engine, threshold_seconds: float) -> None:
    """Warn about any statement slower than ``threshold_seconds``."""

    @event.listens_for(target, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("syncdesk_query_start", []).append(time.perf_counter())

    @event.listens_for(target, "after_cursor_execute")
    def _stop_timer(conn, cursor, statement, parameters, context, executemany):
        elapsed = time.perf_counter() - conn.info["syncdesk_query_start"].pop()
        if elapsed > threshold_seconds:
            logger.warning(f"🐌 Slow query ({elapsed:.2f}s): {statement[:200]}")


database_url = normalize_database_url(DATABASE_URL)
engine = create_engine(database_url, echo=False, **engine_options(database_url))
logger.info(f"✅ Database engine ready ({engine.dialect.name})")

if DB_LOG_SLOW_QUERIES:
    log_slow_queries(engine, DB_SLOW_QUERY_SECONDS)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
