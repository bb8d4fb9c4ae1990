import logging
import os

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """Per-backend engine options; SQLite files get their folder created."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        logger.info("Using %s database on %s", parsed.get_backend_name(), parsed.host or "localhost")
        return {"pool_pre_ping": True}

    if parsed.database and parsed.database != ":memory:":
        folder = os.path.dirname(parsed.database)
        if folder:
            os.makedirs(folder, exist_ok=True)
        logger.info("Using SQLite database at %s", parsed.database)
    else:
        logger.info("Using in-memory SQLite database")
    # sessions are handed across FastAPI's threadpool
    return {"connect_args": {"check_same_thread": False}}


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Request-scoped session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def db_healthcheck():
    """Return ``(ok, error)`` after a trivial round trip to the database."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, None
    except Exception as e:
        logger.warning("Database healthcheck failed: %s", e)
        return False, str(e)
