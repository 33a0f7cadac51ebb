"""Database engine and sessions for the event store.

The engine is built on first use rather than at import, so CLI flags such as
``--database-url`` can still change the settings before anything connects.
Sessions are synchronous; async callers run them in a worker thread.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine, text
from tenacity import before_sleep_log, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from edumyles_api.settings import get_settings

_engine: Engine | None = None

POSTGRES_POOL_OPTIONS: dict[str, Any] = {
    "pool_pre_ping": True,
    "pool_recycle": 3600,
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 30,
    "connect_args": {"connect_timeout": 10},
}


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool and driver options for the configured backend."""
    if database_url.startswith("sqlite"):
        # Sessions are opened from worker threads
        return {"connect_args": {"check_same_thread": False}}
    return POSTGRES_POOL_OPTIONS


def get_engine() -> Engine:
    """Return the process-wide engine, building it from settings on first call.

    Raises:
        ValueError: if no database URL is configured
    """
    global _engine
    if _engine is not None:
        return _engine

    settings = get_settings()
    if not settings.database_url:
        raise ValueError("Database URL missing: provide EDUMYLES_API_DATABASE_URL env or --database-url CLI argument")

    _engine = create_engine(settings.database_url, echo=settings.sql_log, **_engine_options(settings.database_url))
    logger.info(f"Database engine created for {settings.database_url.split('@')[-1]} (SQL echo {'on' if settings.sql_log else 'off'})")
    return _engine


def dispose_db() -> None:
    """Close pooled connections and forget the engine."""
    global _engine
    if _engine is None:
        return
    logger.info("Closing database connections")
    _engine.dispose()
    _engine = None


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
    retry=retry_if_exception_type(Exception),
    before_sleep=before_sleep_log(logger, "DEBUG"),
)
def _open_session() -> Session:
    """Open a session and prove the connection with ``SELECT 1``.

    On failure the engine is dropped so the next attempt rebuilds it; the
    database may not have been reachable when the pool was first filled.
    """
    session = Session(get_engine())
    try:
        session.execute(text("SELECT 1"))
    except Exception as e:
        session.close()
        logger.warning(f"Database not reachable, resetting engine: {e}")
        dispose_db()
        raise
    return session


@contextmanager
def borrow_db_session() -> Generator[Session]:
    """Context manager yielding a checked session; closes it on exit.

    Used by the event store, the health check and CLI commands. Connection
    attempts are retried with exponential backoff (five attempts).

    Example:
        with borrow_db_session() as session:
            session.exec(select(EventRecord)).all()
    """
    session = _open_session()
    try:
        yield session
    except Exception as e:
        logger.error(f"Database session failed: {e}")
        raise
    finally:
        session.close()


def is_healthy(session: Session) -> dict[str, Any]:
    """Run ``SELECT 1`` on ``session`` and report the outcome as a dict."""
    try:
        session.exec(text("SELECT 1")).one()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e), "connection": "failed"}
    return {"status": "healthy", "connection": "active"}
