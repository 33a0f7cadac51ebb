"""Logging configuration for the EduMyles API.

Everything goes through loguru. Standard library loggers (uvicorn, SQLAlchemy,
redis, alembic) are redirected with ``InterceptHandler``. Event bus records
carry ``tenant_id`` / ``event_type`` in ``extra`` and are shown when present.
"""

import logging
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>{extra[context]}"
)

STDLIB_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "redis", "asyncio", "alembic")
SQLALCHEMY_LOGGERS = ("sqlalchemy", "sqlalchemy.engine", "sqlalchemy.pool", "sqlalchemy.dialects")


class InterceptHandler(logging.Handler):
    """Forward standard logging records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _format_context(record) -> None:
    """Render tenant and event type as a suffix when bound."""
    extra = record["extra"]
    parts = [f"{key}={extra[key]}" for key in ("tenant_id", "event_type") if key in extra]
    extra["context"] = f" [{' '.join(parts)}]" if parts else ""


def _intercept(names: tuple[str, ...], level: str | int | None = None) -> None:
    for name in names:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
        if level is not None:
            std_logger.setLevel(level)


def setup_logging(log_level: str) -> None:
    """Configure loguru for the whole process.

    Args:
        log_level: Level from settings (env var or CLI override)
    """
    log_level = log_level.upper()

    logger.remove()
    logger.configure(patcher=_format_context)
    logger.add(sys.stderr, level=log_level, format=LOG_FORMAT, colorize=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    _intercept(tuple(logging.Logger.manager.loggerDict))
    # stdlib logging has no TRACE level
    _intercept(STDLIB_LOGGERS, "DEBUG" if log_level == "TRACE" else log_level)

    logger.info(f"Log level set to: {log_level}")


def setup_sqlalchemy_logging() -> None:
    """Route SQLAlchemy engine and pool logging through loguru."""
    _intercept(SQLALCHEMY_LOGGERS)
