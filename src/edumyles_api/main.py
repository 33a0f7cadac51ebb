"""Main entry point for the EduMyles API using Typer and Pydantic Settings."""

import asyncio

import typer
import uvicorn
from loguru import logger

from edumyles_api.logging import setup_logging
from edumyles_api.settings import get_settings

app = typer.Typer()


HOST_OPTION = typer.Option(
    None,
    help="Host to bind the server to (overrides EDUMYLES_API_HOST)",
    metavar="<server>",
)  # fmt: skip
PORT_OPTION = typer.Option(
    None,
    help="Port to bind the server to (overrides EDUMYLES_API_PORT)",
    metavar="<port>",
)  # fmt: skip
RELOAD_OPTION = typer.Option(
    None,
    help="Enable/disable auto-reload (overrides EDUMYLES_API_RELOAD)",
)  # fmt: skip
LOG_LEVEL_OPTION = typer.Option(
    None,
    help="Log level (overrides EDUMYLES_API_LOG_LEVEL)",
    metavar="<level>",
    case_sensitive=False,
)  # fmt: skip
SQL_LOG_OPTION = typer.Option(
    None,
    help="Enable/disable SQL query logging (overrides EDUMYLES_API_SQL_LOG)",
)  # fmt: skip
DATABASE_URL_OPTION = typer.Option(
    None,
    help="Database URL (overrides EDUMYLES_API_DATABASE_URL)",
    metavar="<dsn>",
)  # fmt: skip
REDIS_URL_OPTION = typer.Option(
    None,
    help="Redis URL of the event bus (overrides EDUMYLES_API_REDIS_URL)",
    metavar="<url>",
)  # fmt: skip


def _update_settings(
    host: str | None,
    port: int | None,
    log_level: str | None,
    reload: bool | None,
    sql_log: bool | None,
    database_url: str | None,
    redis_url: str | None,
) -> None:
    """Update settings with CLI overrides."""
    settings = get_settings()

    if host is not None:
        settings.host = host
    if port is not None:
        settings.port = port
    if log_level is not None:
        settings.log_level = log_level.upper()
    if reload is not None:
        settings.reload = reload
    if sql_log is not None:
        settings.sql_log = sql_log
    if database_url is not None:
        settings.database_url = database_url
    if redis_url is not None:
        settings.redis_url = redis_url


@app.command()
def run(
    host: str = HOST_OPTION,
    port: int = PORT_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
    reload: bool = RELOAD_OPTION,
    sql_log: bool = SQL_LOG_OPTION,
    database_url: str = DATABASE_URL_OPTION,
    redis_url: str = REDIS_URL_OPTION,
) -> None:
    """Run the API server."""
    _update_settings(host, port, log_level, reload, sql_log, database_url, redis_url)
    settings = get_settings()

    setup_logging(settings.log_level)

    logger.info(f"Starting EduMyles API on {settings.host}:{settings.port}")
    logger.info(f"Event transport: {'redis' if settings.redis_enabled else 'in-memory'}")
    logger.info(f"Reload: {settings.reload}")

    # Import string is required for reload
    uvicorn.run(
        "edumyles_api.app:get_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def check(
    log_level: str = LOG_LEVEL_OPTION,
    sql_log: bool = SQL_LOG_OPTION,
    database_url: str = DATABASE_URL_OPTION,
    redis_url: str = REDIS_URL_OPTION,
) -> None:
    """Connect to the event bus and database, run the health checks, then exit."""
    _update_settings(None, None, log_level, False, sql_log, database_url, redis_url)
    settings = get_settings()

    setup_logging(settings.log_level)
    logger.info("Running readiness checks only")

    from edumyles_api.app import perform_startup_checks

    try:
        healthy = asyncio.run(perform_startup_checks(settings))
    except Exception as e:
        logger.error(f"Readiness checks failed: {e}")
        raise SystemExit(1) from None

    if not healthy:
        logger.error("Readiness checks failed")
        raise SystemExit(1)
    logger.info("Readiness checks completed successfully")


if __name__ == "__main__":
    app()
