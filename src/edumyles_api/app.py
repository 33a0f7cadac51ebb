"""Main FastAPI application module."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from edumyles_api.api import api_router
from edumyles_api.api.health_check import router as health_router
from edumyles_api.api.ping import router as ping_router
from edumyles_api.api.version import router as version_router
from edumyles_api.database import dispose_db
from edumyles_api.event_bus import EventBus, create_event_bus
from edumyles_api.events import register_event_subscriptions
from edumyles_api.exception_handlers import register_exception_handlers
from edumyles_api.logging import setup_logging, setup_sqlalchemy_logging
from edumyles_api.services.di import register_all_services
from edumyles_api.services.health_check_service import HealthCheckService
from edumyles_api.services.registry import ServiceRegistry
from edumyles_api.settings import Settings, get_settings
from edumyles_api.utils.version import get_version


def _log_server_endpoints_summary(settings: Settings) -> None:
    """Log the server URL and the available endpoints.

    Args:
        settings: Application settings containing host and port
    """
    server_url = f"http://{settings.host}:{settings.port}"
    logger.info(f"Server running at: {server_url}")

    endpoints = [
        ("Health Check", "/health-check"),
        ("Ping", "/ping"),
        ("Version", "/version"),
        ("Events", "/api/events"),
        ("OpenAPI Schema", "/openapi.json"),
        ("API Docs", "/docs"),
    ]
    logger.info("Available endpoints:")
    for name, path in endpoints:
        logger.info(f"   {name}: {server_url}{path}")


async def start_event_bus(settings: Settings) -> tuple[EventBus, ServiceRegistry]:
    """Build and connect the event bus, then register the services that use it.

    Shared by the server lifespan and the ``check`` command.

    Raises:
        Exception: if the event bus transport cannot be reached
    """
    setup_logging(log_level=settings.log_level)
    if settings.database_url:
        setup_sqlalchemy_logging()

    bus = create_event_bus(settings)
    await bus.connect()

    logger.info("Registering services in the service registry")
    registry = ServiceRegistry()
    register_all_services(registry, settings, bus)
    return bus, registry


async def perform_startup_checks(settings: Settings) -> bool:
    """Connect the event bus, run the health checks and disconnect again.

    Returns:
        True if every check passed
    """
    bus, registry = await start_event_bus(settings)
    try:
        result = await registry.get(HealthCheckService).perform_health_check()
        for check in result.checks:
            log = logger.info if check.success else logger.error
            log(f"{check.check}: {check.message}")
        return result.is_healthy
    finally:
        await bus.disconnect()
        dispose_db()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Settings to run with; defaults to ``get_settings()``

    Returns:
        The configured application; the event bus is created and connected by its lifespan
    """
    app_settings = settings or get_settings()

    @asynccontextmanager
    async def app_lifespan(_app: FastAPI):
        """Handle startup and shutdown events for the main application."""
        _app.state.settings = app_settings  # type: ignore[attr-defined]

        bus, registry = await start_event_bus(app_settings)
        _app.state.event_bus = bus  # type: ignore[attr-defined]
        _app.state.services = registry  # type: ignore[attr-defined]

        await register_event_subscriptions(bus)
        _log_server_endpoints_summary(app_settings)

        yield

        logger.info("API server shutting down")
        await bus.disconnect()
        dispose_db()

    app = FastAPI(
        lifespan=app_lifespan,
        title="EduMyles API",
        description="Multi-tenant school management API with a tenant-scoped event bus",
        version=get_version().version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router, prefix="")
    app.include_router(ping_router, prefix="")
    app.include_router(version_router, prefix="/version")
    app.include_router(api_router, prefix="/api")

    return app


def get_app() -> FastAPI:
    """Application factory for ``uvicorn --factory``."""
    return create_app()
