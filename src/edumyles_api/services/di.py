"""Dependency injection setup module.

This module provides centralized service registration for both the FastAPI
server and CLI applications. The caller owns the event bus and the registry.
"""

from loguru import logger

from edumyles_api.event_bus import EventBus
from edumyles_api.services.health_check_service import HealthCheckService
from edumyles_api.services.registry import ServiceRegistry
from edumyles_api.settings import Settings


def register_all_services(registry: ServiceRegistry, settings: Settings, event_bus: EventBus) -> None:
    """Register the event bus and the services built on it.

    Args:
        registry: Service registry instance to register services in
        settings: Application settings
        event_bus: The application's event bus
    """
    logger.debug("Registering services in DI container")

    registry.register_singleton(Settings, settings)
    registry.register_singleton(EventBus, event_bus)

    database_enabled = settings.event_store_enabled and bool(settings.database_url)
    registry.register_singleton(HealthCheckService, HealthCheckService(event_bus, database_enabled))
