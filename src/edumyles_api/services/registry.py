"""Service registry for dependency injection.

One registry is created by the composition root (the FastAPI lifespan or a CLI
command) and passed explicitly to whoever needs it; there is no process-wide
instance.
"""

from collections.abc import Callable
from typing import Any, TypeVar, cast

T = TypeVar("T")
ServiceFactory = Callable[[], T]
ServiceProvider = T | ServiceFactory[T]


class ServiceRegistry:
    """Registry for shared services with support for singletons and factories."""

    def __init__(self):
        """Initialize an empty service registry."""
        self._services: dict[type, ServiceProvider[Any]] = {}
        self._factories: set[type] = set()

    def register_singleton(self, service_type: type[T], instance: T) -> None:
        """Register a singleton instance by its type.

        Args:
            service_type: The type of the service to register
            instance: The singleton instance to register
        """
        self._services[service_type] = instance
        self._factories.discard(service_type)

    def register_factory(self, service_type: type[T], factory: ServiceFactory[T]) -> None:
        """Register a factory function by its type.

        Args:
            service_type: The type of the service to register
            factory: Called on every ``get`` to produce an instance
        """
        self._services[service_type] = factory
        self._factories.add(service_type)

    def has(self, service_type: type) -> bool:
        """Return True if ``service_type`` is registered."""
        return service_type in self._services

    def get(self, service_type: type[T]) -> T:
        """Get a service instance by type.

        Raises:
            KeyError: If the requested service is not registered
        """
        if service_type not in self._services:
            raise KeyError(f"Service {service_type.__name__} not registered")

        provider = self._services[service_type]
        if service_type in self._factories:
            return cast(ServiceFactory[T], provider)()
        return cast(T, provider)
