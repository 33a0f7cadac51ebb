"""API dependencies for FastAPI endpoints."""

from collections.abc import Callable
from typing import TypeVar

from fastapi import Request

from edumyles_api.event_bus import EventBus
from edumyles_api.services.registry import ServiceRegistry

T = TypeVar("T")


def get_service_registry(request: Request) -> ServiceRegistry:
    """Return the registry built by the application lifespan."""
    return request.app.state.services


def service(service_type: type[T]) -> Callable[[Request], T]:
    """FastAPI dependency that provides a service by type.

    Args:
        service_type: The type of service to retrieve from the registry

    Returns:
        A callable that returns the requested service instance

    Example:
        ```python
        @router.get("/endpoint")
        async def endpoint(bus: EventBus = Depends(service(EventBus))):
            ...
        ```
    """

    def get_service(request: Request) -> T:
        return get_service_registry(request).get(service_type)

    return get_service


get_event_bus = service(EventBus)
