"""
Events API - publish events and inspect subscription registrations.

- POST /events: publish an event on behalf of a module
- GET /events/subscriptions/{module_id}: persisted registrations of a module

Bus errors are translated to HTTP responses by the registered exception handlers.
"""

from fastapi import APIRouter, Depends, status

from edumyles_api.api.dependencies import get_event_bus
from edumyles_api.event_bus import Event, EventBus, EventInput, RegisteredSubscription

router = APIRouter()


@router.post(
    "",
    response_model=Event,
    response_model_by_alias=True,
    status_code=status.HTTP_202_ACCEPTED,
)
async def publish_event(event: EventInput, bus: EventBus = Depends(get_event_bus)) -> Event:
    """Publish an event.

    The event is broadcast to subscribers and appended to the event store.
    ``id`` and ``timestamp`` are assigned by the server.

    Args:
        event: Event type, source, tenant, payload and optional metadata
        bus: The application's event bus

    Returns:
        The published event
    """
    return await bus.publish(event)


@router.get(
    "/subscriptions/{module_id}",
    response_model=list[RegisteredSubscription],
    response_model_by_alias=True,
)
async def get_subscriptions(module_id: str, bus: EventBus = Depends(get_event_bus)) -> list[RegisteredSubscription]:
    """List the active subscription registrations of a module, highest priority first."""
    return await bus.get_subscriptions(module_id)
