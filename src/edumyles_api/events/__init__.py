"""Event subscriptions of the EduMyles API.

This module wires application handlers onto the event bus. It is called from
the FastAPI lifespan once the bus is connected.
"""

from loguru import logger

from edumyles_api.event_bus import EventBus, RetryPolicy, SubscriptionOptions
from edumyles_api.events.audit_handlers import AuditLogEventHandler
from edumyles_api.events.types import ALL_EVENT_TYPES

__all__ = [
    "AuditLogEventHandler",
    "register_event_subscriptions",
]

AUDIT_RETRY_POLICY = RetryPolicy(max_retries=3, backoff_multiplier=2, max_backoff_delay=10000)


async def register_event_subscriptions(bus: EventBus) -> list[str]:
    """Subscribe the application handlers to the event bus.

    Returns:
        The ids of the created subscriptions
    """
    logger.debug("Registering event subscriptions on the event bus")

    audit_handler = AuditLogEventHandler()
    options = SubscriptionOptions(priority=100, retry_policy=AUDIT_RETRY_POLICY)
    subscription_ids = [await bus.subscribe(event_type, audit_handler, options) for event_type in ALL_EVENT_TYPES]

    logger.info(f"Event subscriptions registered: {len(subscription_ids)}")
    return subscription_ids
