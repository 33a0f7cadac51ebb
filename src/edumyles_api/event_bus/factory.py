"""Event bus construction from settings.

The application owns exactly one bus, built here and kept on ``app.state``.
Falls back to in-process components when Redis or the database is disabled.
"""

from loguru import logger

from edumyles_api.settings import Settings

from .bus import EventBus
from .store import EventStore, InMemoryEventStore, InMemorySubscriptionRegistry, SubscriptionRegistry
from .transport import InMemoryTransport, Transport


def create_transport(settings: Settings) -> Transport:
    """Return the Redis transport, or an in-memory one when Redis is disabled."""
    if not settings.redis_enabled:
        logger.info("Redis disabled, using in-memory event transport")
        return InMemoryTransport()

    from .redis_transport import RedisTransport

    return RedisTransport(settings.redis_url)


def create_persistence(settings: Settings) -> tuple[EventStore, SubscriptionRegistry]:
    """Return the event store and subscription registry for the configured backend."""
    if not settings.event_store_enabled or not settings.database_url:
        logger.info("Event store disabled or no database configured, events are kept in memory")
        return InMemoryEventStore(), InMemorySubscriptionRegistry()

    from .sql_store import SqlEventStore, SqlSubscriptionRegistry

    return SqlEventStore(), SqlSubscriptionRegistry()


def create_event_bus(settings: Settings) -> EventBus:
    """Build an unconnected ``EventBus`` from settings."""
    store, registry = create_persistence(settings)
    return EventBus(create_transport(settings), store, registry)
