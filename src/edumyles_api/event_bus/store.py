"""Collaborators of the event bus: durable event store and subscription registry.

The bus only needs two operations from persistence:

- ``EventStore.append(event)``: append-only log of every published event
- ``SubscriptionRegistry.list_subscriptions(module_id)``: registrations ordered
  by descending priority

SQL-backed implementations live in ``sql_store``; the in-memory ones here back
Redis-less runs and tests.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from uuid import uuid4

from .models import Event, RegisteredSubscription


class EventStore(ABC):
    """Append-only persistence of published events."""

    @abstractmethod
    async def append(self, event: Event) -> None:
        """Persist ``event`` including its generated id and timestamp."""


class SubscriptionRegistry(ABC):
    """Read access to persisted subscription registrations."""

    @abstractmethod
    async def list_subscriptions(self, module_id: str) -> list[RegisteredSubscription]:
        """Return the module's active registrations, highest priority first."""


class InMemoryEventStore(EventStore):
    """Keeps appended events in a list."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    async def append(self, event: Event) -> None:
        self.events.append(event)


class InMemorySubscriptionRegistry(SubscriptionRegistry):
    """Keeps registrations in a list."""

    def __init__(self) -> None:
        self.registrations: list[RegisteredSubscription] = []

    async def register(self, event_type: str, module_id: str, handler: str, priority: int = 0, active: bool = True) -> RegisteredSubscription:
        registration = RegisteredSubscription(
            id=str(uuid4()),
            event_type=event_type,
            module_id=module_id,
            handler=handler,
            priority=priority,
            active=active,
            created_at=datetime.now(UTC),
        )
        self.registrations.append(registration)
        return registration

    async def list_subscriptions(self, module_id: str) -> list[RegisteredSubscription]:
        matching = [r for r in self.registrations if r.module_id == module_id and r.active]
        return sorted(matching, key=lambda r: r.priority, reverse=True)
