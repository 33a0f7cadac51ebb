"""Tenant-scoped Event Bus.

This package decouples side effects (audit logging, cross-module notification)
from the request handlers that trigger them. It supports:

- **Dual broadcast**: every event goes out on ``event:<type>`` and ``tenant:<tenantId>:events``
- **Durable log**: every event is appended to the event store, subscribers or not
- **Dedicated listeners**: one transport connection per subscription
- **Filtering and retry**: per-subscription predicate and exponential backoff
- **Error isolation**: a failing handler is logged, never surfaced to the publisher

## Quick Start

```python
from edumyles_api.event_bus import EventBus, EventInput, InMemoryTransport, InMemoryEventStore, InMemorySubscriptionRegistry

bus = EventBus(InMemoryTransport(), InMemoryEventStore(), InMemorySubscriptionRegistry())
await bus.connect()


async def on_login(event):
    print(f"{event.data['userId']} logged in to {event.tenant_id}")


await bus.subscribe("user.login", on_login)
await bus.publish(EventInput(type="user.login", source="auth", tenant_id="t1", data={"userId": "u1"}))
```

For the retry algorithm see ``retry.py``; for transports see ``transport.py``
and ``redis_transport.py``.

"""

from .bus import EventBus, LiveSubscription
from .core import (
    DurableWriteError,
    EventBusError,
    EventHandler,
    NotConnectedError,
    SubscriptionNotFoundError,
    event_channel,
    tenant_channel,
)
from .factory import create_event_bus
from .models import Event, EventInput, EventMetadata, RegisteredSubscription, RetryPolicy, SubscriptionOptions
from .retry import RetryingHandler, calculate_backoff_delay, handle_event_with_retry
from .store import EventStore, InMemoryEventStore, InMemorySubscriptionRegistry, SubscriptionRegistry
from .transport import InMemoryBroker, InMemoryTransport, Listener, Transport

__all__ = [
    "DurableWriteError",
    "Event",
    "EventBus",
    "EventBusError",
    "EventHandler",
    "EventInput",
    "EventMetadata",
    "EventStore",
    "InMemoryBroker",
    "InMemoryEventStore",
    "InMemorySubscriptionRegistry",
    "InMemoryTransport",
    "Listener",
    "LiveSubscription",
    "NotConnectedError",
    "RegisteredSubscription",
    "RetryPolicy",
    "RetryingHandler",
    "SubscriptionNotFoundError",
    "SubscriptionOptions",
    "SubscriptionRegistry",
    "Transport",
    "calculate_backoff_delay",
    "create_event_bus",
    "event_channel",
    "handle_event_with_retry",
    "tenant_channel",
]
