"""Event Bus Implementation.

This module provides the tenant-scoped ``EventBus``. It is framework-agnostic:
the FastAPI lifespan constructs and connects one instance and hands it to
whatever needs to publish or subscribe.

## Delivery model

- ``publish`` broadcasts every event on ``event:<type>`` and on
  ``tenant:<tenantId>:events``, then appends it to the durable event store.
  Broadcasts happen first and are not rolled back if the append fails.
- ``subscribe`` opens a dedicated transport connection per subscription and
  listens on ``event:<type>``. Delivery is at-least-attempted: the filter runs
  first, then the handler with the subscription's retry policy. A handler that
  keeps failing is logged and dropped; it never reaches the publisher.

## Usage

```python
bus = EventBus(RedisTransport("redis://localhost:6379"), SqlEventStore(), SqlSubscriptionRegistry())
await bus.connect()

async def on_login(event: Event) -> None:
    logger.info(f"login in tenant {event.tenant_id}")

subscription_id = await bus.subscribe(
    "user.login",
    on_login,
    SubscriptionOptions(retry_policy=RetryPolicy(max_retries=3)),
)
await bus.publish(EventInput(type="user.login", source="auth", tenant_id="t1", data={"userId": "u1"}))
await bus.unsubscribe(subscription_id)
await bus.disconnect()
```

"""

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from loguru import logger

from .core import DurableWriteError, NotConnectedError, SubscriptionNotFoundError, T_Handler, event_channel, tenant_channel
from .models import Event, EventInput, RegisteredSubscription, RetryPolicy, SubscriptionOptions
from .retry import SleepFunc, handle_event_with_retry
from .store import EventStore, SubscriptionRegistry
from .transport import Listener, Transport


class LiveSubscription:
    """In-memory record of one active subscription and its dedicated listener."""

    def __init__(
        self,
        subscription_id: str,
        event_type: str,
        handler: T_Handler,
        options: SubscriptionOptions,
        transport: Transport,
        listener: Listener | None = None,
    ):
        self.subscription_id = subscription_id
        self.event_type = event_type
        self.handler = handler
        self.options = options
        self.transport = transport
        self.listener = listener

    async def close(self) -> None:
        """Close the listener and its dedicated connection."""
        if self.listener is not None:
            await self.listener.close()
            self.listener = None
        await self.transport.disconnect()


class EventBus:
    """Tenant- and type-scoped publish/subscribe with retried delivery.

    Args:
        transport: Pub/sub transport used for broadcasting. Subscriptions use
            duplicates of it.
        store: Durable event store every published event is appended to.
        registry: Persisted subscription registrations, read by ``get_subscriptions``.
        sleep: Coroutine function used for backoff waits (seconds).
    """

    def __init__(
        self,
        transport: Transport,
        store: EventStore,
        registry: SubscriptionRegistry,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._store = store
        self._registry = registry
        self._sleep = sleep
        self._connected = False
        self._subscriptions: dict[str, LiveSubscription] = {}

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def store(self) -> EventStore:
        return self._store

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._registry

    @property
    def subscriptions(self) -> dict[str, LiveSubscription]:
        """Live subscriptions keyed by subscription id (read-only view by convention)."""
        return self._subscriptions

    def _require_connected(self) -> None:
        if not self._connected:
            raise NotConnectedError()

    async def connect(self) -> None:
        """Connect the transport. Connection errors propagate to the caller."""
        try:
            await self._transport.connect()
        except Exception as e:
            logger.error(f"Failed to connect event bus: {e}")
            raise
        self._connected = True
        logger.info("Event bus connected")

    async def disconnect(self) -> None:
        """Release the transport.

        Listeners of outstanding subscriptions are closed so their handlers stop
        being invoked; the subscriptions stay in the in-memory map.
        """
        if not self._connected:
            return
        self._connected = False
        for subscription in list(self._subscriptions.values()):
            # Cancelled while an earlier listener was closing
            if self._subscriptions.get(subscription.subscription_id) is not subscription:
                continue
            try:
                await subscription.close()
            except Exception as e:
                logger.warning(f"Failed to close listener for subscription {subscription.subscription_id}: {e}")
        await self._transport.disconnect()
        logger.info("Event bus disconnected")

    async def is_healthy(self) -> bool:
        """Return True if connected and the transport answers a ping. Never raises."""
        try:
            if not self._connected:
                return False
            await self._transport.ping()
            return True
        except Exception as e:
            logger.error(f"Event bus health check failed: {e}")
            return False

    async def publish(self, event: EventInput | Mapping[str, Any]) -> Event:
        """Publish an event to its type channel, its tenant channel and the event store.

        ``id`` and ``timestamp`` are always generated here; values supplied by
        the caller are ignored.

        Returns:
            The published event

        Raises:
            NotConnectedError: If ``connect()`` has not been called
            DurableWriteError: If the event store append fails
        """
        self._require_connected()

        if not isinstance(event, EventInput):
            event = EventInput.model_validate(event)
        fields = event.model_dump(exclude={"id", "timestamp"})
        published = Event(**fields, id=str(uuid4()), timestamp=datetime.now(UTC))
        payload = published.to_json()

        try:
            await self._transport.publish(event_channel(published.type), payload)
            await self._transport.publish(tenant_channel(published.tenant_id), payload)
        except Exception as e:
            logger.error(f"Failed to publish event {published.id} ({published.type}): {e}")
            raise

        try:
            await self._store.append(published)
        except Exception as e:
            logger.error(f"Failed to persist event {published.id} ({published.type}): {e}")
            raise DurableWriteError(published.id, e) from e

        logger.debug(f"Event published: id={published.id}, type={published.type}, source={published.source}, tenant_id={published.tenant_id}")
        return published

    async def subscribe(self, event_type: str, handler: T_Handler, options: SubscriptionOptions | None = None) -> str:
        """Deliver every event of ``event_type`` to ``handler``.

        Args:
            event_type: Exact event type to match (no wildcards)
            handler: Async function or ``EventHandler`` receiving one ``Event``
            options: Priority, filter and retry policy

        Returns:
            The subscription id, used to ``unsubscribe``

        Raises:
            NotConnectedError: If ``connect()`` has not been called
        """
        self._require_connected()

        options = options or SubscriptionOptions()
        subscription_id = str(uuid4())

        listener_transport = self._transport.duplicate()
        await listener_transport.connect()
        subscription = LiveSubscription(subscription_id, event_type, handler, options, listener_transport)

        async def on_message(message: str) -> None:
            # Closed subscriptions may still see an in-flight message
            if self._subscriptions.get(subscription_id) is not subscription:
                return
            try:
                received = Event.from_json(message)
                if options.filter is not None and not options.filter(received):
                    return
                await self.handle_event_with_retry(handler, received, options.retry_policy)
            except Exception as e:
                logger.error(f"Error handling event on subscription {subscription_id} ({event_type}): {e}")

        try:
            subscription.listener = await listener_transport.subscribe(event_channel(event_type), on_message)
        except Exception:
            await listener_transport.disconnect()
            raise

        self._subscriptions[subscription_id] = subscription
        logger.debug(f"Subscribed to event: subscription_id={subscription_id}, event_type={event_type}, priority={options.priority}")
        return subscription_id

    async def unsubscribe(self, subscription_id: str) -> None:
        """Cancel a subscription and close its dedicated listener.

        Raises:
            SubscriptionNotFoundError: If the id is unknown or already cancelled
        """
        subscription = self._subscriptions.pop(subscription_id, None)
        if subscription is None:
            raise SubscriptionNotFoundError(subscription_id)

        await subscription.close()
        logger.debug(f"Unsubscribed from event: subscription_id={subscription_id}")

    async def get_subscriptions(self, module_id: str) -> list[RegisteredSubscription]:
        """List persisted subscription registrations of a module.

        This reads the subscription registry, not the live subscriptions made
        through ``subscribe``.
        """
        return await self._registry.list_subscriptions(module_id)

    async def handle_event_with_retry(self, handler: T_Handler, event: Event, retry_policy: RetryPolicy | None = None) -> None:
        """Deliver one event to one handler using the bus sleep function for backoff."""
        await handle_event_with_retry(handler, event, retry_policy, sleep=self._sleep)
