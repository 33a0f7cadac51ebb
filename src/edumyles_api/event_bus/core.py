"""Core Event Bus Components.

This module contains the fundamental abstractions for the event bus system.
These components are framework-agnostic and can be used in any async Python
application.

## Key Components

- **EventHandler**: Base class for class-based event handlers
- **EventBusError**: Base exception for all event bus related errors
- **NotConnectedError**: Raised when the bus is used before ``connect()``
- **SubscriptionNotFoundError**: Raised when cancelling an unknown subscription
- **DurableWriteError**: Raised when a published event cannot be persisted
- **event_channel / tenant_channel**: Pub/sub channel naming

## Usage Example

```python
from edumyles_api.event_bus.core import EventHandler
from edumyles_api.event_bus.models import Event


class WelcomeEmailHandler(EventHandler):
    def __init__(self, mailer: Mailer):
        self.mailer = mailer

    async def handle(self, event: Event) -> None:
        await self.mailer.send_welcome(event.data["email"])


subscription_id = await bus.subscribe("user.register", WelcomeEmailHandler(mailer))
```

"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from .models import Event

EVENT_CHANNEL_PREFIX = "event"
TENANT_CHANNEL_PREFIX = "tenant"

T_Handler = Callable[[Event], Awaitable[Any] | Any]


def event_channel(event_type: str) -> str:
    """Channel carrying every event of one type: ``event:<type>``."""
    return f"{EVENT_CHANNEL_PREFIX}:{event_type}"


def tenant_channel(tenant_id: str) -> str:
    """Channel carrying every event of one tenant: ``tenant:<tenantId>:events``."""
    return f"{TENANT_CHANNEL_PREFIX}:{tenant_id}:events"


class EventHandler(ABC):
    """Base class for class-based event handlers.

    Subclasses implement ``handle``. A handler signals failure by raising;
    the bus retries according to the subscription's retry policy.
    """

    @abstractmethod
    async def handle(self, event: Event) -> Any:
        """Handle the event.

        Args:
            event: The delivered event.

        Raises:
            Any exception that occurs during handling. The bus retries the
            delivery and logs the failure once the retry budget is spent.
        """

    def __call__(self, event: Event) -> Any:
        """Make the handler callable.

        This allows handler instances to be used anywhere a plain async
        function handler is accepted.
        """
        return self.handle(event)


async def invoke_handler(handler: T_Handler, event: Event) -> Any:
    """Call a handler and await its result when it returns an awaitable."""
    result = handler(event)
    if inspect.isawaitable(result):
        result = await result
    return result


class EventBusError(Exception):
    """Base exception for all event bus related errors.

    Use this for catching any event bus related error:
        ```python
        try:
            await bus.publish(event)
        except EventBusError as e:
            logger.error(f"Event bus error: {e}")
        ```
    """


class NotConnectedError(EventBusError):
    """Raised when publish/subscribe is called before ``connect()``."""

    def __init__(self, message: str = "Event bus not connected"):
        super().__init__(message)


class SubscriptionNotFoundError(EventBusError):
    """Raised when ``unsubscribe`` is given an unknown subscription id."""

    def __init__(self, subscription_id: str):
        self.subscription_id = subscription_id
        super().__init__(f"Subscription {subscription_id} not found")


class DurableWriteError(EventBusError):
    """Raised when a published event could not be appended to the event store.

    The event has already been broadcast when this is raised; broadcasts are
    never rolled back.
    """

    def __init__(self, event_id: str, cause: Exception):
        self.event_id = event_id
        self.cause = cause
        super().__init__(f"Failed to persist event {event_id}: {cause}")
