"""Pub/sub transports used by the event bus.

A transport is a fire-and-forget broadcast medium: every listener connected to
a channel at publish time may receive the message, nothing is persisted and
offline listeners miss it. The bus needs:

- ``connect`` / ``disconnect`` / ``ping``
- ``publish(channel, payload)``
- ``duplicate()``: an independent connection for a dedicated listener
- ``subscribe(channel, on_message)``: returns a ``Listener`` to close later

``InMemoryTransport`` implements the same contract inside one process. It is
used when Redis is disabled and throughout the test suite.
"""

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

MessageCallback = Callable[[str], Awaitable[Any]]


class Listener(ABC):
    """Handle for one channel listener opened by ``Transport.subscribe``."""

    @abstractmethod
    async def close(self) -> None:
        """Stop listening and release the listener's resources."""


class Transport(ABC):
    """Abstract pub/sub transport."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the underlying connection."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the underlying connection."""

    @abstractmethod
    async def ping(self) -> None:
        """Liveness probe. Raises if the connection is not usable."""

    @abstractmethod
    async def publish(self, channel: str, payload: str) -> None:
        """Broadcast ``payload`` on ``channel``."""

    @abstractmethod
    def duplicate(self) -> "Transport":
        """Return a new, unconnected transport with the same configuration."""

    @abstractmethod
    async def subscribe(self, channel: str, on_message: MessageCallback) -> Listener:
        """Invoke ``on_message`` with every payload published on ``channel``."""


class InMemoryBroker:
    """Channel registry shared by all ``InMemoryTransport`` connections.

    Keeps a log of published messages and the number of open listeners so
    callers can inspect what went over the wire.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[MessageCallback]] = defaultdict(list)
        self._pending: set[asyncio.Task] = set()
        self.published: list[tuple[str, str]] = []

    def add_listener(self, channel: str, callback: MessageCallback) -> None:
        self._listeners[channel].append(callback)

    def remove_listener(self, channel: str, callback: MessageCallback) -> None:
        callbacks = self._listeners.get(channel, [])
        if callback in callbacks:
            callbacks.remove(callback)
        if not callbacks:
            self._listeners.pop(channel, None)

    def listener_count(self, channel: str | None = None) -> int:
        """Number of open listeners on ``channel``, or on all channels."""
        if channel is not None:
            return len(self._listeners.get(channel, []))
        return sum(len(callbacks) for callbacks in self._listeners.values())

    def messages(self, channel: str) -> list[str]:
        """Payloads published on ``channel`` so far, oldest first."""
        return [payload for published_channel, payload in self.published if published_channel == channel]

    def broadcast(self, channel: str, payload: str) -> int:
        """Schedule delivery to every current listener and return how many there were."""
        self.published.append((channel, payload))
        callbacks = list(self._listeners.get(channel, []))
        for callback in callbacks:
            task = asyncio.create_task(callback(payload))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        return len(callbacks)

    async def drain(self) -> None:
        """Wait until every scheduled delivery, including retries, has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class InMemoryListener(Listener):
    """Listener registered on an ``InMemoryBroker`` channel."""

    def __init__(self, broker: InMemoryBroker, channel: str, callback: MessageCallback):
        self._broker = broker
        self._channel = channel
        self._callback = callback
        self.closed = False

    async def close(self) -> None:
        if self.closed:
            return
        self._broker.remove_listener(self._channel, self._callback)
        self.closed = True


class InMemoryTransport(Transport):
    """In-process transport: publish schedules listener callbacks as loop tasks."""

    def __init__(self, broker: InMemoryBroker | None = None):
        self.broker = broker if broker is not None else InMemoryBroker()
        self._connected = False
        self._listeners: list[InMemoryListener] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True
        logger.debug("In-memory transport connected")

    async def disconnect(self) -> None:
        for listener in self._listeners:
            await listener.close()
        self._listeners.clear()
        self._connected = False
        logger.debug("In-memory transport disconnected")

    async def ping(self) -> None:
        if not self._connected:
            raise ConnectionError("In-memory transport is not connected")

    async def publish(self, channel: str, payload: str) -> None:
        if not self._connected:
            raise ConnectionError("In-memory transport is not connected")
        receivers = self.broker.broadcast(channel, payload)
        logger.trace(f"Published on {channel} to {receivers} listeners")

    def duplicate(self) -> "InMemoryTransport":
        return InMemoryTransport(self.broker)

    async def subscribe(self, channel: str, on_message: MessageCallback) -> Listener:
        if not self._connected:
            raise ConnectionError("In-memory transport is not connected")
        self.broker.add_listener(channel, on_message)
        listener = InMemoryListener(self.broker, channel, on_message)
        self._listeners.append(listener)
        return listener
