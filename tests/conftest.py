"""Shared fixtures: an in-memory event bus with a recorded backoff sleep."""

import pytest
import pytest_asyncio
from loguru import logger

from edumyles_api.event_bus import EventBus, InMemoryBroker, InMemoryEventStore, InMemorySubscriptionRegistry, InMemoryTransport


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records the requested delays and returns at once."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def broker() -> InMemoryBroker:
    return InMemoryBroker()


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def registry() -> InMemorySubscriptionRegistry:
    return InMemorySubscriptionRegistry()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest_asyncio.fixture
async def bus(broker, store, registry, sleep):
    """A connected bus on an in-memory transport; disconnected after the test."""
    event_bus = EventBus(InMemoryTransport(broker), store, registry, sleep=sleep)
    await event_bus.connect()
    yield event_bus
    await event_bus.disconnect()


@pytest.fixture
def error_logs():
    """Messages logged at ERROR level or above during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="ERROR", format="{message}")
    yield messages
    logger.remove(handler_id)
