"""Tests for the service registry and the DI setup."""

import pytest

from edumyles_api.event_bus import EventBus, InMemoryEventStore, InMemorySubscriptionRegistry, InMemoryTransport
from edumyles_api.services.di import register_all_services
from edumyles_api.services.health_check_service import HealthCheckService
from edumyles_api.services.registry import ServiceRegistry
from edumyles_api.settings import Settings


class Clock:
    """Callable service: must not be mistaken for a factory."""

    def __init__(self, now: str = "2026-01-01T00:00:00Z"):
        self.now = now

    def __call__(self) -> str:
        return self.now


def make_bus() -> EventBus:
    return EventBus(InMemoryTransport(), InMemoryEventStore(), InMemorySubscriptionRegistry())


class TestServiceRegistry:
    """Singletons, factories and lookups."""

    def test_singleton_is_returned_as_registered(self):
        registry = ServiceRegistry()
        bus = make_bus()

        registry.register_singleton(EventBus, bus)

        assert registry.get(EventBus) is bus
        assert registry.get(EventBus) is bus

    def test_factory_is_called_on_every_get(self):
        registry = ServiceRegistry()
        calls = []

        def bus_factory() -> EventBus:
            calls.append(1)
            return make_bus()

        registry.register_factory(EventBus, bus_factory)
        first = registry.get(EventBus)
        second = registry.get(EventBus)

        assert len(calls) == 2
        assert first is not second

    def test_callable_singleton_is_not_called(self):
        registry = ServiceRegistry()
        clock = Clock()

        registry.register_singleton(Clock, clock)

        assert registry.get(Clock) is clock

    def test_unregistered_service_raises_key_error(self):
        with pytest.raises(KeyError, match="Service EventBus not registered"):
            ServiceRegistry().get(EventBus)

    def test_singleton_replaces_factory(self):
        registry = ServiceRegistry()
        assert not registry.has(Clock)

        registry.register_factory(Clock, lambda: Clock("factory"))
        assert registry.has(Clock)
        assert registry.get(Clock).now == "factory"

        pinned = Clock("pinned")
        registry.register_singleton(Clock, pinned)
        assert registry.get(Clock) is pinned

    def test_registries_are_independent(self):
        first, second = ServiceRegistry(), ServiceRegistry()
        first.register_singleton(Clock, Clock())

        assert first.has(Clock)
        assert not second.has(Clock)


class TestRegisterAllServices:
    """What the composition root puts in the registry."""

    def test_registers_settings_bus_and_health_check(self):
        registry = ServiceRegistry()
        settings = Settings(_env_file=None, database_url=None)
        bus = make_bus()

        register_all_services(registry, settings, bus)

        assert registry.get(Settings) is settings
        assert registry.get(EventBus) is bus
        health = registry.get(HealthCheckService)
        assert health.event_bus is bus
        assert health.database_enabled is False

    @pytest.mark.parametrize(
        "database_url,event_store_enabled,expected",
        [
            ("sqlite://", True, True),
            ("sqlite://", False, False),
            (None, True, False),
        ],
    )
    def test_database_check_follows_settings(self, database_url, event_store_enabled, expected):
        registry = ServiceRegistry()
        settings = Settings(_env_file=None, database_url=database_url, event_store_enabled=event_store_enabled)

        register_all_services(registry, settings, make_bus())

        assert registry.get(HealthCheckService).database_enabled is expected
