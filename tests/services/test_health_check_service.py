"""Tests for the health check service."""

import pytest

from edumyles_api.event_bus import EventBus, InMemoryEventStore, InMemorySubscriptionRegistry, InMemoryTransport
from edumyles_api.services import health_check_service
from edumyles_api.services.health_check_service import CheckResult, HealthCheckService


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus(InMemoryTransport(), InMemoryEventStore(), InMemorySubscriptionRegistry())


class TestHealthCheckService:
    """Health of the event bus and the optional database."""

    @pytest.mark.asyncio
    async def test_connected_bus_without_database_is_healthy(self, event_bus):
        await event_bus.connect()

        result = await HealthCheckService(event_bus, database_enabled=False).perform_health_check()

        assert result.is_healthy
        assert [check.check for check in result.checks] == ["event_bus"]
        assert result.checks[0].details == {"connected": True, "subscriptions": 0}
        assert "version" in result.version_info
        await event_bus.disconnect()

    @pytest.mark.asyncio
    async def test_unconnected_bus_is_unhealthy(self, event_bus):
        result = await HealthCheckService(event_bus, database_enabled=False).perform_health_check()

        assert not result.is_healthy
        assert result.checks[0].success is False

    @pytest.mark.asyncio
    async def test_database_failure_makes_service_unhealthy(self, event_bus, monkeypatch):
        await event_bus.connect()
        service = HealthCheckService(event_bus, database_enabled=True)

        def failing_check() -> CheckResult:
            return CheckResult(check="database_connection", success=False, message="Database connection failed")

        monkeypatch.setattr(service, "_check_database", failing_check)

        result = await service.perform_health_check()

        assert result.status == health_check_service.STATUS_UNHEALTHY
        assert [check.check for check in result.checks] == ["event_bus", "database_connection"]
        await event_bus.disconnect()

    @pytest.mark.asyncio
    async def test_database_connection_error_is_reported_not_raised(self, event_bus, monkeypatch):
        def broken_session():
            raise ConnectionError("database unreachable")

        monkeypatch.setattr(health_check_service, "borrow_db_session", broken_session)

        check = await HealthCheckService(event_bus, database_enabled=True).check_database()

        assert check.success is False
        assert check.details["error"] == "database unreachable"
