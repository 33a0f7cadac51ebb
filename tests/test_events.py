"""Tests for the application's event subscriptions."""

from datetime import UTC, datetime

import pytest
from loguru import logger

from edumyles_api.event_bus import Event, EventMetadata
from edumyles_api.events import AuditLogEventHandler, register_event_subscriptions
from edumyles_api.events.types import ALL_EVENT_TYPES, STUDENT_PROFILE_UPDATED, USER_LOGIN


@pytest.fixture
def audit_records():
    """Records logged with ``audit=True`` bound."""
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="INFO", filter=lambda record: record["extra"].get("audit"))
    yield records
    logger.remove(handler_id)


class TestAuditLogEventHandler:
    """One audit line per delivered event."""

    @pytest.mark.asyncio
    async def test_logs_event_with_bound_context(self, audit_records):
        event = Event(
            id="e-1",
            type=USER_LOGIN,
            source="auth",
            tenant_id="t1",
            data={"userId": "u1"},
            timestamp=datetime.now(UTC),
        )

        await AuditLogEventHandler().handle(event)

        assert len(audit_records) == 1
        record = audit_records[0]
        assert record["message"] == "AUDIT: user.login in tenant t1 by u1"
        assert record["extra"]["tenant_id"] == "t1"
        assert record["extra"]["event_type"] == USER_LOGIN
        assert record["extra"]["event_id"] == "e-1"

    @pytest.mark.asyncio
    async def test_falls_back_to_metadata_user_then_system(self, audit_records):
        handler = AuditLogEventHandler()
        base = {"id": "e-2", "type": STUDENT_PROFILE_UPDATED, "source": "students", "tenant_id": "t1", "timestamp": datetime.now(UTC)}

        await handler.handle(Event(**base, metadata=EventMetadata(user_id="admin-7")))
        await handler.handle(Event(**base))

        assert audit_records[0]["message"].endswith("by admin-7")
        assert audit_records[1]["message"].endswith("by system")


class TestRegisterEventSubscriptions:
    """Wiring the audit handler onto the bus at startup."""

    @pytest.mark.asyncio
    async def test_subscribes_every_event_type(self, bus, broker):
        subscription_ids = await register_event_subscriptions(bus)

        assert len(subscription_ids) == len(ALL_EVENT_TYPES)
        for event_type in ALL_EVENT_TYPES:
            assert broker.listener_count(f"event:{event_type}") == 1
        assert {s.event_type for s in bus.subscriptions.values()} == set(ALL_EVENT_TYPES)

    @pytest.mark.asyncio
    async def test_published_events_are_audited(self, bus, broker, audit_records):
        await register_event_subscriptions(bus)

        await bus.publish({"type": "academic.year.created", "source": "academic", "tenantId": "t9", "data": {"createdBy": "u5"}})
        await broker.drain()

        assert [record["message"] for record in audit_records] == ["AUDIT: academic.year.created in tenant t9 by u5"]
