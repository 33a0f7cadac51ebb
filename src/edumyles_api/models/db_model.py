from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field

from edumyles_api.models.base_model import EventRecordBase, EventSubscriptionBase


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EventRecord(EventRecordBase, table=True):
    """Durable log entry for a published event."""

    __tablename__ = "events"

    id: str = Field(primary_key=True, max_length=64)
    type: str = Field(index=True, max_length=255)
    source: str = Field(max_length=255)
    tenant_id: str = Field(index=True, max_length=64)
    # "metadata" is reserved on declarative classes
    event_metadata: dict[str, Any] | None = Field(default=None, sa_column=Column("metadata", JSON, nullable=True))
    timestamp: datetime = Field(sa_type=DateTime(timezone=True), index=True)


class EventSubscription(EventSubscriptionBase, table=True):
    """Subscription registration row, read for introspection only."""

    __tablename__ = "event_subscriptions"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=64)
    event_type: str = Field(index=True, max_length=255)
    module_id: str = Field(index=True, max_length=128)
    handler: str = Field(max_length=255)
    created_at: datetime = Field(sa_type=DateTime(timezone=True), default_factory=_utcnow)
