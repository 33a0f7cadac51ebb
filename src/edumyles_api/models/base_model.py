from datetime import datetime
from typing import Any

from sqlalchemy import JSON
from sqlmodel import Field, SQLModel


class EventRecordBase(SQLModel):
    """Base model for a persisted event."""

    id: str | None = None
    type: str | None = None
    source: str | None = None
    tenant_id: str | None = None
    data: dict[str, Any] = Field(sa_type=JSON, default_factory=dict)
    timestamp: datetime | None = None


class EventSubscriptionBase(SQLModel):
    """Base model for a subscription registration."""

    event_type: str | None = None
    module_id: str | None = None
    handler: str | None = None
    priority: int = 0
    active: bool = True
