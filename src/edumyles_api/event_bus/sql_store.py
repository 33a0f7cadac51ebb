"""SQL-backed event store and subscription registry.

Both use synchronous SQLModel sessions. The bus runs on the event loop, so the
blocking session work is moved to a worker thread with ``asyncio.to_thread``.
"""

import asyncio
from collections.abc import Callable
from contextlib import AbstractContextManager

from loguru import logger
from sqlmodel import Session, select

from edumyles_api.database import borrow_db_session
from edumyles_api.models.db_model import EventRecord, EventSubscription

from .models import Event, RegisteredSubscription
from .store import EventStore, SubscriptionRegistry

SessionFactory = Callable[[], AbstractContextManager[Session]]


def event_to_record(event: Event) -> EventRecord:
    """Map a published event onto its ``events`` row."""
    metadata = event.metadata.model_dump(by_alias=True, exclude_unset=True) if event.metadata is not None else None
    return EventRecord(
        id=event.id,
        type=event.type,
        source=event.source,
        tenant_id=event.tenant_id,
        data=event.data,
        event_metadata=metadata,
        timestamp=event.timestamp,
    )


class SqlEventStore(EventStore):
    """Appends published events to the ``events`` table."""

    def __init__(self, session_factory: SessionFactory = borrow_db_session):
        self._session_factory = session_factory

    def _append(self, event: Event) -> None:
        with self._session_factory() as session:
            try:
                session.add(event_to_record(event))
                session.commit()
            except Exception:
                session.rollback()
                raise
        logger.trace(f"Event {event.id} appended to event store")

    async def append(self, event: Event) -> None:
        await asyncio.to_thread(self._append, event)


class SqlSubscriptionRegistry(SubscriptionRegistry):
    """Reads and writes the ``event_subscriptions`` table."""

    def __init__(self, session_factory: SessionFactory = borrow_db_session):
        self._session_factory = session_factory

    def _list(self, module_id: str) -> list[RegisteredSubscription]:
        with self._session_factory() as session:
            stmt = (
                select(EventSubscription)
                .where(EventSubscription.module_id == module_id)
                .where(EventSubscription.active == True)  # noqa: E712
                .order_by(EventSubscription.priority.desc())
            )
            rows = session.exec(stmt).all()
            logger.debug(f"Registry: {len(rows)} active subscriptions for module {module_id}")
            return [RegisteredSubscription.model_validate(row) for row in rows]

    async def list_subscriptions(self, module_id: str) -> list[RegisteredSubscription]:
        return await asyncio.to_thread(self._list, module_id)

    def _register(self, event_type: str, module_id: str, handler: str, priority: int, active: bool) -> RegisteredSubscription:
        with self._session_factory() as session:
            row = EventSubscription(event_type=event_type, module_id=module_id, handler=handler, priority=priority, active=active)
            try:
                session.add(row)
                session.commit()
                session.refresh(row)
            except Exception:
                session.rollback()
                raise
            logger.debug(f"Registry: registered {handler} of module {module_id} for {event_type}")
            return RegisteredSubscription.model_validate(row)

    async def register(
        self, event_type: str, module_id: str, handler: str, priority: int = 0, active: bool = True
    ) -> RegisteredSubscription:
        """Insert a registration row (admin path; live delivery never reads it)."""
        return await asyncio.to_thread(self._register, event_type, module_id, handler, priority, active)
