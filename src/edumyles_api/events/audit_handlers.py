"""Audit event handlers.

This module contains handlers that turn domain events into audit log lines.
"""

from loguru import logger

from edumyles_api.event_bus import Event, EventHandler


class AuditLogEventHandler(EventHandler):
    """Write one audit log line per delivered event.

    The tenant, event type, source and id are bound to the log record so
    structured sinks can index them.
    """

    def __init__(self, audit_logger=logger):
        self._logger = audit_logger.bind(audit=True)

    async def handle(self, event: Event) -> None:
        """Handle any domain event.

        Args:
            event: The delivered event
        """
        actor = event.data.get("userId") or event.data.get("createdBy") or (event.metadata.user_id if event.metadata else None)
        self._logger.bind(
            tenant_id=event.tenant_id,
            event_type=event.type,
            event_source=event.source,
            event_id=event.id,
        ).info(f"AUDIT: {event.type} in tenant {event.tenant_id} by {actor or 'system'}")
