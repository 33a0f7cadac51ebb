"""Event bus data models.

Events travel as JSON with camelCase keys (``tenantId``, ``correlationId``)
so that they interoperate with existing subscribers on the same channels.
Python code uses the snake_case attribute names; both spellings are accepted
on input.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializationInfo, field_serializer
from pydantic.alias_generators import to_camel

WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventMetadata(BaseModel):
    """Correlation data carried alongside an event.

    The bus never interprets these values. Unknown keys are preserved so that
    publishers can attach their own identifiers, and keys the publisher did not
    set are left out when serialized.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="allow")

    correlation_id: str | None = None
    causation_id: str | None = None
    session_id: str | None = None
    request_id: str | None = None
    user_id: str | None = None
    retry_count: int | None = None


class EventInput(BaseModel):
    """What a caller hands to ``publish``: an event without ``id`` and ``timestamp``.

    Any ``id`` or ``timestamp`` supplied by the caller is ignored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    type: str = Field(..., min_length=1, description="Dot-namespaced event kind, e.g. user.login")
    source: str = Field(..., description="Originating module or component")
    tenant_id: str = Field(..., min_length=1, description="Tenant the event belongs to")
    data: dict[str, Any] = Field(default_factory=dict, description="Opaque event payload")
    metadata: EventMetadata | None = None

    @field_serializer("metadata")
    def _serialize_metadata(self, metadata: EventMetadata | None, info: SerializationInfo) -> dict[str, Any] | None:
        # Only the keys the publisher set travel on the wire
        if metadata is None:
            return None
        return metadata.model_dump(mode=info.mode, by_alias=info.by_alias, exclude_unset=True)


class Event(EventInput):
    """A published event. Immutable once constructed."""

    id: str
    timestamp: datetime

    def to_json(self) -> str:
        """Serialize to the JSON wire format."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, payload: str | bytes) -> "Event":
        """Deserialize an event received from a channel."""
        return cls.model_validate_json(payload)


class RetryPolicy(BaseModel):
    """Per-subscription retry of failed handler invocations.

    Delays are expressed in milliseconds.
    """

    model_config = WIRE_CONFIG

    max_retries: int = Field(default=0, ge=0)
    backoff_multiplier: float = Field(default=2, ge=0)
    max_backoff_delay: int = Field(default=30000, ge=0)


class SubscriptionOptions(BaseModel):
    """Options accepted by ``EventBus.subscribe``.

    Attributes:
        priority: Informational; the live delivery path does not order by it.
        filter: Predicate evaluated before the handler. Returning False drops
            the event silently, without counting as an attempt.
        retry_policy: Retry behaviour for handler failures. No retries when unset.
    """

    model_config = WIRE_CONFIG

    priority: int = 0
    filter: Callable[[Event], bool] | None = None
    retry_policy: RetryPolicy | None = None


class RegisteredSubscription(BaseModel):
    """A persisted subscription registration, as listed by ``get_subscriptions``.

    Registrations describe which module handles which event type. They are an
    introspection record only; the live delivery path never reads them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    event_type: str
    module_id: str
    handler: str
    priority: int = 0
    active: bool = True
    created_at: datetime | None = None
