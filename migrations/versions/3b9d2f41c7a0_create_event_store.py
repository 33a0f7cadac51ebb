"""Create event store tables

Revision ID: 3b9d2f41c7a0
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3b9d2f41c7a0"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create the durable event log and the subscription registry."""
    op.create_table(
        "events",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("type", sa.String(255), nullable=False),
        sa.Column("source", sa.String(255), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("data", JSON_TYPE, nullable=False),
        sa.Column("metadata", JSON_TYPE, nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_events_type", "events", ["type"], unique=False)
    op.create_index("ix_events_tenant_id", "events", ["tenant_id"], unique=False)
    op.create_index("ix_events_timestamp", "events", ["timestamp"], unique=False)
    # Tenant replay reads events of one tenant in time order
    op.create_index("idx_events_tenant_timestamp", "events", ["tenant_id", "timestamp"], unique=False)

    op.create_table(
        "event_subscriptions",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("event_type", sa.String(255), nullable=False),
        sa.Column("module_id", sa.String(128), nullable=False),
        sa.Column("handler", sa.String(255), nullable=False),
        sa.Column("priority", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_event_subscriptions_event_type", "event_subscriptions", ["event_type"], unique=False)
    op.create_index("ix_event_subscriptions_module_id", "event_subscriptions", ["module_id"], unique=False)


def downgrade() -> None:
    """Drop the event store tables."""
    op.drop_table("event_subscriptions")
    op.drop_table("events")
