"""Alembic helpers for the event store schema.

Provides:
- Locating ``alembic.ini`` and the ``migrations`` directory
- Current / head revision lookup
- Upgrading to a target revision
- A schema state summary used by the CLI and the health check
"""

import os

import alembic.command
import alembic.config
from alembic.script import ScriptDirectory
from loguru import logger
from pydantic import BaseModel
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from .connection import borrow_db_session

EVENT_STORE_TABLES = ("events", "event_subscriptions")


class SchemaState(BaseModel):
    """Result of comparing the database schema against the migration scripts."""

    message: str
    is_latest: bool
    current_revision: str | None = None
    head_revision: str | None = None
    missing_tables: list[str] = []


class AlembicManager:
    """Centralized alembic operations manager."""

    def __init__(self, project_root: str | None = None):
        self.alembic_cfg: alembic.config.Config | None = None
        self._init_alembic_config(project_root)

    def _init_alembic_config(self, project_root: str | None) -> None:
        """Load ``alembic.ini`` from the project root, the working directory or the source checkout.

        The ``script_location`` is rewritten to an absolute path so migrations
        work from any directory.
        """
        # database/ -> edumyles_api/ -> src/ -> project root
        package_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
        candidates = [root for root in (project_root, os.getcwd(), package_root) if root]

        for root in candidates:
            alembic_ini_path = os.path.join(root, "alembic.ini")
            if not os.path.exists(alembic_ini_path):
                continue
            logger.trace(f"Loading alembic configuration from: {alembic_ini_path}")
            self.alembic_cfg = alembic.config.Config(alembic_ini_path)
            migrations_path = os.path.join(root, "migrations")
            if os.path.exists(migrations_path):
                self.alembic_cfg.set_main_option("script_location", migrations_path)
            return

        logger.error(f"Alembic configuration file not found in: {', '.join(candidates)}")

    def get_current_revision(self) -> str | None:
        """Get current alembic revision from database."""
        with borrow_db_session() as session:
            try:
                row = session.exec(text("SELECT version_num FROM alembic_version LIMIT 1")).one_or_none()
            except SQLAlchemyError as e:
                logger.error(f"Failed to get current revision: {e}")
                return None
        current_rev = row[0] if row is not None else None
        logger.trace(f"Current database revision: {current_rev}")
        return current_rev

    def get_head_revision(self) -> str | None:
        """Get head revision from alembic scripts."""
        if not self.alembic_cfg:
            logger.error("Alembic configuration not initialized")
            return None
        head_rev = ScriptDirectory.from_config(self.alembic_cfg).get_current_head()
        logger.trace(f"Head revision from scripts: {head_rev}")
        return head_rev

    def perform_migration(self, target: str = "head") -> bool:
        """Upgrade the database to ``target``.

        Returns:
            True if migration successful, False otherwise
        """
        if not self.alembic_cfg:
            logger.error("Alembic configuration not initialized")
            return False

        try:
            logger.info(f"Starting database migration to '{target}'")
            alembic.command.upgrade(self.alembic_cfg, target)
            logger.info(f"Database migration to '{target}' completed successfully")
            return True
        except (OSError, ValueError, RuntimeError, SQLAlchemyError) as e:
            logger.error(f"Migration failed: {e}")
            return False

    def validate_schema_state(self) -> SchemaState:
        """Compare the database against the migration head without migrating."""
        if not self.alembic_cfg:
            return SchemaState(message="Alembic configuration not available", is_latest=False)

        with borrow_db_session() as session:
            table_names = set(inspect(session.bind).get_table_names())

        if "alembic_version" not in table_names:
            return SchemaState(message="Alembic version table not found", is_latest=False, head_revision=self.get_head_revision())

        current_rev = self.get_current_revision()
        head_rev = self.get_head_revision()
        missing = [table for table in EVENT_STORE_TABLES if table not in table_names]

        if current_rev != head_rev:
            message = f"Database schema is out of date. Current: {current_rev}, Head: {head_rev}"
        elif missing:
            message = f"Event store tables missing: {', '.join(missing)}"
        else:
            message = "Database schema is at the latest version"

        return SchemaState(
            message=message,
            is_latest=current_rev == head_rev and not missing,
            current_revision=current_rev,
            head_revision=head_rev,
            missing_tables=missing,
        )
