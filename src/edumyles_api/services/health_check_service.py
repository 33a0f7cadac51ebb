"""Health check service module."""

import asyncio
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field

from edumyles_api.database import borrow_db_session, is_healthy
from edumyles_api.event_bus import EventBus
from edumyles_api.utils.version import get_version

STATUS_HEALTHY = "healthy"
STATUS_UNHEALTHY = "unhealthy"


class CheckResult(BaseModel):
    """Outcome of one dependency check."""

    check: str
    success: bool
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class HealthCheckResult(BaseModel):
    """Pydantic model representing the full health check response."""

    status: str
    version_info: dict[str, Any] = Field(default_factory=dict)
    checks: list[CheckResult] = Field(default_factory=list)

    @property
    def is_healthy(self) -> bool:
        return self.status == STATUS_HEALTHY


class HealthCheckService:
    """Checks the dependencies the API needs: the event bus and, if configured, the database."""

    def __init__(self, event_bus: EventBus, database_enabled: bool):
        self.event_bus = event_bus
        self.database_enabled = database_enabled

    async def check_event_bus(self) -> CheckResult:
        healthy = await self.event_bus.is_healthy()
        return CheckResult(
            check="event_bus",
            success=healthy,
            message="Event bus transport is reachable" if healthy else "Event bus transport is not reachable",
            details={"connected": self.event_bus.is_connected, "subscriptions": len(self.event_bus.subscriptions)},
        )

    def _check_database(self) -> CheckResult:
        try:
            with borrow_db_session() as session:
                details = is_healthy(session)
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            details = {"status": STATUS_UNHEALTHY, "error": str(e), "connection": "failed"}
        success = details.get("status") == STATUS_HEALTHY
        return CheckResult(
            check="database_connection",
            success=success,
            message="Database connection is healthy" if success else "Database connection failed",
            details=details,
        )

    async def check_database(self) -> CheckResult:
        return await asyncio.to_thread(self._check_database)

    async def perform_health_check(self) -> HealthCheckResult:
        """Run all checks and summarise them."""
        checks = [await self.check_event_bus()]
        if self.database_enabled:
            checks.append(await self.check_database())

        status = STATUS_HEALTHY if all(check.success for check in checks) else STATUS_UNHEALTHY
        if status != STATUS_HEALTHY:
            logger.warning(f"Health check failed: {[check.check for check in checks if not check.success]}")

        return HealthCheckResult(status=status, version_info=get_version().model_dump(), checks=checks)
