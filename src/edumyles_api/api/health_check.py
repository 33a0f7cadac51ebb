"""Health check API endpoint."""

from fastapi import APIRouter, Depends, Response, status
from loguru import logger

from edumyles_api.api.dependencies import service
from edumyles_api.services.health_check_service import HealthCheckResult, HealthCheckService

router = APIRouter(tags=["System"])

health_service_dependency = Depends(service(HealthCheckService))


@router.get("/health-check", response_model=HealthCheckResult)
async def health_check(response: Response, health_service: HealthCheckService = health_service_dependency) -> HealthCheckResult:
    """
    Health check endpoint.

    Responds 200 when the event bus (and database, if configured) are healthy,
    503 otherwise.
    """
    logger.debug("Health check requested")

    result = await health_service.perform_health_check()
    if not result.is_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result
