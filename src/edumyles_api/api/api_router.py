"""API router initialization."""

from fastapi import APIRouter
from loguru import logger

from edumyles_api.api.events import router as events_router

# Create main API router
router = APIRouter()

router.include_router(events_router, prefix="/events", tags=["events"])

logger.debug("API router initialized (events router mounted)")
