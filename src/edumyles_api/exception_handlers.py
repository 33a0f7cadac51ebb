"""Global exception handlers for the FastAPI application.

This module contains custom exception handlers that convert
application exceptions into proper HTTP responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from edumyles_api.event_bus import DurableWriteError, EventBusError, NotConnectedError, SubscriptionNotFoundError

# Most specific first; the first matching class wins
ERROR_RESPONSES: list[tuple[type[Exception], int, str]] = [
    (NotConnectedError, status.HTTP_503_SERVICE_UNAVAILABLE, "EVENT_BUS_UNAVAILABLE"),
    (DurableWriteError, status.HTTP_503_SERVICE_UNAVAILABLE, "EVENT_STORE_UNAVAILABLE"),
    (SubscriptionNotFoundError, status.HTTP_404_NOT_FOUND, "SUBSCRIPTION_NOT_FOUND"),
    (EventBusError, status.HTTP_500_INTERNAL_SERVER_ERROR, "EVENT_BUS_ERROR"),
]


def error_response(exc: Exception) -> JSONResponse:
    """Build the JSON error body for an application exception."""
    for exc_type, status_code, code in ERROR_RESPONSES:
        if isinstance(exc, exc_type):
            return JSONResponse(status_code=status_code, content={"success": False, "code": code, "message": str(exc)})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "code": "INTERNAL_ERROR", "message": "Internal Server Error"},
    )


async def application_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    response = error_response(exc)
    logger.warning(f"{request.method} {request.url.path} failed with {response.status_code}: {exc}")
    return response


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(EventBusError, application_exception_handler)
    logger.debug("Registered exception handlers")
