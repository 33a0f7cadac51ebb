"""REST API routers."""

from edumyles_api.api.api_router import router as api_router

__all__ = ["api_router"]
