"""EduMyles API: multi-tenant school management service built around a tenant-scoped event bus."""

from .settings import Settings, get_settings  # noqa: F401

__all__ = ["get_settings", "Settings"]
