"""CLI module for the EduMyles API.

Provides command-line interface for administrative tasks: database migrations
and event bus operations.
"""

from edumyles_api.cli.app import app

__all__ = ["app"]
