"""Database package for the EduMyles API.

This package provides database connection utilities and alembic management tools.
"""

from .alembic_utils import AlembicManager, SchemaState
from .connection import borrow_db_session, dispose_db, get_engine, is_healthy

__all__ = [
    # Connection functions
    "borrow_db_session",
    "get_engine",
    "is_healthy",
    "dispose_db",
    # Alembic utilities
    "AlembicManager",
    "SchemaState",
]
