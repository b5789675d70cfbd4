"""
Database subsystem for StarSync.

Async SQLAlchemy engine and session management, plus the ORM base
classes and mixins for model definitions.
"""

from starsync.core.database.base import Base, IdMixin, TimestampMixin, utc_now
from starsync.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)

__all__ = [
    # ORM Base & Mixins
    "Base",
    "IdMixin",
    "TimestampMixin",
    "utc_now",
    # Main service
    "DatabaseService",
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
]
