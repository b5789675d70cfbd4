"""
StarSync Shared Module

Domain-level foundations used by every module:
- Domain exceptions and severity levels
- Base service and repository patterns

No Discord imports and no UI concerns.
"""

from __future__ import annotations

from .base_repository import BaseRepository
from .base_service import BaseService
from .exceptions import (
    AlreadyClaimedError,
    ClaimNotFoundError,
    ErrorSeverity,
    InvalidInputError,
    MemberNotFoundError,
    NotFoundError,
    StarSyncDomainException,
    is_user_error,
)

__all__ = [
    # Base patterns
    "BaseService",
    "BaseRepository",
    # Exceptions
    "StarSyncDomainException",
    "ErrorSeverity",
    "InvalidInputError",
    "AlreadyClaimedError",
    "NotFoundError",
    "ClaimNotFoundError",
    "MemberNotFoundError",
    "is_user_error",
]
