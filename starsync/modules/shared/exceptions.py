"""
Domain exceptions for StarSync.

Purpose
-------
Structured exceptions raised by the roster and nickname services for
user-facing failures: bad input, duplicate claims, missing claims or members.
Cogs translate these into embeds through the exception template registry.

Design Notes
------------
- All domain exceptions inherit from `StarSyncDomainException`.
- Each exception carries `message`, `details` (dict used for template
  interpolation), `severity`, `is_retryable` and `error_code`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and embed styling."""

    DEBUG = "debug"
    INFO = "info"  # Expected user mistakes (bad id, duplicate claim)
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class StarSyncDomainException(Exception):
    """
    Base exception for all StarSync domain-level errors.

    Args:
        message: Human-readable error message
        details: Structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r})"
        )


class InvalidInputError(StarSyncDomainException):
    """
    Raised when command input cannot be interpreted.

    Args:
        field: Name of the offending argument (e.g. "aoc_id", "member")
        value: The raw value supplied
        reason: Short explanation shown to the user
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        super().__init__(
            f"Invalid {field} {value!r}: {reason}",
            details={"field": field, "value": value, "reason": reason},
            error_code="INVALID_INPUT",
        )


class AlreadyClaimedError(StarSyncDomainException):
    """
    Raised when a claim would break per-guild uniqueness.

    `conflict` is "aoc_id" when another member already owns the id and
    "member" when the requester already holds a claim.
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, conflict: str, aoc_id: str, owner_id: Optional[str] = None) -> None:
        self.conflict = conflict
        self.aoc_id = aoc_id
        self.owner_id = owner_id
        if conflict == "aoc_id":
            message = f"AoC id {aoc_id} is already claimed"
        else:
            message = f"Member already holds a claim (AoC id {aoc_id})"
        super().__init__(
            message,
            details={"conflict": conflict, "aoc_id": aoc_id, "owner_id": owner_id},
            error_code=f"ALREADY_CLAIMED_{conflict.upper()}",
        )


class NotFoundError(StarSyncDomainException):
    """
    Raised when a requested entity cannot be found.

    Args:
        resource_type: Type of resource (e.g. "Claim", "Member")
        identifier: Optional identifier for the missing resource
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={"resource_type": resource_type, "identifier": identifier},
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class ClaimNotFoundError(NotFoundError):
    """Raised when a member has no claim in the guild."""

    def __init__(self, guild_id: str, discord_id: str) -> None:
        super().__init__("Claim", discord_id)
        self.details["guild_id"] = guild_id


class MemberNotFoundError(NotFoundError):
    """Raised when a Discord member cannot be fetched from the guild."""

    def __init__(self, guild_id: str, discord_id: str) -> None:
        super().__init__("Member", discord_id)
        self.details["guild_id"] = guild_id


def is_user_error(error: Exception) -> bool:
    """True for domain errors that only need a friendly reply, not a stack trace."""
    return isinstance(error, StarSyncDomainException) and error.severity in (
        ErrorSeverity.DEBUG,
        ErrorSeverity.INFO,
    )
