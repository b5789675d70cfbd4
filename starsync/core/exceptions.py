"""
Infrastructure exceptions for StarSync.

Purpose
-------
Exceptions for engineering-level failures: the leaderboard feed being
unreachable, Discord rejecting an operation, a bad configuration, or the claim
database failing. Domain (user-facing) errors live in
`starsync.modules.shared.exceptions`.

Design Notes
------------
- All infrastructure exceptions inherit from `StarSyncInfrastructureException`
  and share the same structured metadata as domain exceptions.
- `is_retryable` marks failures the next reconciliation tick may recover from.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from starsync.modules.shared.exceptions import ErrorSeverity


class StarSyncInfrastructureException(Exception):
    """
    Base exception for all StarSync infrastructure-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
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


class UpstreamFetchFailure(StarSyncInfrastructureException):
    """
    Raised when the leaderboard feed cannot be fetched or decoded.

    Covers transport errors, timeouts, non-2xx statuses (an expired session
    cookie typically shows up as a redirect or 400) and malformed JSON.

    Args:
        url: Requested URL
        reason: Short description of the failure
        status: HTTP status when a response was received
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        self.url = url
        self.status = status
        super().__init__(
            f"Leaderboard fetch failed: {reason}",
            details={"url": url, "reason": reason, "status": status},
            error_code="UPSTREAM_FETCH_FAILED",
        )


class PlatformOperationFailure(StarSyncInfrastructureException):
    """
    Raised when a Discord operation (fetch member, edit nickname) fails.

    Args:
        operation: Operation name, e.g. "edit_nickname"
        guild_id: Guild the operation targeted
        member_id: Member the operation targeted, if any
        original_error: The underlying discord.py exception
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(
        self,
        operation: str,
        guild_id: Any,
        member_id: Any = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.operation = operation
        self.original_error = original_error
        error_msg = str(original_error) if original_error else "operation failed"
        super().__init__(
            f"Discord {operation} failed: {error_msg}",
            details={
                "operation": operation,
                "guild_id": str(guild_id),
                "member_id": str(member_id) if member_id is not None else None,
                "error": error_msg,
                "error_type": type(original_error).__name__ if original_error else None,
            },
            error_code="PLATFORM_OPERATION_FAILED",
        )


class ConfigurationError(StarSyncInfrastructureException):
    """Raised when a configuration key is invalid or missing."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            details={"config_key": config_key, "message": message},
            error_code="CONFIG_ERROR",
        )


class DatabaseError(StarSyncInfrastructureException):
    """
    Raised when claim store operations fail.

    Args:
        operation: Description of the database operation that failed
        original_error: The underlying database exception
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE = True

    def __init__(self, operation: str, original_error: Exception) -> None:
        self.operation = operation
        self.original_error = original_error
        super().__init__(
            f"Database error during {operation}: {original_error}",
            details={
                "operation": operation,
                "error": str(original_error),
                "error_type": type(original_error).__name__,
            },
            error_code="DATABASE_ERROR",
        )
