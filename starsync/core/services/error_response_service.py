"""
Error Response Service for StarSync.

Purpose
-------
Turn domain and infrastructure exceptions into user-facing response dicts
that EmbedFactory renders. No logging and no Discord objects here.
"""

from __future__ import annotations

from typing import Any, Dict

from starsync.core.exceptions import StarSyncInfrastructureException
from starsync.domain.exceptions.registry import get_exception_template
from starsync.modules.shared.exceptions import ErrorSeverity, StarSyncDomainException


class ErrorResponseService:
    """Formats exceptions via the template registry with a generic fallback."""

    def format_error(self, error: Exception) -> Dict[str, Any]:
        """
        Format an exception into a user-friendly response structure.

        Example:
            >>> ErrorResponseService().format_error(
            ...     InvalidInputError("aoc_id", "abc", "must be digits only")
            ... )["title"]
            'Invalid Input'
        """
        template = get_exception_template(error)
        if template is not None:
            return template.format(error)
        return self._format_fallback_error(error)

    def _format_fallback_error(self, error: Exception) -> Dict[str, Any]:
        if isinstance(error, StarSyncDomainException):
            severity = error.severity
            description = error.message
        elif isinstance(error, StarSyncInfrastructureException):
            severity = error.severity
            description = "A system error occurred. Please try again in a moment."
        else:
            severity = ErrorSeverity.ERROR
            description = "An unexpected error occurred."

        return {
            "title": "Something Went Wrong",
            "description": description,
            "help_text": "The issue has been logged.",
            "severity": severity,
        }
