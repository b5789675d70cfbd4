"""
Exception message template registry for StarSync.

Purpose
-------
Single source of truth for exception-to-message mappings. Cogs never hardcode
error text; they look up a template here and interpolate the exception's
structured `details`.

Design Notes
------------
Each template contains:
- title: Short error title for the embed
- template: Message with {placeholder} interpolation from `details`
- help_text: Optional guidance for the user
- severity: ErrorSeverity level for visual styling

Lookup order: error_code first (for exceptions whose wording depends on
which branch raised them), then the exception type and its bases.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from starsync.core.exceptions import (
    ConfigurationError,
    DatabaseError,
    PlatformOperationFailure,
    StarSyncInfrastructureException,
    UpstreamFetchFailure,
)
from starsync.modules.shared.exceptions import (
    AlreadyClaimedError,
    ClaimNotFoundError,
    ErrorSeverity,
    InvalidInputError,
    MemberNotFoundError,
    NotFoundError,
    StarSyncDomainException,
)


class ExceptionTemplate:
    """Template for formatting exception messages."""

    def __init__(
        self,
        title: str,
        template: str,
        help_text: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
    ):
        self.title = title
        self.template = template
        self.help_text = help_text
        self.severity = severity

    def format(self, exception: Exception) -> Dict[str, Any]:
        """
        Format exception using template.

        Returns:
            Dict with 'title', 'description', 'help_text', 'severity'
        """
        details: Dict[str, Any] = {}
        if isinstance(exception, (StarSyncDomainException, StarSyncInfrastructureException)):
            details = exception.details.copy()

        try:
            description = self.template.format(**details)
        except (KeyError, IndexError, ValueError):
            description = getattr(exception, "message", str(exception))

        return {
            "title": self.title,
            "description": description,
            "help_text": self.help_text,
            "severity": self.severity,
        }


# ============================================================================
# EXCEPTION TEMPLATE REGISTRY
# ============================================================================

EXCEPTION_TEMPLATES: Dict[type, ExceptionTemplate] = {
    # Domain Exceptions
    InvalidInputError: ExceptionTemplate(
        title="Invalid Input",
        template="`{value}` is not a valid {field}: {reason}.",
        help_text="Your AoC id is the number shown in your Advent of Code settings page.",
        severity=ErrorSeverity.INFO,
    ),
    ClaimNotFoundError: ExceptionTemplate(
        title="No Claim",
        template="There is no Advent of Code account claimed for <@{identifier}> here.",
        help_text="Use `aoc claim <id>` or `/claim` to link your account.",
        severity=ErrorSeverity.INFO,
    ),
    MemberNotFoundError: ExceptionTemplate(
        title="Member Not Found",
        template="Could not find member `{identifier}` in this server.",
        severity=ErrorSeverity.INFO,
    ),
    NotFoundError: ExceptionTemplate(
        title="Not Found",
        template="{resource_type} not found.",
        severity=ErrorSeverity.INFO,
    ),
    # Infrastructure Exceptions
    UpstreamFetchFailure: ExceptionTemplate(
        title="Leaderboard Unavailable",
        template="The Advent of Code leaderboard could not be reached.",
        help_text="Scores will refresh automatically on the next sync.",
        severity=ErrorSeverity.WARNING,
    ),
    PlatformOperationFailure: ExceptionTemplate(
        title="Discord Refused",
        template="Discord rejected the `{operation}` request.",
        help_text="Check that my role sits above yours and has Manage Nicknames.",
        severity=ErrorSeverity.WARNING,
    ),
    DatabaseError: ExceptionTemplate(
        title="Storage Error",
        template="Claims could not be read or written right now.",
        help_text="Please try again in a moment.",
        severity=ErrorSeverity.ERROR,
    ),
    ConfigurationError: ExceptionTemplate(
        title="Configuration Error",
        template="The bot is misconfigured (`{config_key}`).",
        severity=ErrorSeverity.CRITICAL,
    ),
}

EXCEPTION_TEMPLATES_BY_CODE: Dict[str, ExceptionTemplate] = {
    "ALREADY_CLAIMED_AOC_ID": ExceptionTemplate(
        title="Already Claimed",
        template="AoC id `{aoc_id}` is already claimed by <@{owner_id}>.",
        help_text="Ask a moderator if this is your account.",
        severity=ErrorSeverity.INFO,
    ),
    "ALREADY_CLAIMED_MEMBER": ExceptionTemplate(
        title="Already Claimed",
        template="You have already claimed AoC id `{aoc_id}`.",
        help_text="Use `aoc unclaim` first to switch accounts.",
        severity=ErrorSeverity.INFO,
    ),
}


def get_exception_template(exception: Exception) -> Optional[ExceptionTemplate]:
    """
    Get the most specific template for an exception.

    Returns:
        ExceptionTemplate if found, None otherwise
    """
    code = getattr(exception, "error_code", None)
    if code in EXCEPTION_TEMPLATES_BY_CODE:
        return EXCEPTION_TEMPLATES_BY_CODE[code]

    for exception_type in type(exception).__mro__:
        template = EXCEPTION_TEMPLATES.get(exception_type)
        if template is not None:
            return template
    return None


__all__ = [
    "AlreadyClaimedError",
    "EXCEPTION_TEMPLATES",
    "EXCEPTION_TEMPLATES_BY_CODE",
    "ExceptionTemplate",
    "get_exception_template",
]
