"""
Nickname Module
===============

Star-suffix codec for display names. `NicknameService`, which applies the
codec to guild members, is imported from `.service`.
"""

from .codec import (
    NICKNAME_LIMIT,
    STAR,
    UNKNOWN_MARKER,
    ParsedScore,
    build_display_name,
    format_score,
    parse_base_name,
    parse_score,
)

__all__ = [
    "STAR",
    "UNKNOWN_MARKER",
    "NICKNAME_LIMIT",
    "ParsedScore",
    "parse_base_name",
    "parse_score",
    "format_score",
    "build_display_name",
]
