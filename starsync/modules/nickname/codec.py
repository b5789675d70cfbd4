"""
Display-name codec.

Encodes a star count into a member's nickname as a trailing `" ⭐<n>"` suffix
and decodes it back. Unknown scores are written as `"⭐?"`.

    >>> build_display_name("Alice", 42)
    'Alice ⭐42'
    >>> parse_base_name("Alice ⭐42")
    'Alice'
    >>> parse_base_name("Bob 42")
    'Bob 42'

For any base without trailing whitespace that does not itself end in a
suffix, `parse_base_name(build_display_name(base, s)) == base` as long as the
result fits in the nickname limit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

STAR = "⭐"
UNKNOWN_MARKER = "?"
NICKNAME_LIMIT = 32

# The star may carry an emoji presentation selector when typed by hand
_SUFFIX_RE = re.compile(
    r"^(?P<base>.+?)\s*" + STAR + "\ufe0f?" + r"\s*(?P<score>[0-9]+|\?)$",
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class ParsedScore:
    """Value encoded in a nickname suffix; `value` is None for `⭐?`."""

    value: Optional[int]

    @property
    def is_unknown(self) -> bool:
        return self.value is None


def _match(display_name: str) -> Optional[re.Match[str]]:
    match = _SUFFIX_RE.match(display_name)
    if match is None or not match.group("base").strip():
        return None
    return match


def parse_base_name(display_name: str) -> str:
    """Strip a trailing star suffix; names without one are returned unchanged."""
    match = _match(display_name)
    if match is None:
        return display_name
    return match.group("base").rstrip()


def parse_score(display_name: str) -> Optional[ParsedScore]:
    """Return the score encoded in the suffix, or None when there is no suffix."""
    match = _match(display_name)
    if match is None:
        return None
    raw = match.group("score")
    return ParsedScore(None if raw == UNKNOWN_MARKER else int(raw))


def format_score(score: Optional[int]) -> str:
    return UNKNOWN_MARKER if score is None else str(score)


def build_display_name(
    base_name: str,
    score: Optional[int],
    limit: int = NICKNAME_LIMIT,
) -> str:
    """
    Append the star suffix to `base_name`.

    A score of 0 is a known score and renders as `⭐0`. When the result would
    exceed `limit`, the base is shortened and the suffix kept whole.
    """
    suffix = f" {STAR}{format_score(score)}"
    room = limit - len(suffix)
    if len(base_name) > room:
        base_name = base_name[: max(room, 0)].rstrip()
    return f"{base_name}{suffix}"
