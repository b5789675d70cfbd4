"""
Pure text formatters for Discord output.

Contains no business logic; every function is side-effect free.

Usage:
    >>> from starsync.ui.formatters import TextFormatters
    >>> TextFormatters.code_block_chunks("a\\nb", limit=2000)
    ['```\\na\\nb\\n```']
"""

from typing import List


class DiscordLimits:
    MESSAGE = 2000
    EMBED_TITLE = 256
    EMBED_DESCRIPTION = 4096
    EMBED_FOOTER = 2048


class TextFormatters:
    """Static helpers for fitting text into Discord limits."""

    CODE_FENCE = "```"

    @staticmethod
    def truncate(text: str, limit: int, suffix: str = "...") -> str:
        """
        Truncate text to `limit` characters, appending `suffix` when cut.

        Example:
            >>> TextFormatters.truncate("abcdef", 5)
            'ab...'
        """
        if len(text) <= limit:
            return text
        if limit <= len(suffix):
            return text[:limit]
        return text[: limit - len(suffix)] + suffix

    @classmethod
    def code_block_chunks(cls, text: str, limit: int = DiscordLimits.MESSAGE) -> List[str]:
        """
        Split text into fenced code blocks that each fit in one message.

        Lines are never split unless a single line alone does not fit between the fences,
        in which case it is hard-wrapped. Empty text yields no chunks.

        Example:
            >>> TextFormatters.code_block_chunks("")
            []
        """
        if not text:
            return []

        wrapper = len(cls.CODE_FENCE) * 2 + 2  # opening fence + "\n" ... "\n" + closing fence
        room = limit - wrapper
        if room <= 0:
            raise ValueError(f"limit {limit} leaves no room for content")

        lines: List[str] = []
        for line in text.split("\n"):
            while len(line) > room:
                lines.append(line[:room])
                line = line[room:]
            lines.append(line)

        chunks: List[str] = []
        current: List[str] = []
        size = 0
        for line in lines:
            added = len(line) + (1 if current else 0)
            if current and size + added > room:
                chunks.append("\n".join(current))
                current, size = [], 0
                added = len(line)
            current.append(line)
            size += added
        if current:
            chunks.append("\n".join(current))

        return [f"{cls.CODE_FENCE}\n{chunk}\n{cls.CODE_FENCE}" for chunk in chunks]
