"""
Unit tests for text formatters and embeds.
"""

import pytest

from starsync.core.config.config import Config
from starsync.modules.shared.exceptions import ErrorSeverity
from starsync.ui.embeds import EmbedFactory
from starsync.ui.formatters import TextFormatters


class TestTruncate:
    def test_short_text_untouched(self):
        assert TextFormatters.truncate("abc", 5) == "abc"

    def test_long_text_gets_suffix(self):
        assert TextFormatters.truncate("abcdefgh", 6) == "abc..."


class TestCodeBlockChunks:
    def test_empty_text(self):
        assert TextFormatters.code_block_chunks("") == []

    def test_single_chunk(self):
        assert TextFormatters.code_block_chunks("1. 50⭐ A\n2. 40⭐ B") == [
            "```\n1. 50⭐ A\n2. 40⭐ B\n```"
        ]

    def test_every_chunk_fits_message_limit(self):
        lines = [f"{i:>3}. {i % 50:>2}⭐ member-with-a-long-name-{i}" for i in range(1, 301)]
        text = "\n".join(lines)

        chunks = TextFormatters.code_block_chunks(text)

        assert len(chunks) > 1
        assert all(len(chunk) <= 2000 for chunk in chunks)
        assert all(c.startswith("```\n") and c.endswith("\n```") for c in chunks)

    def test_lines_are_not_split(self):
        lines = [f"line {i:04d}" for i in range(500)]

        chunks = TextFormatters.code_block_chunks("\n".join(lines), limit=100)
        body = [line for chunk in chunks for line in chunk.split("\n")[1:-1]]

        assert body == lines

    def test_overlong_line_hard_wrapped(self):
        chunks = TextFormatters.code_block_chunks("x" * 50, limit=28)

        assert all(len(chunk) <= 28 for chunk in chunks)
        assert "".join(c[4:-4] for c in chunks) == "x" * 50

    def test_limit_too_small(self):
        with pytest.raises(ValueError):
            TextFormatters.code_block_chunks("abc", limit=8)


class TestEmbedFactory:
    def test_user_mistakes_render_as_warning(self):
        embed = EmbedFactory.from_error_response(
            {
                "title": "Invalid Input",
                "description": "bad id",
                "help_text": "use digits",
                "severity": ErrorSeverity.INFO,
            }
        )

        assert embed.color.value == Config.EMBED_COLOR_WARNING
        assert "use digits" in embed.description

    def test_errors_render_as_error(self):
        embed = EmbedFactory.from_error_response(
            {"title": "Storage Error", "description": "down", "severity": ErrorSeverity.ERROR}
        )

        assert embed.color.value == Config.EMBED_COLOR_ERROR
        assert embed.title == "Storage Error"
