"""
Unit tests for the display-name codec.

Covers suffix parsing, the star anchor, unknown scores and the nickname
length limit.
"""

import pytest

from starsync.modules.nickname.codec import (
    STAR,
    ParsedScore,
    build_display_name,
    parse_base_name,
    parse_score,
)


class TestParseBaseName:
    """Stripping the star suffix."""

    @pytest.mark.parametrize(
        "display_name, expected",
        [
            ("Alice ⭐42", "Alice"),
            ("Alice⭐42", "Alice"),
            ("Alice   ⭐ 7", "Alice"),
            ("Alice ⭐?", "Alice"),
            ("Alice ⭐0", "Alice"),
            ("Alice ⭐\ufe0f3", "Alice"),
            ("Mary Ann ⭐12", "Mary Ann"),
        ],
    )
    def test_strips_suffix(self, display_name, expected):
        assert parse_base_name(display_name) == expected

    def test_star_is_required(self):
        """A trailing number alone is part of the name."""
        assert parse_base_name("Bob 42") == "Bob 42"

    def test_name_without_suffix_unchanged(self):
        assert parse_base_name("Charlie") == "Charlie"

    def test_suffix_only_name_unchanged(self):
        assert parse_base_name("⭐5") == "⭐5"
        assert parse_base_name("  ⭐5") == "  ⭐5"

    def test_star_in_middle_is_kept(self):
        assert parse_base_name("A⭐B") == "A⭐B"

    def test_only_last_suffix_is_stripped(self):
        assert parse_base_name("A ⭐1 ⭐2") == "A ⭐1"


class TestParseScore:
    def test_known_score(self):
        assert parse_score("Alice ⭐12") == ParsedScore(12)

    def test_unknown_score(self):
        parsed = parse_score("Alice ⭐?")
        assert parsed is not None
        assert parsed.is_unknown

    def test_no_suffix(self):
        assert parse_score("Alice") is None
        assert parse_score("Bob 42") is None


class TestBuildDisplayName:
    def test_known_score(self):
        assert build_display_name("Alice", 42) == f"Alice {STAR}42"

    def test_unknown_score(self):
        assert build_display_name("Alice", None) == f"Alice {STAR}?"

    def test_zero_is_a_known_score(self):
        assert build_display_name("Alice", 0) == f"Alice {STAR}0"

    @pytest.mark.parametrize("base", ["Alice", "Mary Ann", "x", "名前", "Bob 42", "A⭐B"])
    @pytest.mark.parametrize("score", [0, 7, 50, None])
    def test_round_trip(self, base, score):
        assert parse_base_name(build_display_name(base, score)) == base

    def test_rebuild_is_fixed_point(self):
        once = build_display_name("Alice", 10)
        twice = build_display_name(parse_base_name(once), 10)
        assert once == twice

    def test_long_base_is_truncated_not_suffix(self):
        base = "A" * 40
        result = build_display_name(base, 50, limit=32)

        assert len(result) == 32
        assert result.endswith(f" {STAR}50")
        assert parse_score(result) == ParsedScore(50)

    def test_truncation_strips_trailing_space(self):
        result = build_display_name("abcdefghijklmnopqrstuvwxyz abcdefgh", 5, limit=30)

        assert "  " not in result
        assert parse_base_name(result) == result[: result.index(f" {STAR}")]
