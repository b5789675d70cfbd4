"""
Unit tests for environment-driven Config parsing and validation.
"""

from datetime import date

import pytest

from starsync.core.config.config import Config
from starsync.core.exceptions import ConfigurationError


@pytest.fixture
def reload_config(monkeypatch):
    """Re-read Config after the test patches the environment, restore afterwards."""
    yield monkeypatch
    monkeypatch.undo()
    Config._validated = False
    Config.load()


class TestParsers:
    def test_safe_date(self, monkeypatch):
        monkeypatch.setenv("POLL_WINDOW_START", "2024-11-30")
        assert Config._safe_date("POLL_WINDOW_START", date(2024, 12, 1)) == date(2024, 11, 30)

    def test_safe_date_invalid_uses_default(self, monkeypatch):
        monkeypatch.setenv("POLL_WINDOW_START", "december")
        assert Config._safe_date("POLL_WINDOW_START", date(2024, 12, 1)) == date(2024, 12, 1)

    def test_safe_int_bounds(self, monkeypatch):
        monkeypatch.setenv("POLL_FAST_HOUR_UTC", "99")
        assert Config._safe_int("POLL_FAST_HOUR_UTC", 5, min_val=0, max_val=23) == 5

    @pytest.mark.parametrize("raw, expected", [("yes", True), ("off", False), ("maybe", True)])
    def test_safe_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("SYNC_ON_STARTUP", raw)
        assert Config._safe_bool("SYNC_ON_STARTUP", True) is expected

    def test_safe_optional_int(self, monkeypatch):
        monkeypatch.delenv("TRIGGER_USER_ID", raising=False)
        assert Config._safe_optional_int("TRIGGER_USER_ID") is None
        monkeypatch.setenv("TRIGGER_USER_ID", "123")
        assert Config._safe_optional_int("TRIGGER_USER_ID") == 123


class TestLoad:
    def test_poll_defaults_follow_event_year(self, reload_config):
        reload_config.setenv("AOC_LEADERBOARD_YEAR", "2023")
        for key in ("POLL_WINDOW_START", "POLL_WINDOW_END", "POLL_FAST_UNTIL"):
            reload_config.delenv(key, raising=False)

        Config.load()

        assert Config.POLL_WINDOW_START == date(2023, 12, 1)
        assert Config.POLL_WINDOW_END == date(2024, 1, 1)
        assert Config.POLL_FAST_UNTIL == date(2023, 12, 25)

    def test_leaderboard_url(self, reload_config):
        reload_config.setenv("AOC_LEADERBOARD_YEAR", "2022")
        reload_config.setenv("AOC_LEADERBOARD_ID", "987")

        Config.load()

        assert Config.leaderboard_url() == (
            "https://adventofcode.com/2022/leaderboard/private/view/987.json"
        )


class TestValidate:
    def test_missing_required_variables(self, reload_config):
        reload_config.delenv("AOC_SESSION", raising=False)
        Config._validated = False

        with pytest.raises(ConfigurationError, match="AOC_SESSION"):
            Config.validate()

    def test_inverted_window(self, reload_config):
        reload_config.setenv("POLL_WINDOW_START", "2024-12-31")
        reload_config.setenv("POLL_WINDOW_END", "2024-12-01")
        Config._validated = False

        with pytest.raises(ConfigurationError, match="POLL_WINDOW_END"):
            Config.validate()

    def test_is_testing(self):
        assert Config.is_testing()
