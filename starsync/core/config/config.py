"""
Static configuration management for StarSync.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. All values are
set at application startup.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Validate critical settings on startup
- Create required directories (logs)
- Track which values came from the environment versus defaults

Non-Responsibilities
--------------------
- Runtime configuration changes
- Secrets management (use environment variables)

Architecture Notes
------------------
- Singleton pattern via class methods (no instantiation)
- Loaded on module import via Config.load(); Config.validate() at startup
- Directory paths relative to project root for portability

Configuration Categories
------------------------
1. Discord: Bot token, guild ID, command prefix, trigger account
2. Database: Claim store connection and pool settings
3. Advent of Code: Leaderboard year/id, session cookie, user agent
4. Polling: Active window, intervals, fast hour
5. Environment: Environment type, logging

Environment Variables
---------------------
Required:
- DISCORD_TOKEN: Bot authentication token
- DATABASE_URL: SQLAlchemy async connection string
- AOC_LEADERBOARD_ID: Private leaderboard id
- AOC_SESSION: Session cookie used to read the leaderboard

Optional (with defaults):
- AOC_LEADERBOARD_YEAR: Event year (default: current year)
- USER_AGENT: HTTP user agent for the feed
- TRIGGER_USER_ID: Account whose messages trigger an immediate sync
- COMMAND_PREFIX: Text command prefix (default: "aoc ")
- POLL_WINDOW_START / POLL_WINDOW_END: ISO dates bounding the poll window
- POLL_FAST_UNTIL: Last day with fast polling (default: Dec 25)
- POLL_FAST_HOUR_UTC: Hour polled at the fast interval (default: 5)
- ENVIRONMENT: Environment type (default: development)
- LOG_LEVEL: Logging level (default: INFO)
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Set, TypeVar

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

_T = TypeVar("_T")

# ============================================================================
# Load Tracking
# ============================================================================


@dataclass
class _ConfigLoadMetrics:
    """Which keys came from the environment, and which values were rejected."""

    from_env: Set[str] = field(default_factory=set)
    from_default: Set[str] = field(default_factory=set)
    rejected: Dict[str, str] = field(default_factory=dict)
    last_reload: Optional[str] = None

    def loaded(self, key: str, from_env: bool) -> None:
        (self.from_env if from_env else self.from_default).add(key)
        (self.from_default if from_env else self.from_env).discard(key)

    def reject(self, key: str, error: str) -> None:
        logging.warning(error)
        self.rejected[key] = error
        self.loaded(key, False)

    def get_summary(self) -> Dict[str, Any]:
        return {
            "from_environment": len(self.from_env),
            "from_defaults": sorted(self.from_default),
            "rejected": len(self.rejected),
            "last_reload": self.last_reload,
        }


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Centralized static configuration for the StarSync bot.

    Usage
    -----
    >>> token = Config.DISCORD_TOKEN
    >>> url = Config.leaderboard_url()
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    """

    # =========================================================================
    # Internal State
    # =========================================================================

    _metrics: Optional[_ConfigLoadMetrics] = None
    _validated: bool = False

    # =========================================================================
    # Discord Configuration
    # =========================================================================

    DISCORD_TOKEN: str = ""
    DISCORD_GUILD_ID: Optional[int] = None
    COMMAND_PREFIX: str = "aoc "
    TRIGGER_USER_ID: Optional[int] = None
    NICKNAME_LIMIT: int = 32

    # =========================================================================
    # Database Configuration
    # =========================================================================

    DATABASE_URL: str = ""
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_ECHO: bool = False
    DATABASE_POOL_RECYCLE: int = 1800

    # =========================================================================
    # Advent of Code Configuration
    # =========================================================================

    AOC_BASE_URL: str = "https://adventofcode.com"
    AOC_LEADERBOARD_YEAR: int = datetime.now(timezone.utc).year
    AOC_LEADERBOARD_ID: str = ""
    AOC_SESSION: str = ""
    USER_AGENT: str = "starsync-discord-bot/1.0 (nickname sync for a private leaderboard)"
    HTTP_TIMEOUT_SECONDS: int = 30

    # =========================================================================
    # Polling Configuration
    # =========================================================================

    POLL_WINDOW_START: Optional[date] = None
    POLL_WINDOW_END: Optional[date] = None
    POLL_FAST_UNTIL: Optional[date] = None
    POLL_FAST_HOUR_UTC: int = 5
    POLL_FAST_INTERVAL_MINUTES: int = 10
    POLL_SLOW_INTERVAL_MINUTES: int = 15
    SYNC_ON_STARTUP: bool = True

    # =========================================================================
    # Environment Configuration
    # =========================================================================

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True

    # =========================================================================
    # Directory Configuration
    # =========================================================================

    PROJECT_ROOT = Path(__file__).resolve().parents[3]
    LOGS_DIR = PROJECT_ROOT / "logs"

    # =========================================================================
    # Bot Metadata
    # =========================================================================

    BOT_NAME: str = "StarSync"
    BOT_VERSION: str = "1.0.0"
    BOT_DESCRIPTION: str = "Keeps Advent of Code stars in member nicknames"

    # =========================================================================
    # UI Colors
    # =========================================================================

    EMBED_COLOR_SUCCESS: int = 0x009900
    EMBED_COLOR_ERROR: int = 0x8B0000
    EMBED_COLOR_WARNING: int = 0xFFFF66
    EMBED_COLOR_INFO: int = 0x1E3A8A

    # =========================================================================
    # Parsers
    # =========================================================================

    @classmethod
    def _tracker(cls) -> _ConfigLoadMetrics:
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()
        return cls._metrics

    @classmethod
    def _parse(cls, key: str, default: _T, convert: Callable[[str], _T], kind: str) -> _T:
        """
        Read `key` and convert it; unset or blank falls back to `default`,
        an unconvertible value is logged and also falls back.
        """
        raw_value = os.getenv(key)
        if raw_value is None or not raw_value.strip():
            cls._tracker().loaded(key, False)
            return default

        try:
            value = convert(raw_value.strip())
        except ValueError:
            cls._tracker().reject(
                key, f"{key}='{raw_value}' is not a valid {kind}, using default {default}"
            )
            return default

        cls._tracker().loaded(key, True)
        return value

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Integer with optional inclusive bounds; out-of-range values use the default.

        Example
        -------
        >>> Config._safe_int("POLL_FAST_HOUR_UTC", 5, min_val=0, max_val=23)
        5
        """
        value = cls._parse(key, default, int, "integer")
        if min_val is not None and value < min_val:
            cls._tracker().reject(key, f"{key}={value} is below minimum {min_val}, using default {default}")
            return default
        if max_val is not None and value > max_val:
            cls._tracker().reject(key, f"{key}={value} exceeds maximum {max_val}, using default {default}")
            return default
        return value

    @staticmethod
    def _to_bool(raw: str) -> bool:
        normalized = raw.lower()
        if normalized in {"true", "yes", "1", "on"}:
            return True
        if normalized in {"false", "no", "0", "off"}:
            return False
        raise ValueError(raw)

    @classmethod
    def _safe_bool(cls, key: str, default: bool) -> bool:
        """Recognizes true/false, yes/no, 1/0, on/off (case-insensitive)."""
        return cls._parse(key, default, cls._to_bool, "boolean")

    @classmethod
    def _safe_str(cls, key: str, default: str, required: bool = False) -> str:
        value = os.getenv(key, default)
        cls._tracker().loaded(key, key in os.environ)
        if required and not value:
            logging.error(f"Required environment variable {key} is not set")
        return value

    @classmethod
    def _safe_optional_int(cls, key: str) -> Optional[int]:
        return cls._parse(key, None, int, "integer")

    @classmethod
    def _safe_date(cls, key: str, default: date) -> date:
        """
        ISO date (YYYY-MM-DD).

        Example
        -------
        >>> Config._safe_date("POLL_WINDOW_START", date(2024, 12, 1))
        datetime.date(2024, 12, 1)
        """
        return cls._parse(key, default, date.fromisoformat, "ISO date")

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables with validation.

        Called on module import; can be called again (e.g. from tests after
        patching the environment) to re-read every value.
        """
        metrics = cls._tracker()

        # Discord Configuration
        cls.DISCORD_TOKEN = cls._safe_str("DISCORD_TOKEN", "", required=True)
        cls.DISCORD_GUILD_ID = cls._safe_optional_int("DISCORD_GUILD_ID")
        cls.COMMAND_PREFIX = cls._safe_str("COMMAND_PREFIX", "aoc ")
        cls.TRIGGER_USER_ID = cls._safe_optional_int("TRIGGER_USER_ID")

        # Database Configuration
        cls.DATABASE_URL = cls._safe_str("DATABASE_URL", "", required=True)
        cls.DATABASE_POOL_SIZE = cls._safe_int(
            "DATABASE_POOL_SIZE", 5, min_val=1, max_val=100
        )
        cls.DATABASE_MAX_OVERFLOW = cls._safe_int(
            "DATABASE_MAX_OVERFLOW", 10, min_val=0, max_val=100
        )
        cls.DATABASE_ECHO = cls._safe_bool("DATABASE_ECHO", False)
        cls.DATABASE_POOL_RECYCLE = cls._safe_int(
            "DATABASE_POOL_RECYCLE", 1800, min_val=60
        )

        # Advent of Code Configuration
        cls.AOC_LEADERBOARD_YEAR = cls._safe_int(
            "AOC_LEADERBOARD_YEAR", datetime.now(timezone.utc).year, min_val=2015
        )
        cls.AOC_LEADERBOARD_ID = cls._safe_str("AOC_LEADERBOARD_ID", "", required=True)
        cls.AOC_SESSION = cls._safe_str("AOC_SESSION", "", required=True)
        cls.USER_AGENT = cls._safe_str("USER_AGENT", cls.USER_AGENT)
        cls.HTTP_TIMEOUT_SECONDS = cls._safe_int(
            "HTTP_TIMEOUT_SECONDS", 30, min_val=1, max_val=300
        )

        # Polling Configuration (defaults track the December event)
        year = cls.AOC_LEADERBOARD_YEAR
        cls.POLL_WINDOW_START = cls._safe_date("POLL_WINDOW_START", date(year, 12, 1))
        cls.POLL_WINDOW_END = cls._safe_date("POLL_WINDOW_END", date(year + 1, 1, 1))
        cls.POLL_FAST_UNTIL = cls._safe_date("POLL_FAST_UNTIL", date(year, 12, 25))
        cls.POLL_FAST_HOUR_UTC = cls._safe_int(
            "POLL_FAST_HOUR_UTC", 5, min_val=0, max_val=23
        )
        cls.POLL_FAST_INTERVAL_MINUTES = cls._safe_int(
            "POLL_FAST_INTERVAL_MINUTES", 10, min_val=1, max_val=60
        )
        cls.POLL_SLOW_INTERVAL_MINUTES = cls._safe_int(
            "POLL_SLOW_INTERVAL_MINUTES", 15, min_val=1, max_val=60
        )
        cls.SYNC_ON_STARTUP = cls._safe_bool("SYNC_ON_STARTUP", True)

        # Environment Configuration
        cls.ENVIRONMENT = cls._safe_str("ENVIRONMENT", "development")
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        if os.getenv("LOG_JSON") is not None:
            cls.LOG_JSON = cls._safe_bool("LOG_JSON", False)
        cls.LOG_COLORS = cls._safe_bool("LOG_COLORS", True)

        metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Validate critical configuration values on startup.

        Raises
        ------
        ConfigurationError:
            If required config values are missing or inconsistent.
        """
        if cls._validated:
            return

        # Deferred: starsync.core.exceptions imports modules that read Config
        from starsync.core.exceptions import ConfigurationError

        logger = logging.getLogger(__name__)

        cls.load()

        required = {
            "DISCORD_TOKEN": cls.DISCORD_TOKEN,
            "DATABASE_URL": cls.DATABASE_URL,
            "AOC_LEADERBOARD_ID": cls.AOC_LEADERBOARD_ID,
            "AOC_SESSION": cls.AOC_SESSION,
        }
        missing = [key for key, value in required.items() if not value]
        if missing:
            raise ConfigurationError(
                ", ".join(missing), "required environment variable is not set"
            )

        if cls.POLL_WINDOW_END <= cls.POLL_WINDOW_START:
            raise ConfigurationError(
                "POLL_WINDOW_END",
                f"{cls.POLL_WINDOW_END} must be after POLL_WINDOW_START ({cls.POLL_WINDOW_START})",
            )

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if cls.LOG_LEVEL.upper() not in valid_log_levels:
            logger.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
            cls.LOG_LEVEL = "INFO"

        if cls.is_production() and "localhost" in cls.DATABASE_URL:
            logger.warning(
                "Production environment using localhost database - "
                "this may be incorrect"
            )

        cls.LOGS_DIR.mkdir(exist_ok=True)

        cls._validated = True

        logger.info("Configuration validated", extra=cls._tracker().get_summary())

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_testing(cls) -> bool:
        return cls.ENVIRONMENT.lower() == "testing"

    # =========================================================================
    # Derived Values
    # =========================================================================

    @classmethod
    def leaderboard_url(cls) -> str:
        """JSON endpoint of the configured private leaderboard."""
        return (
            f"{cls.AOC_BASE_URL}/{cls.AOC_LEADERBOARD_YEAR}"
            f"/leaderboard/private/view/{cls.AOC_LEADERBOARD_ID}.json"
        )

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """Get non-sensitive configuration summary for debugging."""
        return {
            "environment": cls.ENVIRONMENT,
            "log_level": cls.LOG_LEVEL,
            "bot_version": cls.BOT_VERSION,
            "leaderboard_year": cls.AOC_LEADERBOARD_YEAR,
            "leaderboard_id": cls.AOC_LEADERBOARD_ID,
            "poll_window": f"{cls.POLL_WINDOW_START}..{cls.POLL_WINDOW_END}",
            "discord_token_set": bool(cls.DISCORD_TOKEN),
            "database_url_set": bool(cls.DATABASE_URL),
            "aoc_session_set": bool(cls.AOC_SESSION),
            "trigger_user_set": cls.TRIGGER_USER_ID is not None,
        }


Config.load()
