"""
Feature Cog Loader

Discovers every `*_cog` module under `starsync/features/`, checks it exposes
`setup()`, and loads it as a discord.py extension with a timeout. A cog that
fails to load is logged and skipped; the bot keeps starting.
"""

from __future__ import annotations

import asyncio
import importlib
import pkgutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from discord.ext import commands

from starsync.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LoadResult:
    """Result of loading a single cog."""

    name: str
    success: bool
    duration_ms: float
    error: Optional[Exception] = None


class FeatureLoader:
    BASE_PATH: Path = Path(__file__).resolve().parent.parent / "features"
    BASE_PACKAGE: str = "starsync.features"
    COG_SUFFIX: str = "_cog"

    def __init__(self, bot: commands.Bot, timeout_seconds: float = 30.0) -> None:
        self.bot = bot
        self.timeout_seconds = timeout_seconds
        self.load_results: List[LoadResult] = []

    def discover(self) -> List[str]:
        """Fully qualified module names of every cog under the features package."""
        names = [
            name
            for _, name, ispkg in pkgutil.walk_packages(
                [str(self.BASE_PATH)], prefix=f"{self.BASE_PACKAGE}."
            )
            if not ispkg and name.endswith(self.COG_SUFFIX)
        ]
        return sorted(names)

    @staticmethod
    def _validate(extension_name: str) -> Optional[Exception]:
        try:
            module = importlib.import_module(extension_name)
        except (ImportError, SyntaxError) as exc:
            return exc
        if not callable(getattr(module, "setup", None)):
            return ValueError(
                "Missing required setup() function. "
                "Expected: async def setup(bot): await bot.add_cog(YourCog(bot))"
            )
        return None

    async def _load(self, extension_name: str) -> LoadResult:
        start = time.perf_counter()

        error = self._validate(extension_name)
        if error is None:
            try:
                await asyncio.wait_for(
                    self.bot.load_extension(extension_name), timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError:
                error = TimeoutError(f"Cog loading exceeded {self.timeout_seconds}s timeout")
            except commands.ExtensionError as exc:
                error = exc

        duration_ms = (time.perf_counter() - start) * 1000
        if error is not None:
            logger.error(
                "Failed to load cog",
                extra={
                    "cog_name": extension_name,
                    "error": str(error),
                    "error_type": type(error).__name__,
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=error,
            )
            return LoadResult(extension_name, False, duration_ms, error)

        logger.info(
            "Cog loaded successfully",
            extra={"cog_name": extension_name, "duration_ms": round(duration_ms, 2)},
        )
        return LoadResult(extension_name, True, duration_ms)

    async def load_all_features(self) -> Dict[str, Any]:
        start = time.perf_counter()
        names = self.discover()
        if not names:
            logger.warning("No cog files discovered", extra={"base_path": str(self.BASE_PATH)})

        # Sequential: extensions register commands on the shared bot
        self.load_results = [await self._load(name) for name in names]

        stats = {
            "total_time_ms": (time.perf_counter() - start) * 1000,
            "discovered": len(names),
            "loaded": sum(1 for r in self.load_results if r.success),
            "failed": sum(1 for r in self.load_results if not r.success),
        }
        logger.info("=" * 60)
        logger.info("FEATURE COG LOADING SUMMARY")
        logger.info("=" * 60)
        logger.info("Discovered:     %d cogs", stats["discovered"])
        logger.info("Loaded:         %d cogs", stats["loaded"])
        logger.info("Failed:         %d cogs", stats["failed"])
        logger.info("Total Time:     %.0fms", stats["total_time_ms"])
        for result in self.load_results:
            if not result.success:
                logger.info("  ✗ %s: %s", result.name, result.error)
        return stats


async def load_all_features(bot: commands.Bot) -> Dict[str, Any]:
    return await FeatureLoader(bot).load_all_features()
