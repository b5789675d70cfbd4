"""
Background polling loop.

PollRunner owns the asyncio task that sleeps until the next PollSchedule tick
and runs a reconciliation cycle. Cycles never overlap: a tick or manual
trigger that arrives while a cycle is running is skipped.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from starsync.core.logging.logger import get_logger
from starsync.modules.sync.reconciler import ReconcileReport, Reconciler
from starsync.modules.sync.schedule import PollSchedule

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunnerStats:
    cycles_run: int = 0
    cycles_skipped: int = 0
    cycles_errored: int = 0
    last_report: Optional[ReconcileReport] = None


class PollRunner:
    def __init__(
        self,
        reconciler: Reconciler,
        schedule: PollSchedule,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        error_backoff_seconds: float = 60.0,
    ) -> None:
        self.reconciler = reconciler
        self.schedule = schedule
        self._clock = clock
        self._sleep = sleep
        self._error_backoff = error_backoff_seconds
        self._cycle_lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._stopping = False
        self.stats = RunnerStats()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def busy(self) -> bool:
        return self._cycle_lock.locked()

    async def trigger(self, reason: str = "manual") -> Optional[ReconcileReport]:
        """
        Run one cycle now.

        Returns the cycle's report, or None when a cycle was already running
        or the cycle raised unexpectedly.
        """
        if self._cycle_lock.locked():
            self.stats.cycles_skipped += 1
            logger.info(f"Sync cycle already running, skipping {reason} trigger")
            return None

        async with self._cycle_lock:
            logger.debug(f"Sync cycle starting ({reason})")
            try:
                report = await self.reconciler.run_cycle()
            except Exception as exc:
                self.stats.cycles_errored += 1
                logger.error(
                    "Unexpected error in sync cycle",
                    extra={"reason": reason, "error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )
                return None

            self.stats.cycles_run += 1
            self.stats.last_report = report
            return report

    def start(self, run_immediately: bool = False) -> None:
        """Start the background loop (no-op when already running)."""
        if self.running:
            logger.warning("Poll runner already running")
            return

        self._stopping = False
        self._task = asyncio.create_task(self._loop(run_immediately), name="starsync-poll")
        logger.info(
            "Poll runner started",
            extra={
                "window_start": self.schedule.window_start.isoformat(),
                "window_end": self.schedule.window_end.isoformat(),
            },
        )

    async def stop(self) -> None:
        self._stopping = True
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.debug("Poll runner stopped")

    async def _loop(self, run_immediately: bool) -> None:
        if run_immediately and self.schedule.is_active(self._clock()):
            await self.trigger("startup")

        last_tick: Optional[datetime] = None
        while not self._stopping:
            try:
                now = self._clock()
                # An early wakeup must not fire the same tick twice
                next_tick = self.schedule.next_run(max(now, last_tick) if last_tick else now)
                if next_tick is None:
                    logger.info("Poll window closed, stopping poll runner")
                    break

                await self._sleep(max((next_tick - now).total_seconds(), 0.0))
                last_tick = next_tick
                await self.trigger("schedule")

            except asyncio.CancelledError:
                logger.debug("Poll loop cancelled")
                break

            except Exception as exc:
                logger.error(
                    "Error in poll loop",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )
                await self._sleep(self._error_backoff)
