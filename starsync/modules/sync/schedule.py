"""
Polling schedule for the reconciliation loop.

Ticks fall on minute multiples of the active interval within each hour
(":00, :10, :20 ..." or ":00, :15, :30, :45"), all in UTC. The fast interval
applies during `fast_hour` on days up to and including `fast_until`; every
other hour of the window uses the slow interval. Outside
`[window_start, window_end)` there are no ticks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from starsync.core.config.config import Config


def _utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)


@dataclass(frozen=True)
class PollSchedule:
    window_start: date
    window_end: date
    fast_until: date
    fast_hour: int = 5
    fast_interval: int = 10
    slow_interval: int = 15

    def __post_init__(self) -> None:
        if self.window_end <= self.window_start:
            raise ValueError("window_end must be after window_start")
        if not 0 <= self.fast_hour <= 23:
            raise ValueError(f"fast_hour out of range: {self.fast_hour}")
        for interval in (self.fast_interval, self.slow_interval):
            if not 1 <= interval <= 60:
                raise ValueError(f"interval must be within 1..60 minutes, got {interval}")

    @classmethod
    def for_event(cls, year: int) -> "PollSchedule":
        """December of `year`: fast polling at the 05:00 UTC unlock through the 25th."""
        return cls(
            window_start=date(year, 12, 1),
            window_end=date(year + 1, 1, 1),
            fast_until=date(year, 12, 25),
        )

    @classmethod
    def from_config(cls) -> "PollSchedule":
        return cls(
            window_start=Config.POLL_WINDOW_START,
            window_end=Config.POLL_WINDOW_END,
            fast_until=Config.POLL_FAST_UNTIL,
            fast_hour=Config.POLL_FAST_HOUR_UTC,
            fast_interval=Config.POLL_FAST_INTERVAL_MINUTES,
            slow_interval=Config.POLL_SLOW_INTERVAL_MINUTES,
        )

    @property
    def starts_at(self) -> datetime:
        return _midnight(self.window_start)

    @property
    def ends_at(self) -> datetime:
        return _midnight(self.window_end)

    def is_active(self, now: datetime) -> bool:
        return self.starts_at <= _utc(now) < self.ends_at

    def interval_at(self, moment: datetime) -> int:
        moment = _utc(moment)
        if moment.date() <= self.fast_until and moment.hour == self.fast_hour:
            return self.fast_interval
        return self.slow_interval

    def next_run(self, now: datetime) -> Optional[datetime]:
        """
        First tick strictly after `now`, or None once the window has closed.

        >>> s = PollSchedule.for_event(2024)
        >>> s.next_run(datetime(2024, 12, 3, 5, 1, tzinfo=timezone.utc)).minute
        10
        >>> s.next_run(datetime(2024, 12, 3, 6, 1, tzinfo=timezone.utc)).minute
        15
        """
        now = _utc(now)
        if now < self.starts_at:
            return self.starts_at

        candidate = now.replace(second=0, microsecond=0) + timedelta(minutes=1)
        # Every hour starts with a tick at :00, so this scans at most one hour
        for _ in range(61):
            if candidate >= self.ends_at:
                return None
            if candidate.minute % self.interval_at(candidate) == 0:
                return candidate
            candidate += timedelta(minutes=1)
        return None
