"""
Unit tests for PollRunner: non-reentrant cycles and the scheduled loop.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from starsync.modules.sync.reconciler import ReconcileReport
from starsync.modules.sync.runner import PollRunner
from starsync.modules.sync.schedule import PollSchedule


@pytest.fixture
def schedule() -> PollSchedule:
    return PollSchedule(
        window_start=date(2024, 12, 1),
        window_end=date(2025, 1, 1),
        fast_until=date(2024, 12, 25),
    )


@pytest.fixture
def reconciler(mocker):
    reconciler = mocker.MagicMock()
    reconciler.run_cycle = mocker.AsyncMock(side_effect=lambda: ReconcileReport(cycle_id="c"))
    return reconciler


class FakeClock:
    """Clock that jumps forward whenever the runner sleeps."""

    def __init__(self, start: datetime) -> None:
        self.now = start
        self.sleeps = []

    def __call__(self) -> datetime:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)
        await asyncio.sleep(0)


@pytest.mark.asyncio
class TestTrigger:
    async def test_runs_cycle_and_records_report(self, reconciler, schedule):
        runner = PollRunner(reconciler, schedule)

        report = await runner.trigger("manual")

        assert report is not None
        assert runner.stats.cycles_run == 1
        assert runner.stats.last_report is report

    async def test_skipped_while_busy(self, reconciler, schedule):
        release = asyncio.Event()

        async def slow_cycle():
            await release.wait()
            return ReconcileReport(cycle_id="slow")

        reconciler.run_cycle.side_effect = slow_cycle
        runner = PollRunner(reconciler, schedule)

        first = asyncio.create_task(runner.trigger("schedule"))
        await asyncio.sleep(0)
        assert runner.busy

        skipped = await runner.trigger("message")
        release.set()
        report = await first

        assert skipped is None
        assert report.cycle_id == "slow"
        assert reconciler.run_cycle.await_count == 1
        assert runner.stats.cycles_skipped == 1

    async def test_unexpected_error_contained(self, reconciler, schedule):
        reconciler.run_cycle.side_effect = RuntimeError("boom")
        runner = PollRunner(reconciler, schedule)

        assert await runner.trigger() is None
        assert runner.stats.cycles_errored == 1
        assert not runner.busy


@pytest.mark.asyncio
class TestLoop:
    async def test_sleeps_until_ticks(self, reconciler, schedule):
        clock = FakeClock(datetime(2024, 12, 3, 5, 1, tzinfo=timezone.utc))
        runner = PollRunner(reconciler, schedule, clock=clock, sleep=clock.sleep)

        runner.start()
        while reconciler.run_cycle.await_count < 2:
            await asyncio.sleep(0)
        await runner.stop()

        assert clock.sleeps[:2] == [540.0, 600.0]
        assert not runner.running

    async def test_stops_when_window_closes(self, reconciler, schedule):
        clock = FakeClock(datetime(2024, 12, 31, 23, 44, tzinfo=timezone.utc))
        runner = PollRunner(reconciler, schedule, clock=clock, sleep=clock.sleep)

        runner.start()
        await asyncio.wait_for(runner._task, timeout=1)

        assert reconciler.run_cycle.await_count == 1
        assert not runner.running

    async def test_startup_sync_only_inside_window(self, reconciler, schedule):
        clock = FakeClock(datetime(2025, 2, 1, tzinfo=timezone.utc))
        runner = PollRunner(reconciler, schedule, clock=clock, sleep=clock.sleep)

        runner.start(run_immediately=True)
        await asyncio.wait_for(runner._task, timeout=1)

        reconciler.run_cycle.assert_not_awaited()

    async def test_startup_sync_runs_first(self, reconciler, schedule):
        clock = FakeClock(datetime(2024, 12, 3, 12, 1, tzinfo=timezone.utc))
        sleeps_before_cycle = []

        def cycle():
            sleeps_before_cycle.append(len(clock.sleeps))
            return ReconcileReport(cycle_id="c")

        reconciler.run_cycle.side_effect = cycle
        runner = PollRunner(reconciler, schedule, clock=clock, sleep=clock.sleep)

        runner.start(run_immediately=True)
        while reconciler.run_cycle.await_count < 2:
            await asyncio.sleep(0)
        await runner.stop()

        assert sleeps_before_cycle[:2] == [0, 1]
        assert clock.sleeps[0] == 840.0

    async def test_start_twice_is_noop(self, reconciler, schedule):
        clock = FakeClock(datetime(2024, 12, 3, 12, 1, tzinfo=timezone.utc))
        runner = PollRunner(reconciler, schedule, clock=clock, sleep=clock.sleep)

        runner.start()
        task = runner._task
        runner.start()

        assert runner._task is task
        await runner.stop()
