"""Tests for the refresh scheduler."""
import asyncio
import time
import pytest
from registry_lister.application.scheduler import RefreshScheduler, SchedulerState
from registry_lister.domain.models import RefreshMetrics


def metrics():
    return RefreshMetrics(0, 0, 0.0, 0, True)


class FakeClock:
    """Manual clock whose sleep advances time instantly."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    async def sleep(self, delay):
        self.now += delay
        await asyncio.sleep(0)


class RecordingRefresher:
    """Records cycle start and end times on a clock."""

    def __init__(self, clock, duration=0.0, stop_after=None, fail_on=()):
        self.clock = clock
        self.duration = duration
        self.stop_after = stop_after
        self.fail_on = fail_on
        self.cycles = []
        self.scheduler = None
        self.first_cycle = asyncio.Event()

    async def refresh(self):
        start = self.clock()
        self.first_cycle.set()
        if isinstance(self.clock, FakeClock):
            self.clock.now += self.duration
            await asyncio.sleep(0)
        elif self.duration:
            await asyncio.sleep(self.duration)
        self.cycles.append((start, self.clock()))
        if self.stop_after and len(self.cycles) >= self.stop_after:
            self.scheduler.request_stop()
        if len(self.cycles) in self.fail_on:
            raise RuntimeError("unexpected bug")
        return metrics()


def make_scheduler(refresher, interval, clock=None):
    if clock is None:
        scheduler = RefreshScheduler(refresher, interval)
    else:
        scheduler = RefreshScheduler(refresher, interval, clock=clock, sleep=clock.sleep)
    refresher.scheduler = scheduler
    return scheduler


async def test_ticks_follow_interval():
    """Test cycle start times with cycles shorter than the interval."""
    clock = FakeClock()
    refresher = RecordingRefresher(clock, duration=2.0, stop_after=3)
    scheduler = make_scheduler(refresher, 10.0, clock)

    await scheduler.run()

    assert [start for start, _ in refresher.cycles] == [0.0, 10.0, 20.0]
    assert scheduler.state is SchedulerState.STOPPED
    assert scheduler.cycles_completed == 3


async def test_overrunning_cycles_collapse_missed_ticks():
    """Test that a late tick fires once after an overrunning cycle."""
    clock = FakeClock()
    refresher = RecordingRefresher(clock, duration=25.0, stop_after=3)
    scheduler = make_scheduler(refresher, 10.0, clock)

    await scheduler.run()

    assert [start for start, _ in refresher.cycles] == [0.0, 25.0, 50.0]
    for (_, end), (next_start, _) in zip(refresher.cycles, refresher.cycles[1:]):
        assert next_start >= end


async def test_cycles_never_overlap_in_real_time():
    """Test non-overlap with a cycle longer than the interval."""
    refresher = RecordingRefresher(time.monotonic, duration=0.12)
    scheduler = make_scheduler(refresher, 0.05)
    running = 0
    peak = 0
    wrapped = refresher.refresh

    async def counting_refresh():
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        try:
            return await wrapped()
        finally:
            running -= 1

    refresher.refresh = counting_refresh
    scheduler.start()
    while len(refresher.cycles) < 3:
        await asyncio.sleep(0.02)
    await scheduler.stop()

    assert peak == 1
    for (_, end), (next_start, _) in zip(refresher.cycles, refresher.cycles[1:]):
        assert next_start >= end


async def test_first_cycle_runs_immediately():
    """Test the cold start does not wait for the interval."""
    refresher = RecordingRefresher(time.monotonic)
    scheduler = make_scheduler(refresher, 3600.0)

    scheduler.start()
    await asyncio.wait_for(refresher.first_cycle.wait(), timeout=1.0)
    assert scheduler.state is SchedulerState.RUNNING

    await asyncio.wait_for(scheduler.stop(), timeout=1.0)
    assert scheduler.state is SchedulerState.STOPPED
    assert scheduler.cycles_completed == 1


async def test_unexpected_error_does_not_stop_loop():
    """Test that a crashing cycle is logged and the schedule continues."""
    clock = FakeClock()
    refresher = RecordingRefresher(clock, duration=1.0, stop_after=3, fail_on=(1,))
    scheduler = make_scheduler(refresher, 5.0, clock)

    await scheduler.run()

    assert len(refresher.cycles) == 3


async def test_stopped_scheduler_cannot_rerun():
    """Test that Stopped is terminal."""
    clock = FakeClock()
    refresher = RecordingRefresher(clock, stop_after=1)
    scheduler = make_scheduler(refresher, 5.0, clock)

    assert scheduler.state is SchedulerState.IDLE
    await scheduler.run()

    with pytest.raises(RuntimeError):
        await scheduler.run()


@pytest.mark.parametrize("interval", [0, -1.0, float("nan"), float("inf")])
def test_interval_must_be_positive_and_finite(interval):
    """Test rejecting intervals the tick arithmetic cannot use."""
    with pytest.raises(ValueError):
        RefreshScheduler(RecordingRefresher(time.monotonic), interval)
