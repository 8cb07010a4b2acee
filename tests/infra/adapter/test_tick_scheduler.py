import asyncio

import pytest

from infra.adapter.tick_scheduler import TickScheduler
from tests.support.fakes import FakeClock


def _run_for(scheduler: TickScheduler, clock: FakeClock, duration_ms: int) -> None:
    for _ in range(duration_ms // scheduler.tick_ms):
        clock.advance(scheduler.tick_ms)
        scheduler.run_pending()


def test_jobs_fire_once_per_due_period(fake_clock: FakeClock) -> None:
    scheduler = TickScheduler(tick_ms=10, clock=fake_clock)
    fired: list[str] = []

    scheduler.add_job("fast", fired.append, interval_ms=1_000, args=("fast",))
    scheduler.add_job("slow", fired.append, interval_ms=5_000, args=("slow",))

    _run_for(scheduler, fake_clock, 5_000)

    assert fired.count("fast") == 5
    assert fired.count("slow") == 1


def test_first_run_happens_one_period_after_registration(fake_clock: FakeClock) -> None:
    scheduler = TickScheduler(tick_ms=10, clock=fake_clock)
    calls: list[int] = []

    scheduler.add_job("job", lambda: calls.append(fake_clock.now_ms), interval_ms=250)

    assert scheduler.run_pending() == 0

    _run_for(scheduler, fake_clock, 600)

    assert calls == [250, 500]


def test_lagging_loop_fires_once_and_realigns(fake_clock: FakeClock) -> None:
    scheduler = TickScheduler(tick_ms=10, clock=fake_clock)
    calls: list[int] = []

    scheduler.add_job("job", lambda: calls.append(fake_clock.now_ms), interval_ms=100)

    fake_clock.advance(350)
    assert scheduler.run_pending() == 1

    job = scheduler.get_job("job")
    assert job is not None
    assert job.next_due_ms == 400

    _run_for(scheduler, fake_clock, 50)
    assert calls == [350, 400]


def test_dispatch_errors_do_not_stop_other_jobs(fake_clock: FakeClock) -> None:
    scheduler = TickScheduler(tick_ms=10, clock=fake_clock)
    calls: list[str] = []

    def broken() -> None:
        raise RuntimeError("boom")

    scheduler.add_job("broken", broken, interval_ms=100)
    scheduler.add_job("healthy", lambda: calls.append("healthy"), interval_ms=100)

    _run_for(scheduler, fake_clock, 300)

    assert calls == ["healthy"] * 3


def test_add_job_replaces_existing_and_remove_job(fake_clock: FakeClock) -> None:
    scheduler = TickScheduler(tick_ms=10, clock=fake_clock)

    scheduler.add_job("job-1", lambda: None, 100)
    scheduler.add_job("job-1", lambda: None, 200, job_name="Job One")

    job = scheduler.get_job("job-1")
    assert job is not None
    assert job.interval_ms == 200
    assert job.name == "Job One"
    assert scheduler.get_all_jobs() == ["job-1"]

    assert scheduler.remove_job("job-1") is True
    assert scheduler.remove_job("job-1") is False
    assert scheduler.has_job("job-1") is False


def test_add_job_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError, match="greater than 0"):
        TickScheduler().add_job("job", lambda: None, 0)


@pytest.mark.asyncio
async def test_slow_job_does_not_delay_other_jobs(fake_clock: FakeClock) -> None:
    scheduler = TickScheduler(tick_ms=10, clock=fake_clock)
    release = asyncio.Event()
    fast_runs: list[int] = []

    async def slow() -> None:
        await release.wait()

    async def fast() -> None:
        fast_runs.append(fake_clock.now_ms)

    scheduler.add_job("slow", slow, interval_ms=100)
    scheduler.add_job("fast", fast, interval_ms=20)

    for _ in range(20):
        fake_clock.advance(10)
        scheduler.run_pending()
        await asyncio.sleep(0)

    assert len(fast_runs) == 10

    release.set()
    await scheduler.wait_closed()


@pytest.mark.asyncio
async def test_stop_prevents_new_dispatches_and_drains_in_flight_jobs() -> None:
    scheduler = TickScheduler(tick_ms=1)
    started = asyncio.Event()
    finished: list[bool] = []

    async def job() -> None:
        started.set()
        await asyncio.sleep(0.05)
        finished.append(True)

    scheduler.add_job("job", job, interval_ms=5)
    scheduler.start()

    await asyncio.wait_for(started.wait(), timeout=1)
    scheduler.stop()
    runs_at_stop = scheduler.get_job("job").runs

    await scheduler.wait_closed()
    await asyncio.sleep(0.03)

    assert scheduler.running is False
    assert scheduler.get_job("job").runs == runs_at_stop
    assert len(finished) == runs_at_stop
