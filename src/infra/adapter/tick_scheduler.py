import asyncio
import inspect
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Optional

import structlog

from core.port.scheduler import Scheduler

logger = structlog.stdlib.get_logger(__name__)


@dataclass
class TickJob:
    key: str
    name: str
    func: Callable[..., Any]
    interval_ms: int
    next_due_ms: float
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    runs: int = 0


class TickScheduler(Scheduler):
    """Polling scheduler: every ``tick_ms`` it fires each job whose due time passed.

    Jobs returning awaitables are dispatched as independent tasks, so a slow job
    never delays the due time of another one. ``stop`` only prevents new
    dispatches; ``wait_closed`` lets in-flight tasks run to completion.
    """

    def __init__(self, tick_ms: int = 10, clock: Callable[[], float] = time.monotonic) -> None:
        if tick_ms <= 0:
            raise ValueError(f"Tick must be greater than 0: {tick_ms}")

        self.tick_ms = tick_ms
        self._clock = clock

        self._jobs: dict[str, TickJob] = {}
        self._inflight: set[asyncio.Future] = set()
        self._loop_task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return

        self._running = True
        self._loop_task = asyncio.get_running_loop().create_task(self._run_loop(), name="tick-scheduler")

        logger.info(f"Tick scheduler started (tick: {self.tick_ms}ms, jobs: {len(self._jobs)})")

    def stop(self) -> None:
        if not self._running:
            return

        self._running = False

        # Only the sleeping coordinator is cancelled; dispatched jobs keep running.
        if self._loop_task is not None:
            self._loop_task.cancel()

        logger.info(f"Tick scheduler stopped, {len(self._inflight)} job(s) still in flight")

    async def wait_closed(self) -> None:
        if self._loop_task is not None:
            await asyncio.gather(self._loop_task, return_exceptions=True)
            self._loop_task = None

        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def add_job(
        self,
        job_key: str,
        func: Callable[..., Any],
        interval_ms: int,
        args: tuple = (),
        kwargs: Optional[dict] = None,
        job_name: Optional[str] = None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"Job interval must be greater than 0: {interval_ms}")

        if job_key in self._jobs:
            self.remove_job(job_key)

        self._jobs[job_key] = TickJob(
            key=job_key,
            name=job_name or job_key,
            func=func,
            interval_ms=interval_ms,
            next_due_ms=self._now_ms() + interval_ms,
            args=args,
            kwargs=kwargs or {},
        )

    def remove_job(self, job_key: str) -> bool:
        return self._jobs.pop(job_key, None) is not None

    def has_job(self, job_key: str) -> bool:
        return job_key in self._jobs

    def get_all_jobs(self) -> list[str]:
        return list(self._jobs.keys())

    def get_job(self, job_key: str) -> Optional[TickJob]:
        return self._jobs.get(job_key)

    def run_pending(self) -> int:
        now_ms = self._now_ms()
        fired = 0

        for job in list(self._jobs.values()):
            if job.next_due_ms > now_ms:
                continue

            self._dispatch(job)
            fired += 1

            job.next_due_ms += job.interval_ms

            if job.next_due_ms <= now_ms:
                skipped = int((now_ms - job.next_due_ms) // job.interval_ms) + 1
                job.next_due_ms += skipped * job.interval_ms

                logger.warning(f"Job '{job.name}' fell behind schedule, skipped {skipped} run(s)")

        return fired

    async def _run_loop(self) -> None:
        tick_seconds = self.tick_ms / 1_000

        while self._running:
            try:
                self.run_pending()
            except Exception as e:
                logger.exception(f"Error while running pending jobs: {e}")

            await asyncio.sleep(tick_seconds)

    def _dispatch(self, job: TickJob) -> None:
        job.runs += 1

        try:
            result = job.func(*job.args, **job.kwargs)
        except Exception as e:
            logger.exception(f"Job '{job.name}' failed to dispatch: {e}")
            return

        if inspect.isawaitable(result):
            future = asyncio.ensure_future(result)
            self._inflight.add(future)
            future.add_done_callback(lambda done: self._on_job_done(job, done))

    def _on_job_done(self, job: TickJob, future: asyncio.Future) -> None:
        self._inflight.discard(future)

        if future.cancelled():
            return

        error = future.exception()
        if error is not None:
            logger.error(f"Job '{job.name}' raised: {error!r}")

    def _now_ms(self) -> float:
        return self._clock() * 1_000


@lru_cache
def get_tick_scheduler(tick_ms: int = 10) -> Scheduler:
    return TickScheduler(tick_ms=tick_ms)
