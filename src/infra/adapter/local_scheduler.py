import asyncio
from functools import lru_cache
from typing import Any, Callable, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.port.scheduler import Scheduler

logger = structlog.stdlib.get_logger(__name__)


class LocalScheduler(Scheduler):
    def __init__(self, scheduler: BaseScheduler) -> None:
        self.scheduler = scheduler
        self._jobs: dict[str, str] = {}
        self._inflight: set[asyncio.Task] = set()
        self._stopped = False

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        # Pausing stops new dispatches without cancelling running jobs.
        self.scheduler.pause()
        self._stopped = True

    async def wait_closed(self) -> None:
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

        if self._stopped:
            self.scheduler.shutdown(wait=False)

    def add_job(
        self,
        job_key: str,
        func: Callable[..., Any],
        interval_ms: int,
        args: tuple = (),
        kwargs: Optional[dict] = None,
        job_name: Optional[str] = None,
    ) -> None:
        if job_key in self._jobs:
            self.remove_job(job_key)

        kwargs = kwargs or {}
        job_name = job_name or job_key

        job = self.scheduler.add_job(
            func=self._tracked,
            trigger=IntervalTrigger(seconds=interval_ms / 1_000),
            args=(func, *args),
            kwargs=kwargs,
            id=job_key,
            name=job_name,
            replace_existing=True,
            max_instances=1,
        )

        self._jobs[job_key] = job.id

    def remove_job(self, job_key: str) -> bool:
        if job_key in self._jobs:
            job_id = self._jobs.pop(job_key)

            try:
                self.scheduler.remove_job(job_id)
                return True
            except Exception as e:
                logger.warning(f"Failed to remove job '{job_key}': {e}")
                return False

        return False

    def has_job(self, job_key: str) -> bool:
        return job_key in self._jobs

    def get_all_jobs(self) -> list[str]:
        return list(self._jobs.keys())

    async def _tracked(self, func: Callable[..., Any], *args, **kwargs) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._inflight.add(task)

        try:
            result = func(*args, **kwargs)
            if asyncio.iscoroutine(result):
                await result
        finally:
            if task is not None:
                self._inflight.discard(task)


@lru_cache
def get_local_scheduler() -> Scheduler:
    scheduler = AsyncIOScheduler()

    return LocalScheduler(scheduler)
