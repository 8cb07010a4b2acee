import asyncio
import logging
import time
from datetime import datetime, timezone

import structlog

from core.domain.backend import Backend
from core.domain.configuration import Configuration
from core.domain.health_check import HealthCheck
from core.domain.health_record import HealthRecord
from core.domain.health_status import HealthStatus
from core.domain.probe_outcome import ProbeOutcome
from core.port.health_state_tracker import HealthStateTracker
from core.port.probe import Probe
from core.port.scheduler import Scheduler

logger = structlog.stdlib.get_logger(__name__)

# Extra time granted over the probe's own timeout before the service gives up on it.
PROBE_GUARD_SECONDS = 0.05


class HealthcheckService:
    def __init__(
        self,
        configuration: Configuration,
        scheduler: Scheduler,
        tracker: HealthStateTracker,
        probe: Probe,
        probe_timeout_seconds: float = 10.0,
        probe_timeout_ratio: float = 0.9,
    ):
        self.configuration = configuration
        self.scheduler = scheduler
        self.tracker = tracker
        self.probe = probe

        self.PROBE_TIMEOUT_SECONDS = probe_timeout_seconds
        self.PROBE_TIMEOUT_RATIO = probe_timeout_ratio

        self._checks: dict[str, tuple[Backend, HealthCheck]] = {}

    async def start(self):
        logger.info("Health check service started")

        for check_key, backend, check in self.configuration.iter_health_checks():
            await self._register_health_check(check_key, backend, check)

        if not self._checks:
            logger.info("No health checks configured, nothing to schedule")
            return

        logger.info(
            f"Scheduled {len(self._checks)} health check(s) "
            f"across {len(self.configuration.backends)} backend(s)"
        )

    async def stop(self):
        self.scheduler.stop()
        await self.scheduler.wait_closed()

        logger.info("Health check service stopped")

    async def _register_health_check(self, check_key: str, backend: Backend, check: HealthCheck):
        await self.tracker.register(
            HealthRecord(
                check_key=check_key,
                backend_name=backend.name,
                method=check.method,
            )
        )

        self._checks[check_key] = (backend, check)

        self.scheduler.add_job(
            job_key=check_key,
            func=self._check_health,
            interval_ms=check.interval.to_milliseconds(),
            args=(check_key,),
            job_name=f"Health check: {backend.name} ({check.method.value})",
        )

        logger.info(
            f"Scheduled {check.method.value} health check for backend '{backend.name}' "
            f"(key: {check_key}, interval: {check.interval})"
        )

    async def _check_health(self, check_key: str) -> HealthRecord:
        backend, check = self._checks[check_key]
        timeout_seconds = check.probe_timeout_seconds(self.PROBE_TIMEOUT_SECONDS, self.PROBE_TIMEOUT_RATIO)
        # Hard limit, kept below the interval.
        deadline_seconds = min(
            timeout_seconds + PROBE_GUARD_SECONDS,
            check.interval.to_seconds() * self.PROBE_TIMEOUT_RATIO,
        )

        checked_at = datetime.now(timezone.utc)
        start_time = time.perf_counter()

        try:
            outcome = await asyncio.wait_for(
                self.probe.execute(backend, check, timeout_seconds),
                timeout=deadline_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"Health check timeout for '{backend.name}' (timeout: {timeout_seconds:.3f}s)")
            outcome = ProbeOutcome.failure("Probe timeout", (time.perf_counter() - start_time) * 1_000)
        except Exception as e:
            logger.exception(f"Unexpected error checking '{backend.name}': {e}")
            outcome = ProbeOutcome.failure(f"{type(e).__name__}: {e}")

        record = await self.tracker.record(check_key, outcome, checked_at)

        log_level = logging.INFO if record.status is HealthStatus.HEALTHY else logging.WARNING
        logger.log(
            log_level,
            f"Health check '{backend.name}' ({check.method.value}): "
            f"success={outcome.success}, "
            f"latency={outcome.latency_ms:.2f}ms, "
            f"health={record.status.value}, "
            f"failures={record.consecutive_failures}"
            + (f", error={outcome.error}" if outcome.error else ""),
        )

        return record

    async def trigger_immediate_check(self, check_key: str) -> HealthRecord:
        if check_key not in self._checks:
            raise KeyError(f"Health check '{check_key}' is not registered")

        return await self._check_health(check_key)
