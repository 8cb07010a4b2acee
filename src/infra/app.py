import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
import structlog

from core.domain.configuration import Configuration
from core.domain.health_check_method import HealthCheckMethod
from core.port.health_state_tracker import HealthStateTracker
from core.port.scheduler import Scheduler
from infra.adapter.dict_health_state_tracker import DictHealthStateTracker
from infra.adapter.http_probe import HttpProbe
from infra.adapter.local_scheduler import get_local_scheduler
from infra.adapter.method_probe_dispatcher import MethodProbeDispatcher
from infra.adapter.ping_probe import PingProbe
from infra.adapter.tick_scheduler import get_tick_scheduler
from infra.config.config import Config, EngineConfig, get_config
from infra.services.healthcheck_service import HealthcheckService
from use_cases.health.get_backend_health_use_case import GetBackendHealthUseCase
from use_cases.health.get_health_snapshot_use_case import GetHealthSnapshotUseCase

logger = structlog.stdlib.get_logger(__name__)


def create_scheduler(engine_config: EngineConfig) -> Scheduler:
    if engine_config.SCHEDULER_BACKEND == "apscheduler":
        return get_local_scheduler()

    return get_tick_scheduler(engine_config.TICK_MS)


class GriffinApp:
    def __init__(
        self,
        config: Config,
        configuration: Configuration,
        scheduler: Scheduler,
        tracker: HealthStateTracker,
        http_client: httpx.AsyncClient,
        healthcheck_service: HealthcheckService,
    ) -> None:
        self.config = config
        self.configuration = configuration
        self.scheduler = scheduler
        self.tracker = tracker
        self.http_client = http_client
        self.healthcheck_service = healthcheck_service

        self.get_health_snapshot = GetHealthSnapshotUseCase(tracker)
        self.get_backend_health = GetBackendHealthUseCase(configuration, tracker)

    @asynccontextmanager
    async def lifespan(self) -> AsyncIterator["GriffinApp"]:
        await self.healthcheck_service.start()
        self.scheduler.start()

        try:
            yield self
        finally:
            await self.healthcheck_service.stop()
            await self.http_client.aclose()

    async def run(self, shutdown_event: asyncio.Event) -> None:
        async with self.lifespan():
            logger.info(f"{self.config.APP_NAME} {self.config.VERSION} running, waiting for shutdown signal")
            await shutdown_event.wait()

            logger.info("Shutdown signal received, draining in-flight health checks")


def create_app(configuration: Configuration, config: Optional[Config] = None) -> GriffinApp:
    config = config or get_config()
    engine_config = config.ENGINE_CONFIG

    scheduler = create_scheduler(engine_config)
    tracker = DictHealthStateTracker(
        failure_threshold=engine_config.FAILURE_THRESHOLD,
        history_size=engine_config.HISTORY_SIZE,
    )

    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(engine_config.PROBE_TIMEOUT_SECONDS),
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=engine_config.HTTP_MAX_CONNECTIONS),
        follow_redirects=engine_config.HTTP_FOLLOW_REDIRECTS,
    )

    probe = MethodProbeDispatcher(
        {
            HealthCheckMethod.HTTP: HttpProbe(http_client),
            HealthCheckMethod.PING: PingProbe(mode=engine_config.PING_MODE),
        }
    )

    healthcheck_service = HealthcheckService(
        configuration=configuration,
        scheduler=scheduler,
        tracker=tracker,
        probe=probe,
        probe_timeout_seconds=engine_config.PROBE_TIMEOUT_SECONDS,
        probe_timeout_ratio=engine_config.PROBE_TIMEOUT_RATIO,
    )

    return GriffinApp(
        config=config,
        configuration=configuration,
        scheduler=scheduler,
        tracker=tracker,
        http_client=http_client,
        healthcheck_service=healthcheck_service,
    )
