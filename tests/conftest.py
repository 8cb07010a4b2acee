from collections.abc import Generator

import pytest

from infra.adapter.local_scheduler import get_local_scheduler
from infra.adapter.tick_scheduler import get_tick_scheduler
from infra.config.config import get_config
from tests.support.fakes import FakeClock


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in [
        "GRIFFIN_CONFIG_PATH",
        "GRIFFIN_ENVIRONMENT",
        "GRIFFIN_LOGGING_CONFIG__LEVEL",
        "GRIFFIN_LOGGING_CONFIG__LIBRARY_LOG_LEVELS",
        "GRIFFIN_ENGINE_CONFIG__SCHEDULER_BACKEND",
        "GRIFFIN_ENGINE_CONFIG__FAILURE_THRESHOLD",
    ]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_cached_singletons() -> Generator[None, None, None]:
    cacheables = [
        get_config,
        get_local_scheduler,
        get_tick_scheduler,
    ]

    for cacheable in cacheables:
        cacheable.cache_clear()

    yield

    for cacheable in cacheables:
        cacheable.cache_clear()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
