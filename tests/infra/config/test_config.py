import pytest
from pydantic import ValidationError
from pytest import MonkeyPatch

from infra.config.config import Config, EngineConfig


def test_config_defaults() -> None:
    config = Config(_env_file=None)

    assert config.APP_NAME == "griffin"
    assert config.CONFIG_PATH == "griffin.yaml"
    assert config.ENGINE_CONFIG.SCHEDULER_BACKEND == "tick"
    assert config.ENGINE_CONFIG.TICK_MS == 10
    assert config.ENGINE_CONFIG.FAILURE_THRESHOLD == 1
    assert config.LOGGING_CONFIG.LEVEL == "INFO"


def test_config_reads_prefixed_nested_env(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("GRIFFIN_CONFIG_PATH", "/etc/griffin/griffin.yaml")
    monkeypatch.setenv("GRIFFIN_ENGINE_CONFIG__FAILURE_THRESHOLD", "3")
    monkeypatch.setenv("GRIFFIN_ENGINE_CONFIG__SCHEDULER_BACKEND", "apscheduler")
    monkeypatch.setenv("GRIFFIN_LOGGING_CONFIG__LEVEL", "DEBUG")

    config = Config(_env_file=None)

    assert config.CONFIG_PATH == "/etc/griffin/griffin.yaml"
    assert config.ENGINE_CONFIG.FAILURE_THRESHOLD == 3
    assert config.ENGINE_CONFIG.SCHEDULER_BACKEND == "apscheduler"
    assert config.LOGGING_CONFIG.LEVEL == "DEBUG"


def test_logging_config_parses_library_log_levels_from_env(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv(
        "GRIFFIN_LOGGING_CONFIG__LIBRARY_LOG_LEVELS",
        '{"httpx":"WARNING","apscheduler":"ERROR","custom.logger":25}',
    )

    config = Config(_env_file=None)

    assert config.LOGGING_CONFIG.LIBRARY_LOG_LEVELS == {
        "httpx": "WARNING",
        "apscheduler": "ERROR",
        "custom.logger": 25,
    }


def test_engine_config_rejects_threshold_below_one() -> None:
    with pytest.raises(ValidationError):
        EngineConfig(FAILURE_THRESHOLD=0)


def test_engine_config_requires_probe_timeout_ratio_below_one() -> None:
    with pytest.raises(ValidationError, match="PROBE_TIMEOUT_RATIO must be below 1"):
        EngineConfig(PROBE_TIMEOUT_RATIO=1.0)
