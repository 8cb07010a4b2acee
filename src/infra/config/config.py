from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from infra.utils.version import get_version


class LoggingConfig(BaseModel):
    LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    JSON_FORMAT: bool = False
    LIBRARY_LOG_LEVELS: dict[str, str | int] = Field(default_factory=lambda: {"httpx": "WARNING"})


class EngineConfig(BaseModel):
    SCHEDULER_BACKEND: Literal["tick", "apscheduler"] = "tick"
    TICK_MS: int = Field(default=10, gt=0)

    FAILURE_THRESHOLD: int = Field(default=1, ge=1)
    HISTORY_SIZE: int = Field(default=10, ge=0)

    PROBE_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    PROBE_TIMEOUT_RATIO: float = Field(default=0.9, gt=0)

    PING_MODE: Literal["auto", "icmp", "tcp"] = "auto"

    HTTP_MAX_CONNECTIONS: int = Field(default=100, gt=0)
    HTTP_FOLLOW_REDIRECTS: bool = True

    @model_validator(mode="after")
    def validate_probe_timeout_ratio(self) -> "EngineConfig":
        if self.PROBE_TIMEOUT_RATIO >= 1:
            raise ValueError(
                f"ENGINE_CONFIG.PROBE_TIMEOUT_RATIO must be below 1 so probes finish before the next run: "
                f"{self.PROBE_TIMEOUT_RATIO}"
            )

        return self


class Config(BaseSettings):
    APP_NAME: str = "griffin"
    VERSION: str = get_version()
    ENVIRONMENT: Literal["loc", "dev", "pre", "pro"] = "dev"

    CONFIG_PATH: str = "griffin.yaml"

    LOGGING_CONFIG: LoggingConfig = LoggingConfig()
    ENGINE_CONFIG: EngineConfig = EngineConfig()

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        case_sensitive=False,
        env_prefix="GRIFFIN_",
        env_file=".env",
        env_nested_delimiter="__",
    )


@lru_cache
def get_config() -> Config:
    return Config()
