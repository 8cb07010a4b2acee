from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.domain.backend import Backend
from core.domain.configuration import Configuration
from core.domain.health_check import HealthCheck
from core.domain.health_check_method import HealthCheckMethod
from core.domain.interval import DEFAULT_INTERVAL, Interval, parse_interval


class DocumentModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class HealthCheckDocument(DocumentModel):
    method: HealthCheckMethod
    endpoint: Optional[str] = None
    interval: Interval = DEFAULT_INTERVAL
    port: Optional[int] = Field(default=None, gt=0, lt=65_536)
    expected_status: Optional[int] = Field(default=None, ge=100, le=599)

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, method):
        if isinstance(method, str):
            return method.strip().lower()

        return method

    @field_validator("interval", mode="before")
    @classmethod
    def parse_duration(cls, interval):
        if isinstance(interval, Interval):
            return interval

        if not isinstance(interval, str):
            raise ValueError(f"Duration must be a string such as '30s', got {interval!r}")

        return parse_interval(interval)

    @model_validator(mode="after")
    def validate_endpoint(self) -> "HealthCheckDocument":
        if self.method.requires_endpoint and not self.endpoint:
            raise ValueError(f"'{self.method.value}' health checks require an endpoint")

        return self

    def to_domain(self) -> HealthCheck:
        return HealthCheck(
            method=self.method,
            endpoint=self.endpoint,
            interval=self.interval,
            port=self.port,
            expected_status=self.expected_status,
        )


class BackendDocument(DocumentModel):
    name: str = Field(min_length=1)
    host: str = Field(min_length=1)
    health: list[HealthCheckDocument] = Field(default_factory=list)

    def to_domain(self) -> Backend:
        return Backend(
            name=self.name,
            host=self.host,
            health=tuple(check.to_domain() for check in self.health),
        )


class ConfigurationDocument(DocumentModel):
    backends: list[BackendDocument] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def merge_legacy_remotes(cls, data):
        if not isinstance(data, dict):
            return data

        data = dict(data)

        if "remotes" in data:
            remotes = data.pop("remotes")

            if data.get("backends"):
                raise ValueError("Use either 'backends' or the legacy 'remotes' key, not both")

            data["backends"] = remotes

        if data.get("backends") is None:
            data["backends"] = []

        return data

    @model_validator(mode="after")
    def validate_unique_names(self) -> "ConfigurationDocument":
        seen: set[str] = set()
        duplicated: set[str] = set()

        for backend in self.backends:
            if backend.name in seen:
                duplicated.add(backend.name)
            seen.add(backend.name)

        if duplicated:
            raise ValueError(f"Backend names must be unique: {', '.join(sorted(duplicated))}")

        return self

    def to_domain(self) -> Configuration:
        return Configuration(backends=tuple(backend.to_domain() for backend in self.backends))
