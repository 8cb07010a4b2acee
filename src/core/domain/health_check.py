from dataclasses import dataclass, field
from typing import Optional

from core.domain.health_check_method import HealthCheckMethod
from core.domain.interval import DEFAULT_INTERVAL, Interval


@dataclass(frozen=True)
class HealthCheck:
    method: HealthCheckMethod
    endpoint: Optional[str] = None
    interval: Interval = field(default=DEFAULT_INTERVAL)
    port: Optional[int] = None
    expected_status: Optional[int] = None

    def __post_init__(self):
        if self.method.requires_endpoint and not self.endpoint:
            raise ValueError(f"Health check method '{self.method.value}' requires an endpoint")

        if self.port is not None and not 0 < self.port < 65_536:
            raise ValueError(f"Port out of range: {self.port}")

    def probe_timeout_seconds(self, max_timeout_seconds: float, ratio: float) -> float:
        return min(max_timeout_seconds, self.interval.to_seconds() * ratio)
