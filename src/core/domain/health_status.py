from enum import Enum


class HealthStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    HEALTHY = "HEALTHY"
    UNHEALTHY = "UNHEALTHY"

    @property
    def severity(self) -> int:
        mapping = {
            HealthStatus.UNHEALTHY: 2,
            HealthStatus.UNKNOWN: 1,
            HealthStatus.HEALTHY: 0,
        }

        return mapping[self]
