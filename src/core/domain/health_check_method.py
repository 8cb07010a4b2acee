from enum import Enum
from typing import Optional


class HealthCheckMethod(str, Enum):
    HTTP = "http"
    PING = "ping"

    @property
    def default_port(self) -> Optional[int]:
        mapping = {
            HealthCheckMethod.HTTP: 80,
            HealthCheckMethod.PING: None,
        }

        return mapping[self]

    @property
    def requires_endpoint(self) -> bool:
        return self is HealthCheckMethod.HTTP
