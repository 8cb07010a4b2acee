from dataclasses import dataclass, field

from core.domain.health_check import HealthCheck


@dataclass(frozen=True)
class Backend:
    name: str
    host: str
    health: tuple[HealthCheck, ...] = field(default_factory=tuple)

    def check_key(self, index: int) -> str:
        return f"{self.name}#{index}"
