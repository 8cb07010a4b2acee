from dataclasses import dataclass, field
from typing import Iterator

from core.domain.backend import Backend
from core.domain.health_check import HealthCheck


@dataclass(frozen=True)
class Configuration:
    backends: tuple[Backend, ...] = field(default_factory=tuple)

    def iter_health_checks(self) -> Iterator[tuple[str, Backend, HealthCheck]]:
        for backend in self.backends:
            for index, check in enumerate(backend.health):
                yield backend.check_key(index), backend, check

    def count_health_checks(self) -> int:
        return sum(len(backend.health) for backend in self.backends)
