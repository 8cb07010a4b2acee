from abc import ABC, abstractmethod

from core.domain.backend import Backend
from core.domain.health_check import HealthCheck
from core.domain.probe_outcome import ProbeOutcome


class Probe(ABC):
    @abstractmethod
    async def execute(self, backend: Backend, check: HealthCheck, timeout_seconds: float) -> ProbeOutcome:
        raise NotImplementedError
