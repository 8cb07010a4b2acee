from core.domain.backend import Backend
from core.domain.health_check import HealthCheck
from core.domain.health_check_method import HealthCheckMethod
from core.domain.probe_outcome import ProbeOutcome
from core.port.probe import Probe


class MethodProbeDispatcher(Probe):
    def __init__(self, probes: dict[HealthCheckMethod, Probe]) -> None:
        self.probes = probes

    async def execute(self, backend: Backend, check: HealthCheck, timeout_seconds: float) -> ProbeOutcome:
        probe = self.probes.get(check.method)

        if probe is None:
            return ProbeOutcome.failure(f"No probe registered for method '{check.method.value}'")

        return await probe.execute(backend, check, timeout_seconds)
