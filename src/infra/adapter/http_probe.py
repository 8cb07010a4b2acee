import time

import httpx
import structlog

from core.domain.backend import Backend
from core.domain.health_check import HealthCheck
from core.domain.probe_outcome import ProbeOutcome
from core.port.probe import Probe

logger = structlog.stdlib.get_logger(__name__)


def build_url(host: str, check: HealthCheck) -> str:
    if "://" in host:
        scheme, _, address = host.partition("://")
    else:
        scheme, address = "http", host

    address = address.rstrip("/")
    default_port = 443 if scheme == "https" else check.method.default_port
    port = check.port or default_port

    endpoint = check.endpoint or "/"
    if not endpoint.startswith("/"):
        endpoint = f"/{endpoint}"

    return f"{scheme}://{address}:{port}{endpoint}"


class HttpProbe(Probe):
    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self.http_client = http_client

    async def execute(self, backend: Backend, check: HealthCheck, timeout_seconds: float) -> ProbeOutcome:
        url = build_url(backend.host, check)
        start_time = time.perf_counter()

        try:
            response = await self.http_client.get(url, timeout=timeout_seconds)
        except httpx.TimeoutException:
            latency_ms = (time.perf_counter() - start_time) * 1_000
            logger.debug(f"HTTP probe timeout for '{backend.name}' ({url}, timeout: {timeout_seconds:.3f}s)")
            return ProbeOutcome.failure("Request timeout", latency_ms)
        except httpx.RequestError as e:
            latency_ms = (time.perf_counter() - start_time) * 1_000
            logger.debug(f"HTTP probe failed for '{backend.name}' ({url}): {e}")
            return ProbeOutcome.failure(str(e) or type(e).__name__, latency_ms)

        latency_ms = (time.perf_counter() - start_time) * 1_000

        if check.expected_status is not None and response.status_code != check.expected_status:
            return ProbeOutcome(
                success=False,
                latency_ms=latency_ms,
                error=f"Expected status {check.expected_status}, got {response.status_code}",
                status_code=response.status_code,
            )

        return ProbeOutcome(success=True, latency_ms=latency_ms, status_code=response.status_code)
