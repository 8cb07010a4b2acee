import asyncio
import math
import shutil
import time
from typing import Literal, Optional

import structlog

from core.domain.backend import Backend
from core.domain.health_check import HealthCheck
from core.domain.probe_outcome import ProbeOutcome
from core.port.probe import Probe

logger = structlog.stdlib.get_logger(__name__)

PingMode = Literal["auto", "icmp", "tcp"]

DEFAULT_TCP_PORT = 80

PERMISSION_DENIED_MARKERS = ("operation not permitted", "permission denied")


def _is_permission_error(message: str) -> bool:
    message = message.lower()

    return any(marker in message for marker in PERMISSION_DENIED_MARKERS)


def strip_scheme(host: str) -> str:
    _, separator, address = host.partition("://")
    address = address if separator else host

    return address.split("/", 1)[0].split(":", 1)[0]


class PingProbe(Probe):
    """Reachability probe.

    ``icmp`` shells out to the system ``ping`` binary for a single echo request,
    ``tcp`` opens (and immediately closes) a TCP connection. ``auto`` prefers
    ICMP and falls back to TCP when no ``ping`` binary is available or the
    binary is not allowed to send echo requests.
    """

    def __init__(self, mode: PingMode = "auto", ping_binary: Optional[str] = None) -> None:
        self.mode = mode
        self.ping_binary = ping_binary or shutil.which("ping")
        self.icmp_permitted = True

        if mode == "icmp" and self.ping_binary is None:
            raise ValueError("ICMP ping mode requires a 'ping' binary on PATH")

    @property
    def uses_icmp(self) -> bool:
        if self.mode == "icmp":
            return True

        return self.mode == "auto" and self.ping_binary is not None and self.icmp_permitted

    async def execute(self, backend: Backend, check: HealthCheck, timeout_seconds: float) -> ProbeOutcome:
        address = strip_scheme(backend.host)
        start_time = time.perf_counter()

        try:
            error = await asyncio.wait_for(self._reach(address, check, timeout_seconds), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            latency_ms = (time.perf_counter() - start_time) * 1_000
            return ProbeOutcome.failure("Ping timeout", latency_ms)
        except OSError as e:
            latency_ms = (time.perf_counter() - start_time) * 1_000
            logger.debug(f"Ping probe failed for '{backend.name}' ({address}): {e}")
            return ProbeOutcome.failure(str(e) or type(e).__name__, latency_ms)

        latency_ms = (time.perf_counter() - start_time) * 1_000

        if error is not None:
            return ProbeOutcome.failure(error, latency_ms)

        return ProbeOutcome(success=True, latency_ms=latency_ms)

    async def _reach(self, address: str, check: HealthCheck, timeout_seconds: float) -> Optional[str]:
        if self.uses_icmp:
            try:
                error = await self._icmp(address, timeout_seconds)
            except PermissionError as e:
                if self.mode != "auto":
                    raise
                error = str(e)
            else:
                if error is None or self.mode != "auto" or not _is_permission_error(error):
                    return error

            logger.warning(f"ICMP ping is not permitted ({error}), using TCP connect for ping checks")
            self.icmp_permitted = False

        return await self._tcp_connect(address, check.port or DEFAULT_TCP_PORT)

    async def _icmp(self, address: str, timeout_seconds: float) -> Optional[str]:
        deadline = max(1, math.ceil(timeout_seconds))

        process = await asyncio.create_subprocess_exec(
            self.ping_binary,
            "-c",
            "1",
            "-w",
            str(deadline),
            address,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )

        try:
            _, stderr = await process.communicate()
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip()
            return message or f"Host unreachable (ping exit code {process.returncode})"

        return None

    async def _tcp_connect(self, address: str, port: int) -> Optional[str]:
        _, writer = await asyncio.open_connection(address, port)
        writer.close()
        await writer.wait_closed()

        return None
