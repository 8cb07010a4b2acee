from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from core.domain.health_check_method import HealthCheckMethod
from core.domain.health_status import HealthStatus
from core.domain.probe_outcome import ProbeOutcome


@dataclass(frozen=True)
class HealthRecord:
    check_key: str
    backend_name: str
    method: HealthCheckMethod

    status: HealthStatus = HealthStatus.UNKNOWN
    last_checked: Optional[datetime] = None
    last_latency_ms: Optional[float] = None
    consecutive_failures: int = 0
    last_error: Optional[str] = None

    history: tuple[bool, ...] = field(default_factory=tuple)

    def apply(
        self,
        outcome: ProbeOutcome,
        checked_at: datetime,
        failure_threshold: int,
        history_size: int,
    ) -> "HealthRecord":
        """Return the record that results from observing ``outcome``.

        A success is immediately healthy. Failures only flip the verdict to
        unhealthy once ``failure_threshold`` of them happened in a row; before
        that the previous verdict is kept.
        """
        history = (*self.history, outcome.success)[-history_size:] if history_size > 0 else ()

        if outcome.success:
            return replace(
                self,
                status=HealthStatus.HEALTHY,
                last_checked=checked_at,
                last_latency_ms=outcome.latency_ms,
                consecutive_failures=0,
                last_error=None,
                history=history,
            )

        consecutive_failures = self.consecutive_failures + 1
        status = HealthStatus.UNHEALTHY if consecutive_failures >= failure_threshold else self.status

        return replace(
            self,
            status=status,
            last_checked=checked_at,
            last_latency_ms=outcome.latency_ms,
            consecutive_failures=consecutive_failures,
            last_error=outcome.error,
            history=history,
        )
