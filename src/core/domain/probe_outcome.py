from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ProbeOutcome:
    success: bool
    latency_ms: float
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def failure(cls, error: str, latency_ms: float = 0.0) -> "ProbeOutcome":
        return cls(success=False, latency_ms=latency_ms, error=error)
