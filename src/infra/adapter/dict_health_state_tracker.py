import asyncio
from datetime import datetime
from typing import Optional

from core.domain.health_record import HealthRecord
from core.domain.probe_outcome import ProbeOutcome
from core.port.health_state_tracker import HealthStateTracker


class DictHealthStateTracker(HealthStateTracker):
    def __init__(self, failure_threshold: int = 1, history_size: int = 10) -> None:
        if failure_threshold < 1:
            raise ValueError(f"Failure threshold must be at least 1: {failure_threshold}")

        self.failure_threshold = failure_threshold
        self.history_size = history_size

        self._records: dict[str, HealthRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def register(self, record: HealthRecord) -> None:
        self._locks.setdefault(record.check_key, asyncio.Lock())
        self._records[record.check_key] = record

    async def record(self, check_key: str, outcome: ProbeOutcome, checked_at: datetime) -> HealthRecord:
        lock = self._locks.get(check_key)

        if lock is None:
            raise KeyError(f"Health check '{check_key}' is not registered")

        async with lock:
            updated = self._records[check_key].apply(
                outcome,
                checked_at=checked_at,
                failure_threshold=self.failure_threshold,
                history_size=self.history_size,
            )
            self._records[check_key] = updated

        return updated

    async def get(self, check_key: str) -> Optional[HealthRecord]:
        return self._records.get(check_key)

    async def get_all(self) -> dict[str, HealthRecord]:
        return self._records.copy()

    async def clear(self) -> None:
        self._records.clear()
        self._locks.clear()
