from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from core.domain.health_record import HealthRecord
from core.domain.probe_outcome import ProbeOutcome


class HealthStateTracker(ABC):

    @abstractmethod
    async def register(self, record: HealthRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    async def record(self, check_key: str, outcome: ProbeOutcome, checked_at: datetime) -> HealthRecord:
        raise NotImplementedError

    async def get(self, check_key: str) -> Optional[HealthRecord]:
        raise NotImplementedError

    async def get_all(self) -> dict[str, HealthRecord]:
        raise NotImplementedError

    async def clear(self) -> None:
        raise NotImplementedError
