from core.domain.health_record import HealthRecord
from core.port.health_state_tracker import HealthStateTracker


class GetHealthSnapshotUseCase:
    def __init__(self, tracker: HealthStateTracker):
        self.tracker = tracker

    async def execute(self) -> list[HealthRecord]:
        records = await self.tracker.get_all()
        return list(records.values())
