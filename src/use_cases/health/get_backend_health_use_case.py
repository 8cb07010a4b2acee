from core.domain.configuration import Configuration
from core.domain.health_record import HealthRecord
from core.exceptions.backend_not_found_error import BackendNotFoundError
from core.port.health_state_tracker import HealthStateTracker


class GetBackendHealthUseCase:
    def __init__(self, configuration: Configuration, tracker: HealthStateTracker) -> None:
        self.configuration = configuration
        self.tracker = tracker

    async def execute(self, backend_name: str) -> list[HealthRecord]:
        if not any(backend.name == backend_name for backend in self.configuration.backends):
            raise BackendNotFoundError(backend_name)

        records = await self.tracker.get_all()

        return [record for record in records.values() if record.backend_name == backend_name]
