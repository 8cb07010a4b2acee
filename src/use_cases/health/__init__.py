from use_cases.health.get_backend_health_use_case import GetBackendHealthUseCase
from use_cases.health.get_health_snapshot_use_case import GetHealthSnapshotUseCase

__all__ = [
    "GetBackendHealthUseCase",
    "GetHealthSnapshotUseCase",
]
