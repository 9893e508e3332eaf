"""Result types returned by the telemetry service.

Best-effort steps (cache traffic, trip bookkeeping) never fail the call that
runs them. Their failures are reported here as soft failures next to the
primary result instead.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional

from fleet_tracker.schemas.telemetry import VehicleStatus
from fleet_tracker.schemas.trip import TripRecord


class SoftFailureStage(str, enum.Enum):
    CACHE_READ = "cache_read"
    CACHE_DECODE = "cache_decode"
    CACHE_WRITE = "cache_write"
    TRIP_INSERT = "trip_insert"


@dataclass(frozen=True)
class SoftFailure:
    """A best-effort step that failed without failing the call."""

    stage: SoftFailureStage
    error: Exception

    def __str__(self) -> str:
        return f"{self.stage.value}: {self.error}"


@dataclass
class IngestResult:
    vehicle_id: str
    trip: Optional[TripRecord] = None
    soft_failures: List[SoftFailure] = field(default_factory=list)

    @property
    def trip_recorded(self) -> bool:
        return self.trip is not None

    @property
    def degraded(self) -> bool:
        return bool(self.soft_failures)

    def stages(self) -> List[str]:
        return [failure.stage.value for failure in self.soft_failures]


@dataclass
class StatusLookup:
    vehicle_id: str
    status: Optional[VehicleStatus] = None
    from_cache: bool = False
    soft_failures: List[SoftFailure] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status is not None
