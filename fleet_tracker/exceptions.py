"""Exception hierarchy for the fleet tracker service."""

from typing import Optional


class FleetTrackerError(Exception):
    """Base exception for all fleet tracker errors."""


class InvalidPayloadError(FleetTrackerError):
    """Telemetry payload rejected before or during ingestion."""


class InvalidVehicleIdError(InvalidPayloadError):
    """Vehicle identifier is not a valid UUID."""

    def __init__(self, vehicle_id: str, reason: Optional[str] = None) -> None:
        self.vehicle_id = vehicle_id
        message = f"invalid vehicle_id: {vehicle_id!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class StoreError(FleetTrackerError):
    """Persistent store operation failed."""


class VehicleNotFoundError(FleetTrackerError):
    """No status is stored for the requested vehicle."""

    def __init__(self, vehicle_id: str) -> None:
        self.vehicle_id = vehicle_id
        super().__init__(f"vehicle not found: {vehicle_id}")


class NoTripsFoundError(FleetTrackerError):
    """Trip query matched no rows."""

    def __init__(self, vehicle_id: str) -> None:
        self.vehicle_id = vehicle_id
        super().__init__(f"trips not found for vehicle {vehicle_id}")


class CacheError(FleetTrackerError):
    """Cache backend unreachable or returned an error."""


class SimulatorStateError(FleetTrackerError):
    """Illegal telemetry simulator lifecycle transition."""
