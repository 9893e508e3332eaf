"""
Ingestion and query logic for vehicle telemetry.

All status writes, whether from clients or from the simulator, go through
TelemetryService.ingest. Reads use cache-aside: the cache is tried first and the
store is the fallback. The cache is only an accelerator, so cache problems are
reported as soft failures and never fail a call.
"""

import logging
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from pydantic import ValidationError

from fleet_tracker.cache.status_cache import RedisCache
from fleet_tracker.db.telemetry_store import TelemetryStore
from fleet_tracker.exceptions import (
    CacheError,
    InvalidPayloadError,
    InvalidVehicleIdError,
    StoreError,
    VehicleNotFoundError,
)
from fleet_tracker.schemas.telemetry import IngestPayload, VehicleStatus
from fleet_tracker.schemas.trip import TripRecord
from fleet_tracker.services.results import IngestResult, SoftFailure, SoftFailureStage, StatusLookup

logger = logging.getLogger(__name__)

STATUS_CACHE_TTL = timedelta(minutes=5)
TRIP_QUERY_WINDOW = timedelta(hours=24)

# Placeholder trip heuristic: every timestamped update counts as a short trip
TRIP_START_OFFSET = timedelta(minutes=1)
TRIP_MILEAGE = 0.5
TRIP_AVG_SPEED = 30.0


# Canonical, braced, urn-prefixed and bare-hex forms; hyphens only at fixed positions
_UUID_FORMATS = re.compile(
    r"(?:urn:uuid:)?[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
    r"|\{[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\}"
    r"|[0-9a-f]{32}",
    re.ASCII | re.IGNORECASE,
)


def status_cache_key(vehicle_id: str) -> str:
    return f"vehicle:{vehicle_id}:status"


def parse_vehicle_uuid(vehicle_id: str) -> uuid.UUID:
    if not isinstance(vehicle_id, str) or _UUID_FORMATS.fullmatch(vehicle_id) is None:
        raise InvalidVehicleIdError(vehicle_id, "not a UUID")
    return uuid.UUID(vehicle_id)


def derive_trip(vehicle_uuid: uuid.UUID, timestamp: datetime) -> Optional[TripRecord]:
    """Build the trip record implied by a status reported at ``timestamp``.

    Returns None when the trip window would start before the earliest
    representable instant.
    """
    try:
        start_time = timestamp - TRIP_START_OFFSET
    except OverflowError:
        return None
    return TripRecord(
        id=uuid.uuid4(),
        vehicle_id=vehicle_uuid,
        start_time=start_time,
        end_time=timestamp,
        mileage=TRIP_MILEAGE,
        avg_speed=TRIP_AVG_SPEED,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TelemetryService:
    """Single entry point for telemetry writes and status/trip reads.

    Holds no locks: the store and cache are safe for concurrent use and
    concurrent writers for one vehicle resolve as last write wins,
    independently at the store and at the cache.
    """

    def __init__(
        self,
        store: TelemetryStore,
        cache: RedisCache,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self._clock = clock or _utcnow

    def ingest(self, payload: IngestPayload) -> IngestResult:
        """Store a telemetry update, derive its trip and refresh the cache.

        Raises:
            InvalidPayloadError: missing vehicle id or status; nothing is written.
            StoreError: the status upsert failed; nothing else is attempted.
            InvalidVehicleIdError: the id is not a UUID. The status has
                already been stored at that point and is kept.
        """
        vehicle_id = payload.vehicle_id
        if not vehicle_id or not payload.status:
            raise InvalidPayloadError("invalid payload: vehicle_id and status are required")
        try:
            status = VehicleStatus.model_validate(payload.status)
        except ValidationError as e:
            raise InvalidPayloadError(f"invalid status for vehicle {vehicle_id}: {e}") from e

        self.store.upsert_status(vehicle_id, payload.plate_number, status)

        vehicle_uuid = parse_vehicle_uuid(vehicle_id)

        result = IngestResult(vehicle_id=vehicle_id)
        timestamp = status.parsed_timestamp()
        trip = None if timestamp is None else derive_trip(vehicle_uuid, timestamp)
        if trip is not None:
            try:
                self.store.insert_trip(trip)
                result.trip = trip
            except StoreError as e:
                logger.warning(f"Trip insert failed for vehicle {vehicle_id}: {e}")
                result.soft_failures.append(SoftFailure(SoftFailureStage.TRIP_INSERT, e))

        self._refresh_cache(vehicle_id, status, result.soft_failures)
        return result

    def get_status(self, vehicle_id: str) -> StatusLookup:
        """Latest status of a vehicle, cache first.

        An unknown vehicle yields a lookup with ``found`` False. Only store
        failures raise.
        """
        lookup = StatusLookup(vehicle_id=vehicle_id)
        key = status_cache_key(vehicle_id)

        try:
            raw = self.cache.get(key)
        except CacheError as e:
            logger.warning(f"Cache read failed for vehicle {vehicle_id}, using store: {e}")
            lookup.soft_failures.append(SoftFailure(SoftFailureStage.CACHE_READ, e))
            raw = None

        if raw is not None:
            try:
                lookup.status = VehicleStatus.from_bytes(raw)
                lookup.from_cache = True
                return lookup
            except (ValidationError, UnicodeDecodeError) as e:
                logger.warning(f"Discarding malformed cache entry {key}")
                lookup.soft_failures.append(SoftFailure(SoftFailureStage.CACHE_DECODE, e))

        try:
            status = self.store.get_status(vehicle_id)
        except VehicleNotFoundError:
            return lookup

        self._refresh_cache(vehicle_id, status, lookup.soft_failures)
        lookup.status = status
        return lookup

    def get_trips_since(self, vehicle_id: str, since: datetime) -> List[TripRecord]:
        """Trips of a vehicle starting at or after ``since``, newest first.

        Raises NoTripsFoundError when there are none.
        """
        return self.store.get_trips_since(parse_vehicle_uuid(vehicle_id), since)

    def get_trips_last_24h(self, vehicle_id: str) -> List[TripRecord]:
        return self.get_trips_since(vehicle_id, self._clock() - TRIP_QUERY_WINDOW)

    def _refresh_cache(self, vehicle_id: str, status: VehicleStatus, soft_failures: List[SoftFailure]) -> None:
        try:
            self.cache.set(status_cache_key(vehicle_id), status.to_bytes(), STATUS_CACHE_TTL)
        except CacheError as e:
            logger.warning(f"Cache write failed for vehicle {vehicle_id}: {e}")
            soft_failures.append(SoftFailure(SoftFailureStage.CACHE_WRITE, e))
