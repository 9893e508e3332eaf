"""
SQLAlchemy-backed persistent store for vehicle status and derived trips.

Every call opens its own short-lived session from the shared engine pool, so a
single store instance can be used concurrently by request handlers and the
telemetry simulator.
"""

from datetime import datetime, timezone
from typing import Callable, List
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fleet_tracker.db.base_model import utcnow
from fleet_tracker.db.session import SessionLocal
from fleet_tracker.exceptions import NoTripsFoundError, StoreError, VehicleNotFoundError
from fleet_tracker.models import Trip, Vehicle
from fleet_tracker.schemas.telemetry import VehicleStatus
from fleet_tracker.schemas.trip import TripRecord


_UPSERT_DIALECTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values; everything is written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_record(row: Trip) -> TripRecord:
    return TripRecord(
        id=row.id,
        vehicle_id=row.vehicle_id,
        start_time=_as_utc(row.start_time),
        end_time=_as_utc(row.end_time),
        mileage=row.mileage,
        avg_speed=row.avg_speed,
    )


class TelemetryStore:
    """Latest-status table plus append-only trip log."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    def upsert_status(self, vehicle_id: str, plate_number: str, status: VehicleStatus) -> None:
        """Insert the vehicle row or replace its last status."""
        document = status.to_document()
        now = utcnow()
        try:
            with self._session_factory() as session:
                insert = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
                if insert is not None:
                    stmt = insert(Vehicle).values(
                        id=vehicle_id,
                        plate_number=plate_number,
                        last_status=document,
                        created_at=now,
                        updated_at=now,
                    )
                    stmt = stmt.on_conflict_do_update(
                        index_elements=["id"],
                        set_={
                            "last_status": stmt.excluded.last_status,
                            "updated_at": stmt.excluded.updated_at,
                        },
                    )
                    session.execute(stmt)
                else:
                    vehicle = session.get(Vehicle, vehicle_id)
                    if vehicle is None:
                        session.add(Vehicle(id=vehicle_id, plate_number=plate_number, last_status=document))
                    else:
                        vehicle.last_status = document
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"failed to upsert status for vehicle {vehicle_id}: {e}") from e

    def get_status(self, vehicle_id: str) -> VehicleStatus:
        """Return the stored status, raising VehicleNotFoundError when absent."""
        try:
            with self._session_factory() as session:
                vehicle = session.get(Vehicle, vehicle_id)
                document = None if vehicle is None else vehicle.last_status
        except SQLAlchemyError as e:
            raise StoreError(f"failed to read status for vehicle {vehicle_id}: {e}") from e

        if document is None:
            raise VehicleNotFoundError(vehicle_id)
        try:
            return VehicleStatus.model_validate(document)
        except ValidationError as e:
            raise StoreError(f"stored status for vehicle {vehicle_id} is malformed: {e}") from e

    def insert_trip(self, trip: TripRecord) -> None:
        try:
            with self._session_factory() as session:
                session.add(
                    Trip(
                        id=trip.id,
                        vehicle_id=trip.vehicle_id,
                        start_time=_as_utc(trip.start_time),
                        end_time=_as_utc(trip.end_time),
                        mileage=trip.mileage,
                        avg_speed=trip.avg_speed,
                    )
                )
                session.commit()
        except (SQLAlchemyError, OverflowError, ValueError) as e:
            raise StoreError(f"failed to insert trip {trip.id}: {e}") from e

    def get_trips_since(self, vehicle_id: UUID, since: datetime) -> List[TripRecord]:
        """Trips starting at or after ``since``, newest first.

        Raises NoTripsFoundError when nothing matches.
        """
        query = (
            select(Trip)
            .where(Trip.vehicle_id == vehicle_id, Trip.start_time >= _as_utc(since))
            .order_by(Trip.start_time.desc())
        )
        try:
            with self._session_factory() as session:
                trips = [_to_record(row) for row in session.scalars(query)]
        except SQLAlchemyError as e:
            raise StoreError(f"failed to query trips for vehicle {vehicle_id}: {e}") from e

        if not trips:
            raise NoTripsFoundError(str(vehicle_id))
        return trips

    def list_vehicle_ids(self) -> List[str]:
        try:
            with self._session_factory() as session:
                return list(session.scalars(select(Vehicle.id)))
        except SQLAlchemyError as e:
            raise StoreError(f"failed to list vehicle ids: {e}") from e

    def ping(self) -> None:
        try:
            with self._session_factory() as session:
                session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e
