from __future__ import annotations

import threading
from collections import Counter
from datetime import datetime, timezone
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fleet_tracker.db.init_db import init_db
from fleet_tracker.db.telemetry_store import TelemetryStore
from fleet_tracker.exceptions import CacheError, NoTripsFoundError, StoreError, VehicleNotFoundError
from fleet_tracker.schemas.telemetry import VehicleStatus
from fleet_tracker.schemas.trip import TripRecord
from fleet_tracker.services.telemetry_service import TelemetryService

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)
VEHICLE_A = "3f1c2a9e-8d4b-4a71-9d0e-2b6f5c7a1e90"
VEHICLE_B = "b7d41f02-6c1e-4e5a-8f3b-91a0d2c4e6f8"


class FakeStore:
    """In-memory store double with call counters and failure switches."""

    def __init__(self) -> None:
        self.vehicles: dict[str, dict[str, Any]] = {}
        self.trips: list[TripRecord] = []
        self.calls: Counter[str] = Counter()
        self.upserted_ids: list[str] = []
        self.fail_upsert = False
        self.fail_get_status = False
        self.fail_insert_trip = False
        self.fail_list = False
        self._lock = threading.Lock()

    def upsert_status(self, vehicle_id: str, plate_number: str, status: VehicleStatus) -> None:
        with self._lock:
            self.calls["upsert_status"] += 1
            if self.fail_upsert:
                raise StoreError("database unavailable")
            self.upserted_ids.append(vehicle_id)
            row = self.vehicles.setdefault(vehicle_id, {"plate_number": plate_number})
            row["last_status"] = status.to_document()

    def get_status(self, vehicle_id: str) -> VehicleStatus:
        self.calls["get_status"] += 1
        if self.fail_get_status:
            raise StoreError("database unavailable")
        if vehicle_id not in self.vehicles:
            raise VehicleNotFoundError(vehicle_id)
        return VehicleStatus.model_validate(self.vehicles[vehicle_id]["last_status"])

    def insert_trip(self, trip: TripRecord) -> None:
        with self._lock:
            self.calls["insert_trip"] += 1
            if self.fail_insert_trip:
                raise StoreError("trips table locked")
            self.trips.append(trip)

    def get_trips_since(self, vehicle_id, since: datetime) -> list[TripRecord]:
        self.calls["get_trips_since"] += 1
        trips = [t for t in self.trips if t.vehicle_id == vehicle_id and t.start_time >= since]
        if not trips:
            raise NoTripsFoundError(str(vehicle_id))
        return sorted(trips, key=lambda t: t.start_time, reverse=True)

    def list_vehicle_ids(self) -> list[str]:
        self.calls["list_vehicle_ids"] += 1
        if self.fail_list:
            raise StoreError("database unavailable")
        return list(self.vehicles)

    def ping(self) -> None:
        if self.fail_get_status:
            raise StoreError("database unavailable")

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


class FakeCache:
    """In-memory cache double recording the TTL of every write."""

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.ttls: dict[str, Any] = {}
        self.calls: Counter[str] = Counter()
        self.fail_get = False
        self.fail_set = False

    def set(self, key: str, value: bytes, ttl) -> None:
        self.calls["set"] += 1
        if self.fail_set:
            raise CacheError("connection refused")
        self.data[key] = value
        self.ttls[key] = ttl

    def get(self, key: str) -> bytes | None:
        self.calls["get"] += 1
        if self.fail_get:
            raise CacheError("connection refused")
        return self.data.get(key)

    def ping(self) -> None:
        if self.fail_get:
            raise CacheError("connection refused")

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def service(store: FakeStore, cache: FakeCache) -> TelemetryService:
    return TelemetryService(store, cache, clock=lambda: NOW)  # type: ignore[arg-type]


@pytest.fixture
def sql_store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield TelemetryStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    engine.dispose()
