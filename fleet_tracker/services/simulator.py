"""
Background telemetry simulator.

Generates synthetic status updates for every known vehicle and pushes them
through the regular ingestion path while the service is live, so real traffic
always overlaps with a steady stream of concurrent writes.
"""

import enum
import logging
import random
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fleet_tracker.exceptions import FleetTrackerError, SimulatorStateError, StoreError
from fleet_tracker.schemas.telemetry import IngestPayload
from fleet_tracker.services.telemetry_service import TelemetryService

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 2.0
BASE_LOCATION = (55.296249, 25.276987)
LOCATION_JITTER = 0.001
SPEED_RANGE = (40.0, 70.0)


class SimulatorState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class TelemetrySimulator:
    """Task handle for the simulator thread.

    ``start`` may be called once. ``stop`` raises the cancellation signal; the
    loop notices it before the next vehicle, or at the latest when the current
    inter-sweep wait is interrupted. ``join`` waits for the thread to finish.
    """

    def __init__(
        self,
        service: TelemetryService,
        interval: float = SWEEP_INTERVAL_SECONDS,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.service = service
        self.interval = interval
        self._rng = rng or random.Random()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state = SimulatorState.IDLE
        self._state_lock = threading.Lock()
        self.vehicle_ids: List[str] = []
        self.sweeps = 0

    @property
    def state(self) -> SimulatorState:
        return self._state

    def start(self) -> None:
        with self._state_lock:
            if self._state is not SimulatorState.IDLE:
                raise SimulatorStateError(f"simulator cannot start from state {self._state.value}")
            self._state = SimulatorState.RUNNING
        self._thread = threading.Thread(target=self._run, name="telemetry-simulator", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        with self._state_lock:
            if self._state is SimulatorState.IDLE:
                self._state = SimulatorState.STOPPED

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the loop to exit; returns True once it has."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def synthesize_status(self) -> Dict[str, Any]:
        lat, lon = BASE_LOCATION
        return {
            "location": [
                lat + self._rng.uniform(-LOCATION_JITTER, LOCATION_JITTER),
                lon + self._rng.uniform(-LOCATION_JITTER, LOCATION_JITTER),
            ],
            "speed": self._rng.uniform(*SPEED_RANGE),
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        }

    def _run(self) -> None:
        try:
            self._loop()
        finally:
            with self._state_lock:
                self._state = SimulatorState.STOPPED
            logger.info("Telemetry simulator stopped")

    def _loop(self) -> None:
        try:
            self.vehicle_ids = self.service.store.list_vehicle_ids()
        except StoreError as e:
            logger.error(f"Error fetching vehicle IDs, simulator not started: {e}")
            return

        logger.info(f"Telemetry simulator running for {len(self.vehicle_ids)} vehicles")
        while not self._stop_event.is_set():
            self._sweep()
            self.sweeps += 1
            if self._stop_event.wait(self.interval):
                break

    def _sweep(self) -> None:
        for vehicle_id in self.vehicle_ids:
            if self._stop_event.is_set():
                return
            status = self.synthesize_status()
            try:
                self.service.ingest(IngestPayload(vehicle_id=vehicle_id, status=status))
            except FleetTrackerError as e:
                logger.warning(f"Simulated ingest failed for vehicle {vehicle_id}: {e}")
                continue
            except Exception as e:
                logger.error(f"Unexpected error simulating vehicle {vehicle_id}: {e}")
                continue
            logger.debug(f"Simulated data for vehicle {vehicle_id}: {status}")
