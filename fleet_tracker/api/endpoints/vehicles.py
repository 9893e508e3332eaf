from typing import Any, Dict, List

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from fleet_tracker.api.deps import get_telemetry_service
from fleet_tracker.core.security import get_current_user, TokenData
from fleet_tracker.exceptions import (
    InvalidPayloadError,
    NoTripsFoundError,
    StoreError,
)
from fleet_tracker.schemas.telemetry import IngestPayload, IngestResponse
from fleet_tracker.schemas.trip import TripRecord
from fleet_tracker.services.telemetry_service import TelemetryService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/ingest", response_model=IngestResponse)
def ingest(
    payload: IngestPayload,
    current_user: TokenData = Depends(get_current_user),
    service: TelemetryService = Depends(get_telemetry_service)
) -> IngestResponse:
    """
    Record a telemetry update for a vehicle.

    The status is stored first; trip derivation and cache refresh are
    best-effort and reported in ``degraded`` when they fail.
    """
    try:
        result = service.ingest(payload)
    except InvalidPayloadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        logger.error(f"Ingest failed for vehicle {payload.vehicle_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return IngestResponse(ok=True, trip_recorded=result.trip_recorded, degraded=result.stages())

@router.get("/status")
def get_status(
    response: Response,
    vehicle_id: str = Query(..., min_length=1),
    current_user: TokenData = Depends(get_current_user),
    service: TelemetryService = Depends(get_telemetry_service)
) -> Dict[str, Any]:
    """
    Get the latest known status of a vehicle.
    """
    try:
        lookup = service.get_status(vehicle_id)
    except StoreError as e:
        logger.error(f"Status lookup failed for vehicle {vehicle_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    if not lookup.found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Vehicle {vehicle_id} not found"
        )

    response.headers["X-Cache"] = "HIT" if lookup.from_cache else "MISS"
    return lookup.status.to_document()

@router.get("/trips", response_model=List[TripRecord])
def get_trips(
    vehicle_id: str = Query(..., min_length=1),
    current_user: TokenData = Depends(get_current_user),
    service: TelemetryService = Depends(get_telemetry_service)
) -> List[TripRecord]:
    """
    Get the trips of a vehicle that started in the last 24 hours, newest first.
    """
    try:
        return service.get_trips_last_24h(vehicle_id)
    except InvalidPayloadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NoTripsFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        logger.error(f"Trip query failed for vehicle {vehicle_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
