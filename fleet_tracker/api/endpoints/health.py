from fastapi import APIRouter, Depends

from fleet_tracker.api.deps import get_telemetry_service
from fleet_tracker.exceptions import CacheError, StoreError
from fleet_tracker.services.telemetry_service import TelemetryService

router = APIRouter()

@router.get("/")
def health_check(service: TelemetryService = Depends(get_telemetry_service)):
    """
    Health check endpoint that verifies API, database and cache status.

    The cache is advisory, so a cache outage only marks the service degraded.

    Returns:
        dict: Health status of the API, database and cache
    """
    health_status = {
        "status": "healthy",
        "api": "online",
        "database": "online",
        "cache": "online",
    }

    try:
        service.store.ping()
    except StoreError as e:
        health_status["database"] = "offline"
        health_status["status"] = "unhealthy"
        health_status["database_error"] = str(e)

    try:
        service.cache.ping()
    except CacheError as e:
        health_status["cache"] = "offline"
        if health_status["status"] == "healthy":
            health_status["status"] = "degraded"
        health_status["cache_error"] = str(e)

    return health_status
