from functools import lru_cache

from fleet_tracker.cache.client import redis_client
from fleet_tracker.cache.status_cache import RedisCache
from fleet_tracker.db.session import SessionLocal
from fleet_tracker.db.telemetry_store import TelemetryStore
from fleet_tracker.services.telemetry_service import TelemetryService

@lru_cache(maxsize=None)
def get_telemetry_service() -> TelemetryService:
    """
    Dependency returning the process-wide telemetry service.
    Request handlers and the simulator share the same store and cache clients.
    """
    return TelemetryService(TelemetryStore(SessionLocal), RedisCache(redis_client))
