import redis

from fleet_tracker.core.config import settings

# Process-wide client; redis-py keeps its own connection pool
redis_client = redis.Redis.from_url(
    settings.REDIS_URL,
    socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
    socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
)
