"""Redis-backed volatile key/value cache with per-key expiration."""

from datetime import timedelta
from typing import Optional, Union

import redis

from fleet_tracker.cache.client import redis_client
from fleet_tracker.exceptions import CacheError



class RedisCache:
    """Thin bytes-in, bytes-out wrapper around a redis client.

    Serialization is left to the caller. Every backend failure surfaces as
    CacheError.
    """

    def __init__(self, client: Optional[redis.Redis] = None) -> None:
        self._client = client if client is not None else redis_client

    def set(self, key: str, value: bytes, ttl: Union[timedelta, int]) -> None:
        try:
            self._client.set(key, value, ex=ttl)
        except redis.RedisError as e:
            raise CacheError(f"cache set failed for {key}: {e}") from e

    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes, or None on a miss."""
        try:
            value = self._client.get(key)
        except redis.RedisError as e:
            raise CacheError(f"cache get failed for {key}: {e}") from e
        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    def ping(self) -> None:
        try:
            self._client.ping()
        except redis.RedisError as e:
            raise CacheError(str(e)) from e
