from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
import redis

from fleet_tracker.cache.status_cache import RedisCache
from fleet_tracker.exceptions import CacheError


@pytest.fixture
def client() -> MagicMock:
    return MagicMock(spec=redis.Redis)


def test_set_passes_ttl(client) -> None:
    cache = RedisCache(client)

    cache.set("vehicle:abc:status", b"{}", timedelta(minutes=5))

    client.set.assert_called_once_with("vehicle:abc:status", b"{}", ex=timedelta(minutes=5))


def test_get_hit_and_miss(client) -> None:
    cache = RedisCache(client)
    client.get.side_effect = [b'{"speed": 1}', None, '{"speed": 2}']

    assert cache.get("k") == b'{"speed": 1}'
    assert cache.get("k") is None
    assert cache.get("k") == b'{"speed": 2}'


@pytest.mark.parametrize("method, args", [("get", ("k",)), ("set", ("k", b"v", 300)), ("ping", ())])
def test_backend_errors_become_cache_errors(client, method, args) -> None:
    getattr(client, method).side_effect = redis.ConnectionError("connection refused")
    cache = RedisCache(client)

    with pytest.raises(CacheError):
        getattr(cache, method)(*args)
