"""
Tests for the user cache manager in OrgAdmin Server
"""

import json
from unittest.mock import MagicMock

from redis.exceptions import RedisError

from managers.cache_manager import UserCacheManager, KEY_PREFIX
from managers.config_manager import ConfigManager
from models.infrastructure import CurrentUser


def MakeUser(user_id="u1"):
    return CurrentUser(user_id=user_id, login_id="alice", org_id="root",
                       authorities=["sys_user_view"], data_scopes=["self"])


def test_put_writes_both_caches(redis_client):
    cache = UserCacheManager(redis_client=redis_client, local_ttl_seconds=60)

    cache.PutCurrentUser(MakeUser())

    assert cache.GetCurrentUser("u1") == MakeUser()
    key, ttl, payload = redis_client.setex.call_args[0]
    assert key == KEY_PREFIX + "u1"
    assert ttl == 60
    assert json.loads(payload)["login_id"] == "alice"
    # Served from the local cache, Redis is not consulted
    redis_client.get.assert_not_called()


def test_get_falls_back_to_remote(redis_client):
    redis_client.get.return_value = json.dumps(MakeUser().ToDict())
    cache = UserCacheManager(redis_client=redis_client)

    assert cache.GetCurrentUser("u1") == MakeUser()
    assert "u1" in cache.local_cache


def test_get_miss(redis_client):
    cache = UserCacheManager(redis_client=redis_client)

    assert cache.GetCurrentUser("nobody") is None


def test_clear_all_clears_both(redis_client):
    redis_client.scan_iter.side_effect = lambda **kwargs: iter([KEY_PREFIX + "u1", KEY_PREFIX + "u2"])
    cache = UserCacheManager(redis_client=redis_client)
    cache.PutCurrentUser(MakeUser("u1"))

    cache.ClearAll()

    assert len(cache.local_cache) == 0
    redis_client.scan_iter.assert_called_with(match=KEY_PREFIX + "*")
    redis_client.delete.assert_called_once_with(KEY_PREFIX + "u1", KEY_PREFIX + "u2")


def test_remote_failures_do_not_propagate(redis_client):
    redis_client.scan_iter.side_effect = RedisError("connection refused")
    redis_client.get.side_effect = RedisError("connection refused")
    redis_client.setex.side_effect = RedisError("connection refused")
    cache = UserCacheManager(redis_client=redis_client)

    cache.PutCurrentUser(MakeUser())
    cache.ClearAll()

    # Local cache was still cleared, and a remote miss is just a miss
    assert len(cache.local_cache) == 0
    assert cache.GetCurrentUser("u1") is None


def test_local_only_when_redis_disabled(tmp_path):
    config_manager = ConfigManager(tmp_path / "config.json")
    config_manager.load_config()
    cache = UserCacheManager.FromConfig(config_manager)

    assert cache.redis_client is None
    cache.PutCurrentUser(MakeUser())
    assert cache.GetCurrentUser("u1") is not None
    cache.ClearAll()
    assert cache.GetCurrentUser("u1") is None


def test_from_config_builds_redis_client(tmp_path, monkeypatch):
    from_url = MagicMock()
    monkeypatch.setattr("managers.cache_manager.Redis.from_url", from_url)
    config_manager = ConfigManager(tmp_path / "config.json")
    config_manager.load_config()
    config_manager.config["redis_url"] = "redis://cache:6379/0"

    cache = UserCacheManager.FromConfig(config_manager)

    from_url.assert_called_once_with("redis://cache:6379/0", decode_responses=True)
    assert cache.redis_client is from_url.return_value
