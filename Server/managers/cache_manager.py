"""
OrgAdmin Server - User Cache Manager

Caches the authorization lookup for authenticated users in two places:
a shared Redis cache and a process-local TTL cache.
User mutations clear both; clearing is best-effort and happens after the
write has committed, so a short window of stale reads is possible.
"""

import json
import logging
import threading
from typing import Optional

from cachetools import TTLCache
from redis import Redis
from redis.exceptions import RedisError

from models.infrastructure import CurrentUser

logger = logging.getLogger(__name__)


KEY_PREFIX = "orgadmin:user:"


class UserCacheManager:
    """
    Read-through cache for CurrentUser lookups plus invalidation hooks
    """

    def __init__(self, redis_client: Optional[Redis] = None, local_max_size: int = 1024, local_ttl_seconds: int = 300):
        """
        Initialize cache manager

        Args:
            redis_client: Redis client for the shared cache, None to disable it
            local_max_size: Max entries held in the process-local cache
            local_ttl_seconds: Entry lifetime in both caches
        """
        self.redis_client = redis_client
        self.ttl_seconds = local_ttl_seconds
        self.local_cache = TTLCache(maxsize=local_max_size, ttl=local_ttl_seconds)
        # TTLCache is not thread-safe and handlers run in a threadpool
        self._lock = threading.Lock()

    @classmethod
    def FromConfig(cls, config_manager) -> "UserCacheManager":
        """
        Build a cache manager from server configuration

        Args:
            config_manager: Loaded ConfigManager

        Returns:
            UserCacheManager
        """
        redis_url = config_manager.get("redis_url")
        redis_client = Redis.from_url(redis_url, decode_responses=True) if redis_url else None
        if redis_client is None:
            logger.info("No redis_url configured, shared user cache disabled")

        return cls(
            redis_client=redis_client,
            local_max_size=int(config_manager.get("local_cache_max_size")),
            local_ttl_seconds=int(config_manager.get("local_cache_ttl_seconds"))
        )

    def GetCurrentUser(self, user_id: str) -> Optional[CurrentUser]:
        """
        Look up a cached principal, local cache first

        Args:
            user_id: User ID

        Returns:
            CurrentUser if cached, None otherwise
        """
        with self._lock:
            cached = self.local_cache.get(user_id)
        if cached is not None:
            return cached

        if self.redis_client is None:
            return None

        try:
            raw = self.redis_client.get(KEY_PREFIX + user_id)
        except RedisError as e:
            logger.warning(f"Redis GET failed for user {user_id}: {e}")
            return None

        if not raw:
            return None

        current_user = CurrentUser.FromDict(json.loads(raw))
        with self._lock:
            self.local_cache[user_id] = current_user
        return current_user

    def PutCurrentUser(self, current_user: CurrentUser):
        """
        Store a principal in both caches

        Args:
            current_user: Principal to cache
        """
        with self._lock:
            self.local_cache[current_user.user_id] = current_user

        if self.redis_client is None:
            return

        try:
            self.redis_client.setex(
                KEY_PREFIX + current_user.user_id,
                self.ttl_seconds,
                json.dumps(current_user.ToDict())
            )
        except RedisError as e:
            logger.warning(f"Redis SETEX failed for user {current_user.user_id}: {e}")

    def ClearUserRemoteCache(self):
        """Delete every cached user entry from Redis"""
        if self.redis_client is None:
            return

        try:
            keys = list(self.redis_client.scan_iter(match=KEY_PREFIX + "*"))
            if keys:
                self.redis_client.delete(*keys)
            logger.debug(f"Cleared {len(keys)} remote user cache entries")
        except RedisError as e:
            logger.warning(f"Failed to clear remote user cache: {e}")

    def ClearUserLocalCache(self):
        """Drop every entry from the process-local cache"""
        with self._lock:
            self.local_cache.clear()
        logger.debug("Cleared local user cache")

    def ClearAll(self):
        """Clear both caches after a user mutation"""
        self.ClearUserRemoteCache()
        self.ClearUserLocalCache()
