"""
cache/redis_client.py

Redis-backed per-user budget for user-triggered plan generation.

  key:   rate_limit:{user_id}
  value: integer counter (incremented per generation request)
  TTL:   1 hour, set on the first call of a window

Use: stop a single user from burning unlimited provider credits by
hammering the custom-generation endpoint. The scheduler does not count
against the budget.

All methods fail open — if Redis is unavailable, requests are allowed
(degraded but functional).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import redis

import config

logger = logging.getLogger(__name__)

RATE_LIMIT_TTL_SECONDS = 60 * 60       # 1 hour


class RedisClient:
    """
    Thin wrapper around redis.Redis.
    Never raises on Redis errors.
    """

    def __init__(
        self,
        url: str = config.REDIS_URL,
        max_calls: int = config.RATE_LIMIT_MAX_CALLS,
        client: Optional[Any] = None,
    ) -> None:
        self.max_calls = max_calls
        self._client: Optional[Any] = client
        if self._client is None:
            try:
                self._client = redis.from_url(url, decode_responses=True)
                self._client.ping()
                logger.info("✅ Redis connected: %s", url)
            except redis.RedisError as e:
                logger.warning("⚠️ Redis unavailable (%s). Rate limiting disabled.", e)
                self._client = None

    @property
    def available(self) -> bool:
        return self._client is not None

    @staticmethod
    def _key(user_id: str) -> str:
        return f"rate_limit:{user_id}"

    def check_rate_limit(self, user_id: str) -> tuple[bool, int]:
        """
        Returns (is_allowed, current_count).
        Increments the counter on each call.
        """
        if not self.available:
            return True, 0   # allow if Redis is down

        try:
            key   = self._key(user_id)
            count = self._client.incr(key)
            if count == 1:
                self._client.expire(key, RATE_LIMIT_TTL_SECONDS)

            allowed = count <= self.max_calls
            if not allowed:
                logger.warning("Rate limit exceeded for user %s (%d calls)", user_id, count)
            return allowed, count
        except redis.RedisError as e:
            logger.warning("Redis check_rate_limit failed: %s", e)
            return True, 0   # allow on error

