"""Access-token storage on top of the Django cache framework.

Production uses the Redis cache configured in settings; any cache
backend works.  Backend errors are surfaced as ``TokenCacheUnavailable``
so the gateway never confuses an unreachable cache with a cache miss.
"""

from __future__ import annotations

from typing import Optional

import structlog
from django.core.cache import caches
from redis.exceptions import RedisError

from modules.payments.exceptions import TokenCacheUnavailable

logger = structlog.get_logger(__name__)

CACHE_ERRORS = (RedisError, OSError)


class TokenCache:
    def __init__(self, alias: str = "default") -> None:
        self._alias = alias

    @property
    def _cache(self):
        return caches[self._alias]

    def get(self, key: str) -> Optional[str]:
        try:
            return self._cache.get(key)
        except CACHE_ERRORS as exc:
            logger.error("payment.token_cache_read_failed", key=key, error=str(exc))
            raise TokenCacheUnavailable(str(exc)) from exc

    def set(self, key: str, value: str, ttl: int) -> None:
        try:
            self._cache.set(key, value, timeout=ttl)
        except CACHE_ERRORS as exc:
            logger.error("payment.token_cache_write_failed", key=key, error=str(exc))
            raise TokenCacheUnavailable(str(exc)) from exc
