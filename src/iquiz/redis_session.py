from functools import lru_cache

import redis

from .config import settings


@lru_cache(maxsize=None)
def get_redis() -> redis.Redis:
    """Shared client for quiz sessions and stored preferences."""
    return redis.from_url(settings.REDIS_URL, decode_responses=True)
