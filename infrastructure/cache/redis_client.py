"""
Redis cache client

Reads and writes go through Django's cache framework (django-redis in
deployed settings). A cache outage degrades to recomputing the value.
"""
import logging
from typing import Any, Callable, Optional

from django.core.cache import cache

logger = logging.getLogger(__name__)

KEY_PREFIX = 'estatehub'
DEFAULT_TIMEOUT = 300


class RedisClient:
    """
    Wrapper for cache operations
    """

    @staticmethod
    def make_key(*parts) -> str:
        return ':'.join([KEY_PREFIX, *(str(part) for part in parts)])

    @staticmethod
    def get(key: str) -> Optional[Any]:
        try:
            return cache.get(key)
        except Exception as e:
            logger.error(f"Error getting {key} from cache: {e}")
            return None

    @staticmethod
    def delete(key: str) -> bool:
        try:
            cache.delete(key)
            return True
        except Exception as e:
            logger.error(f"Error deleting {key} from cache: {e}")
            return False

    @staticmethod
    def get_or_set(key: str, default_func: Callable[[], Any], timeout: int = DEFAULT_TIMEOUT) -> Any:
        """
        Return the cached value for `key`, computing and storing it on a miss.

        Args:
            key: Cache key
            default_func: Computes the value on a miss
            timeout: Timeout in seconds
        """
        try:
            value = cache.get(key)
        except Exception as e:
            logger.error(f"Error reading {key} from cache: {e}")
            return default_func()

        if value is None:
            value = default_func()
            try:
                cache.set(key, value, timeout)
            except Exception as e:
                logger.error(f"Error writing {key} to cache: {e}")
        return value


# Singleton instance
redis_client = RedisClient()
