"""Redis client wrapper for the durable cache tier."""

import json
import logging
from typing import Any, Optional

import redis

from resume_ats.exceptions import CacheError

logger = logging.getLogger(__name__)


class RedisClient:
    """Redis client wrapper storing JSON values.

    Connection and serialization failures are raised as ``CacheError`` so
    the caller decides whether a failure is a miss or fatal.
    """

    def __init__(self, redis_connection: redis.Redis, namespace: str = "resume_ats"):
        """Initialize Redis client.

        Args:
            redis_connection: Redis connection instance (decode_responses=True)
            namespace: Prefix applied to every key
        """
        self.client = redis_connection
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    def get(self, key: str) -> Optional[Any]:
        """Get value from Redis.

        Args:
            key: Cache key

        Returns:
            Decoded value or None when the key is absent

        Raises:
            CacheError: Redis unreachable or stored value is not valid JSON
        """
        try:
            value = self.client.get(self._key(key))
        except redis.RedisError as e:
            raise CacheError(f"Redis get failed: {e}") from e
        if value is None:
            return None
        try:
            return json.loads(value)
        except (TypeError, ValueError) as e:
            raise CacheError(f"Corrupt cache value for {key}: {e}") from e

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in Redis.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds

        Returns:
            True if successful

        Raises:
            CacheError: Redis unreachable or value not serializable
        """
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheError(f"Value for {key} is not serializable: {e}") from e
        try:
            self.client.set(self._key(key), payload, ex=ttl)
        except redis.RedisError as e:
            raise CacheError(f"Redis set failed: {e}") from e
        return True

    def delete(self, key: str) -> bool:
        """Delete key from Redis.

        Returns:
            True if a key was removed
        """
        try:
            return self.client.delete(self._key(key)) > 0
        except redis.RedisError as e:
            raise CacheError(f"Redis delete failed: {e}") from e

    def ping(self) -> bool:
        """Check connectivity; never raises."""
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
