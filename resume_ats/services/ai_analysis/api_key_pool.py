"""
API key pool with rotation and per-key health tracking.

The rotation cursor is shared by every in-flight request and is only
mutated under the pool lock. Reading the current key is lock-free; a
stale read costs at most one extra retry.
"""
import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Collection, List, Optional, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class KeyStats(BaseModel):
    """Usage counters for one credential"""
    key_index: int
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    last_used: Optional[datetime] = None
    last_error: Optional[str] = None
    is_healthy: bool = True
    failure_rate: float = Field(default=0.0, ge=0, le=1)


class APIKeyPool:
    """
    Ordered pool of provider credentials.

    A key becomes unhealthy once its failure rate exceeds
    UNHEALTHY_FAILURE_RATE after more than MIN_REQUESTS_FOR_HEALTH
    requests; rotation prefers healthy keys but falls back to unhealthy
    ones rather than giving up.
    """

    UNHEALTHY_FAILURE_RATE = 0.5
    MIN_REQUESTS_FOR_HEALTH = 5

    def __init__(self, api_keys: List[str]):
        """
        Args:
            api_keys: Credentials in rotation order

        Raises:
            ValueError: If no usable key is given
        """
        keys = [key.strip() for key in api_keys if key and key.strip()]
        if not keys:
            raise ValueError("At least one API key is required")

        self._keys = keys
        self._cursor = 0
        self._stats = [KeyStats(key_index=index) for index in range(len(keys))]
        self._lock = Lock()
        logger.info(f"APIKeyPool initialized with {len(keys)} key(s)")

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def current_index(self) -> int:
        return self._cursor

    def current(self) -> Tuple[int, str]:
        """Current (index, key). Lock-free read."""
        index = self._cursor
        return index, self._keys[index]

    def rotate(self, from_index: int, tried: Collection[int] = ()) -> Optional[int]:
        """
        Advance the cursor past ``from_index``.

        If another request already moved the cursor to a key this caller
        has not tried, that position is kept instead of advancing twice.

        Args:
            from_index: Index of the key that just failed
            tried: Indices already used in the caller's request cycle

        Returns:
            New cursor index, or None if every key has been tried
        """
        size = len(self._keys)
        with self._lock:
            if self._cursor != from_index and self._cursor not in tried:
                return self._cursor

            untried = [
                (from_index + step) % size
                for step in range(1, size)
                if (from_index + step) % size not in tried
            ]
            if not untried:
                return None

            healthy = [index for index in untried if self._stats[index].is_healthy]
            self._cursor = (healthy or untried)[0]
            if not healthy:
                logger.warning(f"All untried keys unhealthy, using key {self._cursor + 1}/{size} anyway")
            logger.info(f"Rotated API key {from_index + 1} -> {self._cursor + 1}/{size}")
            return self._cursor

    def record_success(self, index: int):
        with self._lock:
            stats = self._stats[index]
            stats.total_requests += 1
            stats.successful_requests += 1
            stats.last_used = datetime.now(timezone.utc)
            stats.is_healthy = True
            stats.failure_rate = stats.failed_requests / stats.total_requests

    def record_failure(self, index: int, error: str):
        with self._lock:
            stats = self._stats[index]
            stats.total_requests += 1
            stats.failed_requests += 1
            stats.last_used = datetime.now(timezone.utc)
            stats.last_error = error[:200]
            stats.failure_rate = stats.failed_requests / stats.total_requests
            if (
                stats.failure_rate > self.UNHEALTHY_FAILURE_RATE
                and stats.total_requests > self.MIN_REQUESTS_FOR_HEALTH
            ):
                if stats.is_healthy:
                    logger.warning(f"API key {index + 1}/{len(self._keys)} marked unhealthy")
                stats.is_healthy = False

    def usage_stats(self) -> List[dict]:
        """Per-key counters with a formatted success rate. Keys themselves are never included."""
        with self._lock:
            snapshot = [stats.model_dump(mode="json") for stats in self._stats]
        for entry in snapshot:
            total = entry['total_requests']
            entry['success_rate'] = (
                f"{entry['successful_requests'] / total * 100:.2f}%" if total else 'N/A'
            )
        return snapshot

    def reset_stats(self):
        with self._lock:
            self._stats = [KeyStats(key_index=index) for index in range(len(self._keys))]
        logger.info("Key statistics reset")
