"""
Two-Tier Result Cache

Tier 1 is an in-process map with a short TTL and FIFO eviction by
insertion order. Tier 2 is Redis with a longer TTL; it is consulted on a
tier-1 miss and re-warms tier 1. Redis being unavailable degrades the
cache to memory only; it is never an error for callers.
"""
import copy
import hashlib
import json
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from threading import Lock
from typing import Any, Callable, Dict, Optional, Set

from resume_ats.exceptions import CacheError
from resume_ats.utils.redis_client import RedisClient

logger = logging.getLogger(__name__)


# Near-duplicate long resumes intentionally share a key
RESUME_KEY_CHARS = 500
JOB_KEY_CHARS = 200

PURGE_INTERVAL = 100


class CacheEntry:
    """A cached value with the time it was produced and its lifetime."""

    __slots__ = ('value', 'stored_at', 'ttl', 'expires_at')

    def __init__(self, value: Any, stored_at: float, ttl: float, expires_at: float):
        self.value = value
        self.stored_at = stored_at
        self.ttl = ttl
        self.expires_at = expires_at

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TwoTierCache:
    """
    Memoization cache keyed by content hash.

    Thread-safe: tier-1 state and counters are guarded by one lock; Redis
    calls happen outside it.
    """

    def __init__(
        self,
        redis_client: Optional[RedisClient] = None,
        memory_ttl: int = 300,
        redis_ttl: int = 3600,
        max_entries: int = 1000,
        refresh_threshold: float = 0.8,
        clock: Callable[[], float] = time.time,
        refresh_workers: int = 2,
    ):
        """
        Args:
            redis_client: Durable tier; None runs memory-only
            memory_ttl: Tier-1 TTL in seconds
            redis_ttl: Tier-2 TTL in seconds (default TTL of a value)
            max_entries: Tier-1 capacity
            refresh_threshold: Fraction of a value's TTL after which
                get_or_compute refreshes it in the background
            clock: Wall-clock time source
            refresh_workers: Threads available for background refreshes
        """
        self.redis = redis_client
        self.memory_ttl = memory_ttl
        self.redis_ttl = redis_ttl
        self.max_entries = max_entries
        self.refresh_threshold = refresh_threshold
        self._clock = clock

        self._memory: Dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._stats = {'hits': 0, 'misses': 0, 'sets': 0, 'deletes': 0}
        self._writes_since_purge = 0

        self._executor = ThreadPoolExecutor(max_workers=refresh_workers, thread_name_prefix='cache-refresh')
        self._refreshing: Set[str] = set()
        self._pending: Set[Future] = set()
        self._closed = False

    @staticmethod
    def generate_key(prefix: str, resume_text: str, job_description: str = "") -> str:
        """
        Stable key over the operation prefix and truncated inputs.

        Args:
            prefix: Operation prefix, e.g. "ats_v2"
            resume_text: Resume text (first 500 chars are hashed)
            job_description: Job description (first 200 chars are hashed)

        Returns:
            "<prefix>:<sha256 hex>"
        """
        payload = json.dumps(
            {'resume': resume_text[:RESUME_KEY_CHARS], 'job': (job_description or '')[:JOB_KEY_CHARS]},
            sort_keys=True,
            ensure_ascii=False,
        )
        digest = hashlib.sha256(payload.encode('utf-8')).hexdigest()
        return f"{prefix}:{digest}"

    # ------------------------------------------------------------------
    # Basic operations
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss."""
        entry = self._lookup(key)
        return None if entry is None else copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Store a value in both tiers.

        Args:
            key: Cache key
            value: JSON-serializable value (None is not cacheable)
            ttl: Value lifetime in seconds; defaults to the Redis TTL, or
                the memory TTL when no Redis tier is configured. With Redis,
                tier 1 keeps the value for at most the memory TTL and
                re-warms from Redis until ``ttl`` runs out. Memory-only
                entries live for the full ``ttl``.

        Returns:
            True if at least one tier stored the value
        """
        if value is None:
            return False

        now = self._clock()
        if ttl is None:
            ttl = self.redis_ttl if self.redis is not None else self.memory_ttl
        memory_lifetime = min(ttl, self.memory_ttl) if self.redis is not None else ttl

        entry = CacheEntry(
            value=copy.deepcopy(value),
            stored_at=now,
            ttl=ttl,
            expires_at=now + memory_lifetime,
        )
        with self._lock:
            self._store_memory(key, entry)
            self._stats['sets'] += 1

        if self.redis is not None:
            envelope = {'value': value, 'stored_at': now, 'ttl': ttl}
            try:
                self.redis.set(key, envelope, ttl=int(ttl))
            except CacheError as e:
                logger.warning(f"Redis cache unavailable on set, memory tier only: {e}")

        return True

    def delete(self, key: str) -> bool:
        """Remove a key from both tiers."""
        with self._lock:
            removed = self._memory.pop(key, None) is not None

        if self.redis is not None:
            try:
                removed = self.redis.delete(key) or removed
            except CacheError as e:
                logger.warning(f"Redis cache unavailable on delete: {e}")

        if removed:
            with self._lock:
                self._stats['deletes'] += 1
        return removed

    def clear(self):
        """Clear the in-process tier. The shared Redis tier is never bulk-cleared."""
        with self._lock:
            count = len(self._memory)
            self._memory.clear()
        logger.info(f"Memory cache cleared ({count} entries)")

    def purge_expired(self) -> int:
        """Drop expired tier-1 entries; returns how many were removed."""
        with self._lock:
            return self._purge_expired_locked()

    # ------------------------------------------------------------------
    # Stale-while-revalidate
    # ------------------------------------------------------------------

    def get_or_compute(self, key: str, producer: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """
        Return the cached value or compute and store it.

        A cached value older than ``refresh_threshold`` of its own TTL is
        returned immediately and refreshed in the background. Background
        refresh failures are logged only; the stale value stays valid until
        it expires. Producer errors on a miss propagate to the caller.

        Args:
            key: Cache key
            producer: Zero-argument callable computing a fresh value
            ttl: Lifetime for a newly computed value

        Returns:
            Cached or freshly computed value
        """
        entry = self._lookup(key)
        if entry is not None:
            if entry.age(self._clock()) / entry.ttl > self.refresh_threshold:
                self._schedule_refresh(key, producer, ttl)
            return copy.deepcopy(entry.value)

        value = producer()
        self.set(key, value, ttl)
        return value

    def wait_for_background_refreshes(self, timeout: Optional[float] = None) -> bool:
        """Block until scheduled refreshes finish; True if none are still running."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_refreshes: bool = True):
        """Stop the background refresh pool."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait_for_refreshes)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def stats(self) -> dict:
        """Hit/miss counters and tier-1 size."""
        with self._lock:
            stats = dict(self._stats)
            stats['memory_entries'] = len(self._memory)
        lookups = stats['hits'] + stats['misses']
        stats['hit_rate'] = f"{(stats['hits'] / lookups * 100) if lookups else 0:.2f}%"
        stats['redis_enabled'] = self.redis is not None
        return stats

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lookup(self, key: str) -> Optional[CacheEntry]:
        now = self._clock()
        with self._lock:
            entry = self._memory.get(key)
            if entry is not None and entry.is_expired(now):
                del self._memory[key]
                entry = None
            if entry is not None:
                self._stats['hits'] += 1
                return entry

        entry = self._lookup_redis(key, now)

        with self._lock:
            if entry is None:
                self._stats['misses'] += 1
                return None
            self._store_memory(key, entry)
            self._stats['hits'] += 1
        logger.debug(f"Re-warmed memory cache from Redis: {key}")
        return entry

    def _lookup_redis(self, key: str, now: float) -> Optional[CacheEntry]:
        if self.redis is None:
            return None
        try:
            envelope = self.redis.get(key)
        except CacheError as e:
            logger.warning(f"Redis cache unavailable, treating as miss: {e}")
            return None

        if not isinstance(envelope, dict) or 'value' not in envelope:
            return None
        try:
            stored_at = float(envelope.get('stored_at', now))
            ttl = float(envelope.get('ttl', self.redis_ttl))
        except (TypeError, ValueError):
            return None
        if ttl <= 0 or now - stored_at >= ttl:
            return None

        remaining = stored_at + ttl - now
        return CacheEntry(
            value=envelope['value'],
            stored_at=stored_at,
            ttl=ttl,
            expires_at=now + min(self.memory_ttl, remaining),
        )

    def _store_memory(self, key: str, entry: CacheEntry):
        # Overwrites keep their original insertion position
        self._memory[key] = entry

        self._writes_since_purge += 1
        if self._writes_since_purge >= PURGE_INTERVAL:
            self._purge_expired_locked()

        while len(self._memory) > self.max_entries:
            oldest = next(iter(self._memory))
            del self._memory[oldest]
            logger.debug(f"Evicted oldest memory cache entry: {oldest}")

    def _purge_expired_locked(self) -> int:
        self._writes_since_purge = 0
        now = self._clock()
        expired = [key for key, entry in self._memory.items() if entry.is_expired(now)]
        for key in expired:
            del self._memory[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired memory cache entries")
        return len(expired)

    def _schedule_refresh(self, key: str, producer: Callable[[], Any], ttl: Optional[int]):
        with self._lock:
            if self._closed or key in self._refreshing:
                return
            self._refreshing.add(key)
            future = self._executor.submit(self._refresh, key, producer, ttl)
            self._pending.add(future)
        future.add_done_callback(self._refresh_done)
        logger.debug(f"Scheduled background refresh: {key}")

    def _refresh(self, key: str, producer: Callable[[], Any], ttl: Optional[int]):
        try:
            self.set(key, producer(), ttl)
        except Exception as e:
            logger.warning(f"Background refresh failed for {key}: {e}")
        finally:
            with self._lock:
                self._refreshing.discard(key)

    def _refresh_done(self, future: Future):
        with self._lock:
            self._pending.discard(future)
