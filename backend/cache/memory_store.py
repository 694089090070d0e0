"""
Memory Store Implementation

In-memory key/value storage for upstream directory responses.

Features:
- Per-entry TTL with a configurable default
- Injectable clock (tests advance time without sleeping)
- Operations never raise; a broken store behaves as an always-miss cache
"""

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """
    Cache entry data structure
    """
    key: str                         # Lookup key (user id, "github_<login>", ...)
    value: Any                       # Opaque resolved payload
    expires_at: float                # Clock reading after which the entry is gone

    def is_expired(self, now: float) -> bool:
        """An entry is visible only while now < expires_at"""
        return now >= self.expires_at


class MemoryStore:
    """
    In-memory TTL store

    Features:
    - Time-based expiry only (no capacity bound)
    - Expired entries are dropped lazily on access
    - Thread-safe with Lock
    """

    def __init__(
        self,
        default_ttl: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize memory store

        Args:
            default_ttl: Default time-to-live in seconds
            clock: Monotonic time source, injectable for tests
        """
        self._store: Dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._default_ttl = default_ttl
        self._clock = clock

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value

        Args:
            key: Cache key

        Returns:
            The stored value if present and not expired, None otherwise
        """
        try:
            with self._lock:
                entry = self._store.get(key)
                if entry is None:
                    return None
                if entry.is_expired(self._clock()):
                    del self._store[key]
                    return None
                return entry.value
        except Exception as e:
            logger.warning(f"[MemoryStore] get failed for {key!r}, treating as miss: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Store a value, overwriting any previous entry for the key

        Args:
            key: Cache key
            value: Payload to store
            ttl: Optional per-call TTL in seconds
        """
        try:
            with self._lock:
                lifetime = self._default_ttl if ttl is None else ttl
                self._store[key] = CacheEntry(
                    key=key,
                    value=value,
                    expires_at=self._clock() + lifetime,
                )
        except Exception as e:
            logger.warning(f"[MemoryStore] set failed for {key!r}: {e}")

    def delete(self, key: str) -> bool:
        """
        Delete a cache entry

        Returns:
            True if deleted, False if not found
        """
        try:
            with self._lock:
                return self._store.pop(key, None) is not None
        except Exception as e:
            logger.warning(f"[MemoryStore] delete failed for {key!r}: {e}")
            return False

    def clear(self) -> int:
        """
        Clear all cache entries

        Returns:
            Number of entries deleted
        """
        with self._lock:
            count = len(self._store)
            self._store.clear()
            return count

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self._lock:
            self._cleanup_expired()
            return {
                "total_entries": len(self._store),
                "default_ttl_seconds": self._default_ttl,
            }

    def _cleanup_expired(self) -> int:
        """
        Remove expired entries (internal, assumes lock held)

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [k for k, v in self._store.items() if v.is_expired(now)]
        for k in expired:
            del self._store[k]
        return len(expired)
