"""In-memory key-value cache with per-entry expiration."""
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_TTL = 5 * 60  # seconds


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and its lifetime, in clock seconds."""
    data: T
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class CacheStats:
    """Entry counts as reported by TTLCache.get_stats()."""
    valid: int
    expired: int
    total: int

    def to_dict(self) -> Dict[str, int]:
        return {"valid": self.valid, "expired": self.expired, "total": self.total}


class TTLCache(Generic[T]):
    """
    Expiring key-value store.

    Expired entries are evicted lazily: `get`, `has` and `lookup` drop the
    entry they touch, and `size` sweeps the whole store. `get_stats` only
    counts, so it can report expired entries that are still held.

    Access is guarded by a re-entrant lock because batch lookups read and
    write the cache from worker threads.
    """

    def __init__(self, default_ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}
        self._lock = threading.RLock()

    def set(self, key: str, data: T, ttl: Optional[float] = None) -> None:
        """Store data under key, replacing any existing entry."""
        now = self._clock()
        time_to_live = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = CacheEntry(data=data, created_at=now, expires_at=now + time_to_live)

    def lookup(self, key: str) -> Tuple[bool, Optional[T]]:
        """
        Return (hit, value) for key.

        Unlike `get`, this tells a cached None apart from a miss, which is
        how negative results are read back.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return False, None
            return True, entry.data

    def get(self, key: str) -> Optional[T]:
        """Return the unexpired value for key, or None."""
        return self.lookup(key)[1]

    def has(self, key: str) -> bool:
        return self.lookup(key)[0]

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        """Sweep expired entries, then count what is left."""
        with self._lock:
            self._clean_expired()
            return len(self._entries)

    def get_stats(self) -> CacheStats:
        """Count valid and expired entries without evicting anything."""
        now = self._clock()
        with self._lock:
            expired = sum(1 for entry in self._entries.values() if entry.is_expired(now))
            total = len(self._entries)
        return CacheStats(valid=total - expired, expired=expired, total=total)

    def _clean_expired(self) -> None:
        now = self._clock()
        stale = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in stale:
            del self._entries[key]
