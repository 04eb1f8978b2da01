"""
Result Cache
============

In-memory cache of retrieval results, keyed by (user, normalised query).

- Entries expire ttl_seconds after insertion (checked lazily on lookup,
  or in bulk via clear_expired()).
- When full, the least recently used entry is evicted.
- Results are never shared across users: vector search is scoped per user.
- A single lock guards the map; every critical section is O(1).
"""

import threading
import time
import structlog
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from recall.retrieval.models import RetrievalResult

log = structlog.get_logger()

CacheKey = Tuple[str, str]


@dataclass
class CacheEntry:
    query_text: str
    user_id: str
    result: "RetrievalResult"
    created_at: float
    hits: int = 0


@dataclass
class CacheStats:
    """
    Snapshot of the cache.

    Attributes:
        entries: Number of live entries (expired ones may still be counted
                 until looked up or swept)
        total_hits: Sum of hit counts over current entries
        max_size: Capacity before LRU eviction
        ttl_seconds: Entry lifetime
        details: Per-entry query, user, hits and age (seconds)
    """
    entries: int
    total_hits: int
    max_size: int
    ttl_seconds: float
    details: List[Dict[str, object]] = field(default_factory=list)


def normalize_query(query_text: str) -> str:
    return (query_text or "").strip().lower()


class ResultCache:
    """
    Time-bounded LRU cache for RetrievalResult.

    Args:
        ttl_seconds: Lifetime of an entry from insertion (default: 5 minutes)
        max_size: Max entries before LRU eviction (default: 100)
        clock: Monotonic clock in seconds; injectable for tests
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_size: int = 100,
        clock: Optional[Callable[[], float]] = None
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds}")
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")

        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def make_key(query_text: str, user_id: str) -> CacheKey:
        return (user_id, normalize_query(query_text))

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self.ttl_seconds

    def get(self, query_text: str, user_id: str) -> Optional["RetrievalResult"]:
        """
        Look up a cached result.

        Returns:
            A copy of the cached result with ``metadata.cache_hit=True``, or
            None on miss/expiry.
        """
        key = self.make_key(query_text, user_id)
        now = self._clock()

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._is_expired(entry, now):
                del self._entries[key]
                log.debug("Cache entry expired", user_id=user_id, query=query_text)
                return None

            entry.hits += 1
            self._entries.move_to_end(key)
            hits = entry.hits
            age = now - entry.created_at
            result = entry.result

        log.debug("Cache hit", user_id=user_id, query=query_text, hits=hits, age_s=round(age))
        return result.as_cache_hit()

    def set(self, query_text: str, user_id: str, result: "RetrievalResult") -> None:
        """Store a snapshot of ``result``, replacing any entry for the same key."""
        key = self.make_key(query_text, user_id)
        entry = CacheEntry(
            query_text=query_text,
            user_id=user_id,
            result=result.snapshot(),
            created_at=self._clock(),
        )

        with self._lock:
            self._entries.pop(key, None)
            # Loop: max_size may have shrunk through update_config()
            while len(self._entries) >= self.max_size:
                evicted_key, _ = self._entries.popitem(last=False)
                log.debug("Cache full, evicted LRU entry", user_id=evicted_key[0], query=evicted_key[1])
            self._entries[key] = entry
            size = len(self._entries)

        log.debug("Cached result", user_id=user_id, query=query_text, size=size, max_size=self.max_size)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        log.info("Result cache cleared")

    def clear_expired(self) -> int:
        """Remove every expired entry. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
            for key in expired:
                del self._entries[key]

        if expired:
            log.info("Removed expired cache entries", removed=len(expired))
        return len(expired)

    def stats(self) -> CacheStats:
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())

        return CacheStats(
            entries=len(entries),
            total_hits=sum(e.hits for e in entries),
            max_size=self.max_size,
            ttl_seconds=self.ttl_seconds,
            details=[
                {
                    "query": e.query_text,
                    "user_id": e.user_id,
                    "hits": e.hits,
                    "age_s": round(now - e.created_at),
                }
                for e in entries
            ],
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
