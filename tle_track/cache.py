"""
Memoization Cache

Per-tracker store for derived values keyed by structured tuples of
(operation, TLE fingerprint, arguments...), plus the antemeridian crossing
history of each TLE.

Entries are never expired. A tracker follows a handful of satellites, so the
cache stays small; pass max_entries to bound it with least-recently-used
eviction when tracking large catalogs.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class CrossingHistory:
    """
    Antemeridian crossings discovered for one TLE.

    Attributes:
        times_ms: Crossing timestamps in discovery order (not sorted)
        exhausted: True once a search failed to converge; the orbit has no
            discoverable crossing and later searches are skipped
    """

    times_ms: List[int] = field(default_factory=list)
    exhausted: bool = False


class TLECache:
    """Key/value memoization with hit/miss counters."""

    def __init__(self, max_entries: Optional[int] = None):
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._crossings: Dict[str, CrossingHistory] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def get(self, key: Hashable, default: Any = None) -> Any:
        if key not in self._entries:
            self.misses += 1
            return default
        self.hits += 1
        if self.max_entries is not None:
            self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key: Hashable, value: Any) -> Any:
        self._entries[key] = value
        if self.max_entries is not None:
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry %s", evicted[0] if isinstance(evicted, tuple) else evicted)
        return value

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for key, computing and storing it on a miss."""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            logger.debug("Cache miss for %s", key[0] if isinstance(key, tuple) else key)
            value = self.set(key, compute())
        return value

    def crossing_history(self, fingerprint: str) -> CrossingHistory:
        """Crossing history of a TLE, created empty on first use."""
        history = self._crossings.get(fingerprint)
        if history is None:
            history = self._crossings[fingerprint] = CrossingHistory()
        return history

    def record_crossing(self, fingerprint: str, time_ms: int) -> None:
        self.crossing_history(fingerprint).times_ms.append(time_ms)

    def mark_no_crossings(self, fingerprint: str) -> None:
        history = self.crossing_history(fingerprint)
        history.times_ms.clear()
        history.exhausted = True

    def clear(self) -> None:
        self._entries.clear()
        self._crossings.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> Dict[str, Optional[int]]:
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "max_entries": self.max_entries,
            "tracked_crossings": len(self._crossings),
        }
