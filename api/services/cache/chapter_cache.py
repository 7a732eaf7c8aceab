"""
Chapter Cache

In-memory cache of fetched chapters, keyed by (translation, book, chapter).

Eviction is first-in-first-out by insertion: reading an entry does not
promote it. Entries never expire; they live until the process exits or
capacity pushes them out.
"""

import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)

ChapterKey = Tuple[str, int, int]


class ChapterCache:
    """
    Bounded FIFO cache shared by all request threads.

    Concurrent misses on the same cold key may both fetch upstream; the
    second insert simply replaces the first without changing its position.
    """

    def __init__(self, max_size: int = 250):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._cache: OrderedDict[Hashable, Any] = OrderedDict()
        self._max_size = max_size
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(translation: str, book_number: int, chapter: int) -> ChapterKey:
        return (translation.upper(), int(book_number), int(chapter))

    def get(self, key: Hashable) -> Optional[Any]:
        """Get cached chapter, or None on a miss."""
        with self._lock:
            if key in self._cache:
                self._hits += 1
                return self._cache[key]
            self._misses += 1
            return None

    def put(self, key: Hashable, value: Any) -> None:
        """Store a chapter, evicting the oldest insert when over capacity."""
        with self._lock:
            self._cache[key] = value
            while len(self._cache) > self._max_size:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"Evicted chapter {evicted} from cache")

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def keys(self) -> list:
        """Keys in insertion order, oldest first."""
        with self._lock:
            return list(self._cache.keys())

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._cache),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total if total > 0 else 0,
            }
