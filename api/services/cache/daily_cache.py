"""
Daily Result Cache

Holds one generated result per calendar day (the daily devotional), so
every request on the same day sees the same verse and only the first one
pays for an LLM call.
"""

import threading
from collections import OrderedDict
from datetime import date
from typing import Any, Dict, Optional


class DailyResultCache:
    """Date-keyed cache that keeps the most recent `max_days` entries."""

    def __init__(self, max_days: int = 7):
        self._results: OrderedDict[str, Dict[str, Any]] = OrderedDict()
        self._max_days = max_days
        self._lock = threading.Lock()

    @staticmethod
    def key_for(day: Optional[date] = None) -> str:
        return (day or date.today()).isoformat()

    def get(self, day: Optional[date] = None) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._results.get(self.key_for(day))

    def put(self, result: Dict[str, Any], day: Optional[date] = None) -> None:
        key = self.key_for(day)
        with self._lock:
            self._results[key] = result
            # ISO dates sort chronologically
            for stale in sorted(self._results)[:-self._max_days]:
                del self._results[stale]

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)
