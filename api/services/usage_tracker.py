# api/services/usage_tracker.py
"""
Token usage and cost accounting.

Each LLM call is recorded with its token counts and estimated cost.
Running totals are kept in memory; when a file path is configured they are
also written to disk as JSON so they survive restarts.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from services.llm_service import LLMResponse, estimate_cost

logger = logging.getLogger(__name__)


def _empty_totals() -> Dict[str, Any]:
    return {
        "requests": 0,
        "inputTokens": 0,
        "outputTokens": 0,
        "cost": 0.0,
        "byEndpoint": {},
        "updatedAt": None,
    }


class UsageTracker:
    """
    Accumulates usage across requests.

    Usage:
        tracker = UsageTracker(input_rate=3.0, output_rate=15.0, path="usage.json")
        record = tracker.record("analyze", response)
        print(record["cost"])
        print(tracker.summary())
    """

    def __init__(
        self,
        input_rate: float,
        output_rate: float,
        path: Optional[str] = None,
    ):
        self.input_rate = input_rate
        self.output_rate = output_rate
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._totals = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path or not self.path.exists():
            return _empty_totals()
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to read usage file {self.path}: {e}")
            return _empty_totals()

        totals = _empty_totals()
        totals.update({k: data[k] for k in totals if k in data})
        return totals

    def _save(self) -> None:
        if not self.path:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._totals, f, indent=2)
        except IOError as e:
            logger.warning(f"Failed to write usage file {self.path}: {e}")

    def record(self, endpoint: str, response: LLMResponse) -> Dict[str, Any]:
        """
        Add one call to the totals.

        Returns:
            {"inputTokens": ..., "outputTokens": ..., "cost": ...} for this call
        """
        cost = estimate_cost(
            response.input_tokens,
            response.output_tokens,
            self.input_rate,
            self.output_rate,
        )

        with self._lock:
            t = self._totals
            t["requests"] += 1
            t["inputTokens"] += response.input_tokens
            t["outputTokens"] += response.output_tokens
            t["cost"] = round(t["cost"] + cost, 6)

            per = t["byEndpoint"].setdefault(endpoint, {"requests": 0, "cost": 0.0})
            per["requests"] += 1
            per["cost"] = round(per["cost"] + cost, 6)

            t["updatedAt"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
            self._save()

        return {
            "inputTokens": response.input_tokens,
            "outputTokens": response.output_tokens,
            "cost": round(cost, 6),
        }

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            return json.loads(json.dumps(self._totals))
