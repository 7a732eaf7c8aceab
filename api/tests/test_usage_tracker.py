# api/tests/test_usage_tracker.py
"""
Tests for token usage accounting.
"""

import json

import pytest

from services.llm_service import LLMResponse
from services.usage_tracker import UsageTracker


def test_record_and_summary():
    tracker = UsageTracker(input_rate=3.0, output_rate=15.0)

    record = tracker.record("analyze", LLMResponse("x", input_tokens=1000, output_tokens=500))
    tracker.record("search", LLMResponse("y", input_tokens=2000, output_tokens=0))

    assert record == {"inputTokens": 1000, "outputTokens": 500, "cost": pytest.approx(0.0105)}

    summary = tracker.summary()
    assert summary["requests"] == 2
    assert summary["inputTokens"] == 3000
    assert summary["outputTokens"] == 500
    assert summary["cost"] == pytest.approx(0.0165)
    assert summary["byEndpoint"]["analyze"]["requests"] == 1
    assert summary["updatedAt"].endswith("Z")


def test_summary_is_a_copy():
    tracker = UsageTracker(3.0, 15.0)
    tracker.record("analyze", LLMResponse("x", 10, 10))

    summary = tracker.summary()
    summary["byEndpoint"]["analyze"]["requests"] = 99

    assert tracker.summary()["byEndpoint"]["analyze"]["requests"] == 1


def test_persists_to_file(tmp_path):
    path = tmp_path / "usage" / "usage.json"
    tracker = UsageTracker(3.0, 15.0, path=str(path))
    tracker.record("analyze", LLMResponse("x", 100, 50))

    saved = json.loads(path.read_text())
    assert saved["requests"] == 1

    reloaded = UsageTracker(3.0, 15.0, path=str(path))
    assert reloaded.summary()["inputTokens"] == 100


def test_corrupt_file_starts_fresh(tmp_path):
    path = tmp_path / "usage.json"
    path.write_text("{not json")

    tracker = UsageTracker(3.0, 15.0, path=str(path))

    assert tracker.summary()["requests"] == 0
