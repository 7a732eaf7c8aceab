# api/tests/conftest.py
"""
Shared fixtures: fake HTTP responses and a scripted LLM.
"""

import json
import os
import sys
from typing import List

import pytest
import requests

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import Settings
from services.cache import ChapterCache, DailyResultCache
from services.interpretation_service import InterpretationService
from services.llm_service import LLMProvider, LLMResponse
from services.references import BollsClient
from services.usage_tracker import UsageTracker


def make_response(status_code: int = 200, data=None, text: str = None, headers=None):
    """Build a real requests.Response with the given body."""
    response = requests.Response()
    response.status_code = status_code
    response.url = "http://test.local/"
    if text is None:
        text = json.dumps(data)
    response._content = text.encode("utf-8")
    if headers:
        response.headers.update(headers)
    return response


class ScriptedLLM(LLMProvider):
    """LLM double that returns queued texts and remembers prompts."""

    def __init__(self, *texts: str, configured: bool = True):
        self.texts: List[str] = list(texts)
        self.prompts: List[str] = []
        self.configured = configured
        self.model = "scripted"

    def is_configured(self) -> bool:
        return self.configured

    def complete(self, prompt, model=None, max_tokens=None, **kwargs):
        self.prompts.append(prompt)
        return LLMResponse(text=self.texts.pop(0), input_tokens=1000, output_tokens=500)


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def settings():
    return Settings(anthropic_api_key="test-key", bolls_base_url="http://bolls.test")


@pytest.fixture
def bolls():
    return BollsClient(ChapterCache(10), base_url="http://bolls.test")


@pytest.fixture
def make_service(bolls, settings):
    """Factory: make_service(*llm_texts) -> (service, llm)."""

    def build(*texts: str):
        llm = ScriptedLLM(*texts)
        tracker = UsageTracker(settings.llm_input_rate, settings.llm_output_rate)
        service = InterpretationService(bolls, llm, tracker, DailyResultCache(), settings)
        return service, llm

    return build
