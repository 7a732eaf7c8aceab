# api/tests/test_config.py
"""
Tests for environment-driven settings and translation resolution.
"""

import pytest

from core.config import ALLOWED_TRANSLATIONS, Settings
from services.interpretation_service import resolve_translation
from utils.errors import UnsupportedTranslation


def test_defaults(monkeypatch):
    for name in ("ANTHROPIC_API_KEY", "CHAPTER_CACHE_SIZE", "DEFAULT_TRANSLATION", "USAGE_FILE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.anthropic_api_key is None
    assert settings.chapter_cache_size == 250
    assert settings.default_translation == "KJV"
    assert settings.usage_file is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.setenv("CHAPTER_CACHE_SIZE", "10")
    monkeypatch.setenv("TEXT_FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("DEFAULT_TRANSLATION", "esv")
    monkeypatch.setenv("RATE_LIMIT_MAX", "")

    settings = Settings.from_env()

    assert settings.anthropic_api_key == "sk-test"
    assert settings.chapter_cache_size == 10
    assert settings.text_fetch_timeout == 2.5
    assert settings.default_translation == "ESV"
    assert settings.rate_limit_max == 20


def test_resolve_translation():
    assert resolve_translation(None, "KJV") == "KJV"
    assert resolve_translation("  ", "kjv") == "KJV"
    assert resolve_translation("niv", "KJV") == "NIV"
    assert "NET" in ALLOWED_TRANSLATIONS

    with pytest.raises(UnsupportedTranslation) as exc:
        resolve_translation("MSG", "KJV")
    assert exc.value.code == "unsupported_translation"


def test_resolve_translation_rejects_non_strings():
    for code in (5, ["KJV"], {"code": "KJV"}):
        with pytest.raises(UnsupportedTranslation):
            resolve_translation(code, "KJV")
