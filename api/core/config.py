# core/config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load .env
load_dotenv()

# ---- TRANSLATIONS ----
# Codes accepted by the bolls.life text provider that we expose.
ALLOWED_TRANSLATIONS = (
    "KJV",
    "NKJV",
    "NIV",
    "ESV",
    "NASB",
    "NLT",
    "WEB",
    "YLT",
    "ASV",
    "BSB",
    "LSB",
    "CSB17",
    "NET",
)

# Original-language texts, keyed by testament
HEBREW_TRANSLATION = "WLC"
GREEK_TRANSLATION = "TR"

# Lexicon used for Strong's number definitions
DICTIONARY_CODE = "BDBT"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read once at process start."""

    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    llm_max_tokens: int = 4096
    llm_timeout: float = 120
    llm_max_retries: int = 2
    # USD per million tokens
    llm_input_rate: float = 3.0
    llm_output_rate: float = 15.0

    bolls_base_url: str = "https://bolls.life"
    text_fetch_timeout: float = 10
    text_fetch_retries: int = 0
    chapter_cache_size: int = 250
    default_translation: str = "KJV"

    rate_limit_max: int = 20
    rate_limit_window: float = 60

    usage_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            anthropic_model=os.getenv("ANTHROPIC_MODEL", cls.anthropic_model),
            llm_max_tokens=_env_int("LLM_MAX_TOKENS", cls.llm_max_tokens),
            llm_timeout=_env_float("LLM_TIMEOUT", cls.llm_timeout),
            llm_max_retries=_env_int("LLM_MAX_RETRIES", cls.llm_max_retries),
            llm_input_rate=_env_float("LLM_INPUT_RATE", cls.llm_input_rate),
            llm_output_rate=_env_float("LLM_OUTPUT_RATE", cls.llm_output_rate),
            bolls_base_url=os.getenv("BOLLS_BASE_URL", cls.bolls_base_url),
            text_fetch_timeout=_env_float("TEXT_FETCH_TIMEOUT", cls.text_fetch_timeout),
            text_fetch_retries=_env_int("TEXT_FETCH_RETRIES", cls.text_fetch_retries),
            chapter_cache_size=_env_int("CHAPTER_CACHE_SIZE", cls.chapter_cache_size),
            default_translation=os.getenv(
                "DEFAULT_TRANSLATION", cls.default_translation
            ).upper(),
            rate_limit_max=_env_int("RATE_LIMIT_MAX", cls.rate_limit_max),
            rate_limit_window=_env_float("RATE_LIMIT_WINDOW", cls.rate_limit_window),
            usage_file=os.getenv("USAGE_FILE") or None,
        )
