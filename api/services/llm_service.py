# api/services/llm_service.py
"""
LLM Provider Layer

A narrow interface over the model API: one user-role prompt in, response
text and token usage out. Prompt wording lives in core.prompt; JSON
extraction lives in services.response_parsing.

Usage:
    from services.llm_service import AnthropicProvider, estimate_cost

    claude = AnthropicProvider(api_key="...", model="claude-sonnet-4-5-20250929")
    response = claude.complete("Explain John 3:16 ...", max_tokens=2000)
    print(response.text)
    print(estimate_cost(response.input_tokens, response.output_tokens, 3.0, 15.0))
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from utils.errors import ConfigurationMissing, UpstreamUnavailable
from utils.http_retry import request_with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LLMResponse:
    """Text and token usage from one completion."""
    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""

    @property
    def usage(self) -> Dict[str, int]:
        return {"inputTokens": self.input_tokens, "outputTokens": self.output_tokens}


def estimate_cost(
    input_tokens: int,
    output_tokens: int,
    input_rate: float,
    output_rate: float,
) -> float:
    """
    Linear cost in USD.

    Rates are USD per million tokens.
    """
    return (input_tokens / 1e6) * input_rate + (output_tokens / 1e6) * output_rate


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Send a single user-role prompt and return the model's reply.

        Args:
            prompt: The full prompt text.
            model: Model identifier (provider-specific). Uses default if None.
            max_tokens: Output token cap. Uses default if None.
            **kwargs: Additional provider-specific parameters.
        """
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True if this provider is properly configured."""
        pass


class AnthropicProvider(LLMProvider):
    """
    Anthropic (Claude) Messages API provider.

    Note: the response content is a list of blocks, not a string; text
    blocks are concatenated.
    """

    ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_VERSION = "2023-06-01"
    DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
    DEFAULT_TIMEOUT = 120  # seconds
    DEFAULT_MAX_TOKENS = 4096

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 2,
    ):
        self._api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.max_tokens = max_tokens or self.DEFAULT_MAX_TOKENS
        self.timeout = timeout
        self.max_retries = max_retries

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Send a prompt to Anthropic (Claude).

        Raises:
            ConfigurationMissing: ANTHROPIC_API_KEY is not set
            UpstreamTimeout: The request exceeded the timeout
            UpstreamUnavailable: HTTP error or empty response
        """
        if not self.is_configured():
            raise ConfigurationMissing("Anthropic API key not configured (ANTHROPIC_API_KEY)")

        model = model or self.model

        payload = {
            "model": model,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

        # Pass through supported kwargs
        for key in ("temperature", "top_p", "top_k", "stop_sequences"):
            if key in kwargs:
                payload[key] = kwargs[key]

        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": self.ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

        response = request_with_retry(
            "POST",
            self.ANTHROPIC_API_URL,
            json=payload,
            headers=headers,
            timeout=kwargs.get("timeout", self.timeout),
            max_retries=self.max_retries,
        )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"Anthropic returned invalid JSON: {e}")

        # Parse response: content is a LIST of blocks
        content_blocks = data.get("content", [])
        if not content_blocks:
            raise UpstreamUnavailable("Anthropic returned no content in response")

        text = "".join(
            block.get("text", "")
            for block in content_blocks
            if block.get("type") == "text"
        )

        usage = data.get("usage", {})
        result = LLMResponse(
            text=text,
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0),
            model=data.get("model", model),
        )
        logger.info(
            f"Anthropic {result.model}: {result.input_tokens} in / "
            f"{result.output_tokens} out tokens"
        )
        return result
