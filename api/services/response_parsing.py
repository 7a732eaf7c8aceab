# api/services/response_parsing.py

"""
Helpers for pulling a JSON payload out of free-form LLM output.

Models are asked for prose plus one ```json fenced block, but what comes
back varies: no fence, several fences, a fence tagged "javascript", a bare
object in the middle of a paragraph, or JSON with nothing around it. The
extractor tries, in order:

1. fences tagged json (case-insensitive)
2. any fence whose body mentions the expected key
3. a brace-delimited object in the text that has the expected key
4. the whole response

The first attempt that parses wins. The extractor only checks that the
result is valid JSON; shape checks belong to services.payloads.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```[ \t]*([A-Za-z0-9_+.-]*)[ \t]*\n?(.*?)```", re.DOTALL)
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class ExtractedPayload:
    """
    Result of extraction.

    data is None (and residual_text is the untouched input) when nothing
    parsed. source names the strategy that matched:
    "json_fence" | "keyed_fence" | "inline_object" | "whole_text" | None
    """
    data: Any
    residual_text: str
    source: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.data is not None


def _try_json(raw: str) -> Tuple[bool, Any]:
    try:
        return True, json.loads(raw)
    except (TypeError, ValueError):
        return False, None


def _remove_span(text: str, span: Tuple[int, int]) -> str:
    start, end = span
    remaining = text[:start].rstrip() + "\n\n" + text[end:].lstrip()
    return _EXTRA_BLANK_LINES.sub("\n\n", remaining).strip()


def _fences(text: str) -> Iterator[Tuple[str, str, Tuple[int, int]]]:
    for match in _FENCE.finditer(text):
        yield match.group(1).lower(), match.group(2), match.span()


def _inline_objects(text: str, quoted_key: str) -> Iterator[Tuple[Any, Tuple[int, int]]]:
    """
    Yield (object, span) for brace-delimited objects that contain the key.

    For each occurrence of the quoted key, candidate opening braces before
    it are tried nearest first.
    """
    key = json.loads(quoted_key)
    search_from = 0
    while True:
        key_pos = text.find(quoted_key, search_from)
        if key_pos < 0:
            return
        brace = text.rfind("{", 0, key_pos)
        while brace >= 0:
            try:
                obj, end = _decoder.raw_decode(text, brace)
            except ValueError:
                obj, end = None, -1
            if isinstance(obj, dict) and key in obj and end > key_pos:
                yield obj, (brace, end)
                break
            brace = text.rfind("{", 0, brace)
        search_from = key_pos + len(quoted_key)


def extract_payload(text: str, expected_key: str) -> ExtractedPayload:
    """
    Locate and parse the JSON payload in a model response.

    Args:
        text: Raw model output
        expected_key: Top-level key the payload should carry
                      (e.g., "keyWords", "passages", "crossReferences")

    Returns:
        ExtractedPayload. On success residual_text is the input with the
        matched block removed and trimmed; on failure data is None and
        residual_text is the input unchanged.
    """
    if not text:
        return ExtractedPayload(data=None, residual_text=text or "")

    quoted_key = json.dumps(expected_key)
    fences = list(_fences(text))

    # 1. Explicit json fences
    for tag, body, span in fences:
        if tag != "json":
            continue
        ok, data = _try_json(body.strip())
        if ok and data is not None:
            return ExtractedPayload(data, _remove_span(text, span), "json_fence")
        logger.debug("json-tagged fence did not parse, trying other strategies")

    # 2. Any fence mentioning the key
    for tag, body, span in fences:
        if quoted_key not in body:
            continue
        ok, data = _try_json(body.strip())
        if ok and data is not None:
            return ExtractedPayload(data, _remove_span(text, span), "keyed_fence")

    # 3. Inline object carrying the key
    for data, span in _inline_objects(text, quoted_key):
        return ExtractedPayload(data, _remove_span(text, span), "inline_object")

    # 4. The whole response
    ok, data = _try_json(text.strip())
    if ok and data is not None:
        return ExtractedPayload(data, "", "whole_text")

    logger.warning(f"No JSON payload with key {expected_key!r} found in model output")
    return ExtractedPayload(data=None, residual_text=text)
