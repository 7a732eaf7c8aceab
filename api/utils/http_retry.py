# api/utils/http_retry.py
"""
HTTP requests with bounded retry for rate limits and transient errors.

Shared by the Bible text client and the LLM provider. Failures are raised
as the API's upstream errors so routes can render them directly.

Usage:
    from utils.http_retry import request_with_retry

    response = request_with_retry(
        "POST",
        "https://api.anthropic.com/v1/messages",
        json=payload,
        headers=headers,
        timeout=120,
    )
    data = response.json()
"""

import logging
import time
import requests
from typing import Optional

from utils.errors import UpstreamTimeout, UpstreamUnavailable

logger = logging.getLogger(__name__)


def _backoff(attempt: int) -> int:
    return min(2 ** attempt, 30)


def request_with_retry(
    method: str,
    url: str,
    json: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: float = 120,
    max_retries: int = 0,
    retry_timeouts: bool = False,
    sleep=time.sleep,
) -> requests.Response:
    """
    Send a request, retrying transient failures up to max_retries times.

    Retry behavior:
    - 429 (rate limit): Respects Retry-After header, falls back to exponential backoff
    - 5xx (server error): Exponential backoff
    - Connection errors: Exponential backoff
    - Timeout: Retried only when retry_timeouts is set
    - 4xx (client error): No retry (caller's problem)

    max_retries=0 means a single attempt.

    Returns:
        requests.Response on success

    Raises:
        UpstreamTimeout: The final attempt timed out
        UpstreamUnavailable: Error statuses or connection failures on the final attempt
        ValueError: max_retries is negative
    """
    if max_retries < 0:
        raise ValueError("max_retries must be zero or more")

    # The final attempt always returns or raises inside the loop
    attempts = max_retries + 1

    for attempt in range(attempts):
        final = attempt == attempts - 1
        try:
            response = requests.request(
                method, url, json=json, headers=headers, timeout=timeout
            )

            # Rate limited: back off and retry
            if response.status_code == 429 and not final:
                retry_after = response.headers.get("retry-after")
                try:
                    wait = int(retry_after) if retry_after else _backoff(attempt + 1)
                except ValueError:
                    wait = _backoff(attempt + 1)

                logger.info(
                    f"Rate limited by {url}, waiting {wait}s "
                    f"(attempt {attempt + 1}/{attempts})"
                )
                sleep(wait)
                continue

            # Server error: retry with backoff
            if response.status_code >= 500 and not final:
                wait = _backoff(attempt)
                logger.warning(
                    f"Server error {response.status_code} from {url}, "
                    f"retrying in {wait}s (attempt {attempt + 1}/{attempts})"
                )
                sleep(wait)
                continue

            response.raise_for_status()
            return response

        except requests.Timeout:
            if retry_timeouts and not final:
                logger.warning(f"Request to {url} timed out, retrying")
                continue
            raise UpstreamTimeout(f"Request to {url} timed out after {timeout}s")

        except requests.ConnectionError as e:
            if not final:
                wait = _backoff(attempt)
                logger.warning(
                    f"Connection error to {url}, retrying in {wait}s: {e}"
                )
                sleep(wait)
                continue
            raise UpstreamUnavailable(
                f"Connection to {url} failed after {attempts} attempts: {e}"
            )

        except requests.HTTPError as e:
            # Extract provider-specific error message if available
            try:
                error_data = e.response.json()
                error_msg = error_data.get("error", {}).get("message", str(e))
            except Exception:
                error_msg = str(e)
            raise UpstreamUnavailable(f"API error from {url}: {error_msg}")

        except requests.RequestException as e:
            raise UpstreamUnavailable(f"Request to {url} failed: {e}")
